"""
The endpoint and the credentials of the API server.

Only what the HTTP session needs is here: the server's URL, the identity
to authenticate with, and the TLS materials to trust the server and to be
trusted by it. How they are obtained (kubeconfigs, service accounts, vaults)
is the application's concern, not the reconciler's.
"""
import dataclasses
from typing import Optional, Union

# PEM-encoded, either as is, or base64-encoded once more (as in kubeconfigs and secrets).
PEMData = Union[str, bytes]


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    server: str  # e.g. "https://localhost:6443"
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    ca_path: Optional[str] = None  # e.g. the service account's "ca.crt"
    ca_data: Optional[PEMData] = None
    client_cert_data: Optional[PEMData] = None
    client_key_data: Optional[PEMData] = None
    verify_tls: bool = True

    @property
    def has_client_cert(self) -> bool:
        return bool(self.client_cert_data and self.client_key_data)
