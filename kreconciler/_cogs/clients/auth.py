import base64
import contextlib
import ssl
import tempfile
from typing import Any, Dict, Optional, Union

import aiohttp

from kreconciler._cogs.helpers import versions
from kreconciler._cogs.structs import credentials


class APIContext:
    """
    A container for an aiohttp session and the server's base URL.

    The context is constructed once by the application for every API endpoint
    and then passed explicitly to the object store. It must be constructed
    and closed inside of the event loop that performs the requests::

        async with APIContext(ConnectionInfo(server='https://...')) as context:
            store = APIObjectStore(scheme=scheme, context=context)
            ...
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building.
    server: str

    def __init__(
            self,
            info: credentials.ConnectionInfo,
    ) -> None:
        super().__init__()
        self.server = info.server
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=0, ssl=make_ssl_context(info)),
            headers=make_headers(info),
            auth=make_basic_auth(info),
        )

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session.close()


def make_headers(info: credentials.ConnectionInfo) -> Dict[str, str]:
    headers = {'User-Agent': f'kreconciler/{versions.version or "unknown"}'}
    if info.token:
        headers['Authorization'] = f'Bearer {info.token}'
    return headers


def make_basic_auth(info: credentials.ConnectionInfo) -> Optional[aiohttp.BasicAuth]:
    if info.token or not (info.username and info.password):
        return None
    return aiohttp.BasicAuth(info.username, info.password)


def make_ssl_context(info: credentials.ConnectionInfo) -> ssl.SSLContext:
    """
    Build the TLS context to verify the server and to present the client certificate.

    The client certificate & key can only be loaded from files, so they are
    written to temporary files for the duration of loading. No files are created
    if there is no client certificate: the filesystem can be read-only.
    """
    context = ssl.create_default_context(
        purpose=ssl.Purpose.SERVER_AUTH,
        cafile=info.ca_path,
        cadata=decode_to_pem(info.ca_data) if info.ca_data is not None else None,
    )

    if info.has_client_cert:
        assert info.client_cert_data is not None and info.client_key_data is not None
        with contextlib.ExitStack() as stack:
            cert_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
            cert_file.write(decode_to_pem(info.client_cert_data).encode('ascii'))
            key_file = stack.enter_context(tempfile.NamedTemporaryFile(buffering=0))
            key_file.write(decode_to_pem(info.client_key_data).encode('ascii'))
            context.load_cert_chain(certfile=cert_file.name, keyfile=key_file.name)

    if not info.verify_tls:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    return context


def decode_to_pem(data: Union[str, bytes]) -> str:
    if isinstance(data, str) and data.startswith('-----BEGIN '):
        return data
    elif isinstance(data, bytes) and data.startswith(b'-----BEGIN '):
        return data.decode('ascii')
    else:
        return base64.b64decode(data).decode('ascii')
