"""
The object store: the only way for the engine to read & write the objects.

The engine assumes only five primitive operations, each of them atomic
on a single object, and each of them awaited to its end before the next one.
There are no batches or transactions: the consistency across multiple objects
is eventual and is re-achieved by re-invoking the whole reconciliation pass.

The absence of an object is reported by `get` as `APINotFoundError`
by all stores. All other errors are store-specific, and are treated
by the engine as opaque failures of the operation.
"""
import logging
from typing import List, Optional

from typing_extensions import Protocol

from kreconciler._cogs.clients import auth, creating, deleting, fetching, updating
from kreconciler._cogs.configs import configuration
from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import bodies, references


class ObjectStore(Protocol):

    async def get(
            self,
            *,
            api_version: str,
            kind: str,
            namespace: Optional[str],
            name: str,
    ) -> bodies.RawBody: ...

    async def list(
            self,
            *,
            api_version: str,
            kind: str,
            namespace: Optional[str],
            labels: bodies.Labels,
    ) -> List[bodies.RawBody]: ...

    async def create(self, body: bodies.RawBody) -> bodies.RawBody: ...

    async def update(self, body: bodies.RawBody) -> bodies.RawBody: ...

    async def delete(self, body: bodies.RawBody) -> None: ...


class APIObjectStore:
    """
    The object store on top of the Kubernetes REST API.

    The objects' kinds are mapped to the API endpoints via the scheme:
    the kinds not registered there cannot be read or written.
    """

    def __init__(
            self,
            *,
            scheme: references.Scheme,
            context: auth.APIContext,
            settings: Optional[configuration.ReconcilerSettings] = None,
            logger: Optional[typedefs.Logger] = None,
    ) -> None:
        super().__init__()
        self.scheme = scheme
        self.context = context
        self.settings = settings if settings is not None else configuration.ReconcilerSettings()
        self.logger = logger if logger is not None else logging.getLogger(__name__)

    def _resource_of(self, body: bodies.RawBody) -> references.Resource:
        return self.scheme.lookup(body.get('apiVersion', ''), body.get('kind', ''))

    async def get(
            self,
            *,
            api_version: str,
            kind: str,
            namespace: Optional[str],
            name: str,
    ) -> bodies.RawBody:
        resource = self.scheme.lookup(api_version, kind)
        body = await fetching.read_obj(
            resource=resource,
            namespace=namespace,
            name=name,
            settings=self.settings,
            context=self.context,
            logger=self.logger,
        )
        body.setdefault('apiVersion', api_version)
        body.setdefault('kind', kind)
        return body

    async def list(
            self,
            *,
            api_version: str,
            kind: str,
            namespace: Optional[str],
            labels: bodies.Labels,
    ) -> List[bodies.RawBody]:
        resource = self.scheme.lookup(api_version, kind)
        return await fetching.list_objs(
            resource=resource,
            namespace=namespace,
            labels=labels,
            settings=self.settings,
            context=self.context,
            logger=self.logger,
        )

    async def create(self, body: bodies.RawBody) -> bodies.RawBody:
        return await creating.create_obj(
            resource=self._resource_of(body),
            body=body,
            settings=self.settings,
            context=self.context,
            logger=self.logger,
        )

    async def update(self, body: bodies.RawBody) -> bodies.RawBody:
        return await updating.replace_obj(
            resource=self._resource_of(body),
            body=body,
            settings=self.settings,
            context=self.context,
            logger=self.logger,
        )

    async def delete(self, body: bodies.RawBody) -> None:
        identity = bodies.identify(body)
        await deleting.delete_obj(
            resource=self._resource_of(body),
            namespace=identity.namespace or None,
            name=identity.name,
            settings=self.settings,
            context=self.context,
            logger=self.logger,
        )
