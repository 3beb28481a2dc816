"""
Helper tools to test the applications built on the reconciler.

`MemoryStore` is a drop-in object store that keeps the objects in memory,
so that the custom resources & components can be tested without a cluster.

Example::

    store = kreconciler.testing.MemoryStore([cr_body])
    reconciler = kreconciler.Reconciler(MyApp, store=store, scheme=scheme)
    result = await reconciler.reconcile(kreconciler.NamespacedName('ns', 'name'))
    assert result.succeeded
    assert store.mutations == [('create', ObjectIdentity('ns', 'Deployment', 'name'))]
"""
import copy
import itertools
from typing import Dict, Iterable, List, Optional, Tuple

from kreconciler._cogs.clients import errors
from kreconciler._cogs.structs import bodies, observables

MUTATING_OPERATIONS = frozenset({'create', 'update', 'delete'})

Call = Tuple[str, bodies.ObjectIdentity]


class MemoryStore:
    """
    An in-memory object store with the optimistic concurrency of the real API.

    Every write assigns a new ``metadata.resourceVersion``; an update with
    a stale version fails with a conflict, as does a creation of an existing
    object. All calls are recorded in `calls` as ``(operation, identity)``;
    the lists are recorded with an empty name.

    The failures of specific calls can be injected with `fail`.
    """

    def __init__(self, objects: Iterable[bodies.RawBody] = ()) -> None:
        super().__init__()
        self.objects: Dict[bodies.ObjectIdentity, bodies.RawBody] = {}
        self.calls: List[Call] = []
        self.failures: Dict[Call, Exception] = {}
        self._versions = itertools.count(1)
        for body in objects:
            self.put(body)

    @property
    def mutations(self) -> List[Call]:
        return [call for call in self.calls if call[0] in MUTATING_OPERATIONS]

    def put(self, body: bodies.RawBody) -> bodies.RawBody:
        """ Store an object as is, without recording the call (for test setups). """
        stored = copy.deepcopy(body)
        bodies.set_resource_version(stored, str(next(self._versions)))
        self.objects[bodies.identify(stored)] = stored
        return copy.deepcopy(stored)

    def fail(
            self,
            operation: str,
            identity: bodies.ObjectIdentity,
            exc: Optional[Exception] = None,
    ) -> None:
        """ Make an operation on an object fail (every time, until `clear_failures`). """
        self.failures[(operation, identity)] = exc if exc is not None else errors.APIServerError(
            {'kind': 'Status', 'code': 500, 'message': f"Injected failure of {operation}."},
            status=500,
        )

    def clear_failures(self) -> None:
        self.failures.clear()

    def _call(self, operation: str, identity: bodies.ObjectIdentity) -> None:
        self.calls.append((operation, identity))
        exc = self.failures.get((operation, identity))
        if exc is not None:
            raise exc

    async def get(
            self,
            *,
            api_version: str,
            kind: str,
            namespace: Optional[str],
            name: str,
    ) -> bodies.RawBody:
        identity = bodies.ObjectIdentity(namespace or '', kind, name)
        self._call('get', identity)
        try:
            return copy.deepcopy(self.objects[identity])
        except KeyError:
            raise _not_found(identity) from None

    async def list(
            self,
            *,
            api_version: str,
            kind: str,
            namespace: Optional[str],
            labels: bodies.Labels,
    ) -> List[bodies.RawBody]:
        self._call('list', bodies.ObjectIdentity(namespace or '', kind, ''))
        return [
            copy.deepcopy(body)
            for identity, body in self.objects.items()
            if identity.kind == kind
            if namespace is None or identity.namespace == namespace
            if observables.match_labels(labels, body)
        ]

    async def create(self, body: bodies.RawBody) -> bodies.RawBody:
        identity = bodies.identify(body)
        self._call('create', identity)
        if identity in self.objects:
            raise errors.APIConflictError(
                {'kind': 'Status', 'code': 409, 'reason': 'AlreadyExists',
                 'message': f"{identity} already exists."},
                status=409,
            )
        return self.put(body)

    async def update(self, body: bodies.RawBody) -> bodies.RawBody:
        identity = bodies.identify(body)
        self._call('update', identity)
        if identity not in self.objects:
            raise _not_found(identity)
        version = bodies.get_resource_version(body)
        if version is not None and version != bodies.get_resource_version(self.objects[identity]):
            raise errors.APIConflictError(
                {'kind': 'Status', 'code': 409, 'reason': 'Conflict',
                 'message': f"{identity} has been modified; please apply to the latest version."},
                status=409,
            )
        return self.put(body)

    async def delete(self, body: bodies.RawBody) -> None:
        identity = bodies.identify(body)
        self._call('delete', identity)
        if identity not in self.objects:
            raise _not_found(identity)
        del self.objects[identity]


def _not_found(identity: bodies.ObjectIdentity) -> errors.APINotFoundError:
    return errors.APINotFoundError(
        {'kind': 'Status', 'code': 404, 'reason': 'NotFound', 'message': f"{identity} not found."},
        status=404,
    )
