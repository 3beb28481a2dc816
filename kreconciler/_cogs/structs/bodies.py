"""
All the structures coming from/to the object store.

The objects are plain JSON-like dicts as decoded from the Kubernetes API
(or as constructed by the components). The engine never switches on their
concrete kinds: everything it needs from an object (the identity, the owner
references, the resource version) is read or written via the functions here.

For strict type-checking, the well-known fields are detailed to the per-field
level with `TypedDict`. The components can use arbitrary fields at runtime,
which are not declared in the type definitions at type-checking time.
"""
import copy
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, cast

from typing_extensions import TypedDict

Labels = Mapping[str, str]
Annotations = Mapping[str, str]


class OwnerReference(TypedDict, total=False):
    controller: bool
    blockOwnerDeletion: bool
    apiVersion: str
    kind: str
    name: str
    uid: str


class ObjectReference(TypedDict, total=False):
    apiVersion: str
    kind: str
    namespace: Optional[str]
    name: str
    uid: str


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    finalizers: List[str]
    ownerReferences: List[OwnerReference]
    resourceVersion: str
    generation: int
    deletionTimestamp: str
    creationTimestamp: str
    selfLink: str
    managedFields: List[Any]


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    data: Mapping[str, Any]
    status: Mapping[str, Any]


# The metadata fields assigned by the server, not by the components.
SYSTEM_META_FIELDS = frozenset([
    'uid',
    'resourceVersion',
    'generation',
    'creationTimestamp',
    'deletionTimestamp',
    'deletionGracePeriodSeconds',
    'selfLink',
    'managedFields',
    'ownerReferences',
    'finalizers',
])


class ObjectIdentity(NamedTuple):
    """
    The identity of an object: unique within one object store.

    Cluster-scoped objects have an empty namespace (not `None`),
    so that the identities are always comparable and printable.
    """
    namespace: str
    kind: str
    name: str

    def __str__(self) -> str:
        return f'{self.namespace}/{self.kind}/{self.name}'


def identify(body: Mapping[str, Any]) -> ObjectIdentity:
    meta = body.get('metadata', {})
    return ObjectIdentity(
        namespace=meta.get('namespace') or '',
        kind=body.get('kind') or '',
        name=meta.get('name') or '',
    )


def get_resource_version(body: Mapping[str, Any]) -> Optional[str]:
    return cast(Optional[str], body.get('metadata', {}).get('resourceVersion'))


def set_resource_version(body: Dict[str, Any], resource_version: Optional[str]) -> None:
    if resource_version is None:
        body.get('metadata', {}).pop('resourceVersion', None)
    else:
        body.setdefault('metadata', {})['resourceVersion'] = resource_version


def get_owner_references(body: Mapping[str, Any]) -> List[OwnerReference]:
    return list(body.get('metadata', {}).get('ownerReferences', []))


def set_owner_references(body: Dict[str, Any], refs: Sequence[OwnerReference]) -> None:
    """
    Replace the owner references of an object as a whole.

    Every object gets its own copy, so that later modifications of one object
    (e.g. by the server's responses) do not leak into the others.
    """
    body.setdefault('metadata', {})['ownerReferences'] = copy.deepcopy(list(refs))


def build_object_reference(
        body: Mapping[str, Any],
) -> ObjectReference:
    """
    Construct an object reference for the logs.

    Keep in mind that some fields can be absent: e.g. ``namespace``
    for cluster resources, or e.g. ``apiVersion`` for ``kind: Node``, etc.
    """
    ref = dict(
        apiVersion=body.get('apiVersion'),
        kind=body.get('kind'),
        name=body.get('metadata', {}).get('name'),
        uid=body.get('metadata', {}).get('uid'),
        namespace=body.get('metadata', {}).get('namespace'),
    )
    return cast(ObjectReference, {key: val for key, val in ref.items() if val})


def build_owner_reference(
        body: Mapping[str, Any],
) -> OwnerReference:
    """
    Construct an owner reference object for the parent-children relationships.

    The structure needed to link the children objects to the current object as a parent.
    See https://kubernetes.io/docs/concepts/workloads/controllers/garbage-collection/
    """
    ref = dict(
        controller=True,
        blockOwnerDeletion=True,
        apiVersion=body.get('apiVersion'),
        kind=body.get('kind'),
        name=body.get('metadata', {}).get('name'),
        uid=body.get('metadata', {}).get('uid'),
    )
    return cast(OwnerReference, {key: val for key, val in ref.items() if val})
