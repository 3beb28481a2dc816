"""
The generic check whether an expected object diverges from the observed one.

Only the comparable payload of the objects is compared, not the whole objects:
the observed objects are full of server-assigned fields (uids, timestamps,
resource versions, statuses), which are never in the expected objects.

The payload is extracted by the components (see `Component.comparable`);
by default, it is the first of the well-known payload fields (``spec``,
``data``), or the object's essence for the kinds with neither.

This check is only half of the decision: the component's own `differs`
predicate must also agree before the engine issues an update.
"""
import copy
from typing import Any, Callable, Collection, Dict, Mapping

from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import bodies, diffs

Extractor = Callable[[Mapping[str, Any]], Any]

DEFAULT_PAYLOAD_FIELDS = ('spec', 'data')


def extract_essence(body: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Extract the whole object except the identifying and system fields.

    The labels and annotations are kept: they are a part of the desired state.
    The status is removed: it is never a part of the desired state.
    """
    essence = copy.deepcopy(dict(body))
    essence.pop('apiVersion', None)
    essence.pop('kind', None)
    essence.pop('status', None)

    meta = essence.pop('metadata', {})
    meta = {key: val for key, val in meta.items()
            if key not in bodies.SYSTEM_META_FIELDS and key not in ('name', 'namespace')}
    if meta:
        essence['metadata'] = meta
    return essence


def extract_payload(
        body: Mapping[str, Any],
        fields: Collection[str] = DEFAULT_PAYLOAD_FIELDS,
) -> Any:
    for field in fields:
        if field in body:
            return body[field]
    return extract_essence(body)


def payload_differs(
        expected: Mapping[str, Any],
        observed: Mapping[str, Any],
        *,
        comparable: Extractor,
        scope: diffs.DiffScope = diffs.DiffScope.FULL,
        logger: typedefs.Logger,
) -> bool:
    """
    Check if the objects' comparable payloads differ structurally.
    """
    d = diffs.diff(comparable(expected), comparable(observed), scope=scope)
    if d:
        logger.debug(f"Diff for {bodies.identify(expected)}: {'; '.join(map(str, d))}")
    return bool(d)

