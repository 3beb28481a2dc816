from typing import List, Optional

from kreconciler._cogs.clients import api, auth
from kreconciler._cogs.configs import configuration
from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import bodies, observables, references


async def read_obj(
        *,
        settings: configuration.ReconcilerSettings,
        context: auth.APIContext,
        resource: references.Resource,
        namespace: Optional[str],
        name: str,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Read one object by its name.

    An absent object is reported as `APINotFoundError` (not as `None`):
    it is the caller's decision if the absence is an error or not.
    """
    body: bodies.RawBody = await api.get(
        url=resource.get_url(namespace=namespace, name=name),
        settings=settings,
        context=context,
        logger=logger,
    )
    return body


async def list_objs(
        *,
        settings: configuration.ReconcilerSettings,
        context: auth.APIContext,
        resource: references.Resource,
        namespace: Optional[str],
        labels: Optional[bodies.Labels] = None,
        logger: typedefs.Logger,
) -> List[bodies.RawBody]:
    """
    List the objects of specific resource type, optionally filtered by labels.

    The cluster-scoped call is used if the namespace is not specified
    or if the resource itself is cluster-scoped.
    Otherwise, the namespace-scoped call is used.

    The items of the K8s lists have no ``kind`` & ``apiVersion``;
    they are restored from the list itself, so that the objects are identifiable.
    """
    selector = observables.format_label_selector(labels) if labels else None
    rsp = await api.get(
        url=resource.get_url(namespace=namespace),
        params={'labelSelector': selector} if selector else None,
        settings=settings,
        context=context,
        logger=logger,
    )

    items: List[bodies.RawBody] = []
    for item in rsp.get('items', []):
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])
        items.append(item)
    return items
