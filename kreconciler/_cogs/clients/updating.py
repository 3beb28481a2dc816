import copy
from typing import Any, Dict, Mapping

from kreconciler._cogs.clients import api, auth
from kreconciler._cogs.configs import configuration
from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import bodies, finalizers, references


async def replace_obj(
        *,
        settings: configuration.ReconcilerSettings,
        context: auth.APIContext,
        resource: references.Resource,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Replace an object as a whole, with optimistic concurrency.

    The body must carry the ``metadata.resourceVersion`` as last observed:
    K8s API rejects the replacement with HTTP 409 if the object has changed
    since then (reported as `APIConflictError`).

    If the resource has the status as a subresource, the main endpoint ignores
    the status, so it is replaced separately on the status endpoint, with
    the resource version as returned by the first replacement.

    If the first replacement has released the last finalizer of an object
    being deleted, the object is gone, and so is its status: nothing to write.
    """
    identity = bodies.identify(body)
    namespace = identity.namespace or None
    as_subresource = 'status' in resource.subresources
    main_body: Dict[str, Any] = copy.deepcopy(dict(body))
    status = main_body.pop('status', None) if as_subresource else None

    replaced_body: Dict[str, Any] = await api.put(
        url=resource.get_url(namespace=namespace, name=identity.name),
        payload=main_body,
        settings=settings,
        context=context,
        logger=logger,
    )

    if status is not None and is_released(main_body):
        logger.debug(f"Skipping the status of {identity}: the object is released for deletion.")
    elif status is not None:
        status_body = dict(main_body, status=status)
        bodies.set_resource_version(status_body, bodies.get_resource_version(replaced_body))
        response = await api.put(
            url=resource.get_url(namespace=namespace, name=identity.name, subresource='status'),
            payload=status_body,
            settings=settings,
            context=context,
            logger=logger,
        )
        replaced_body = response

    return replaced_body  # type: ignore


def is_released(body: Mapping[str, Any]) -> bool:
    return finalizers.is_deletion_ongoing(body) and not body.get('metadata', {}).get('finalizers')
