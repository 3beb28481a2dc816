from typing import Optional

from kreconciler._cogs.clients import api, auth
from kreconciler._cogs.configs import configuration
from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import references


async def delete_obj(
        *,
        settings: configuration.ReconcilerSettings,
        context: auth.APIContext,
        resource: references.Resource,
        namespace: Optional[str],
        name: str,
        propagation_policy: str = 'Background',
        logger: typedefs.Logger,
) -> None:
    """
    Delete an object by its name.

    The dependents (by their owner references) are garbage-collected
    by K8s according to the propagation policy, not by the reconciler.
    """
    await api.delete(
        url=resource.get_url(namespace=namespace, name=name),
        payload={
            'apiVersion': 'v1',
            'kind': 'DeleteOptions',
            'propagationPolicy': propagation_policy,
        },
        settings=settings,
        context=context,
        logger=logger,
    )
