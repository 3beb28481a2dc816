from kreconciler._cogs.clients import api, auth
from kreconciler._cogs.configs import configuration
from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import bodies, references


async def create_obj(
        *,
        settings: configuration.ReconcilerSettings,
        context: auth.APIContext,
        resource: references.Resource,
        body: bodies.RawBody,
        logger: typedefs.Logger,
) -> bodies.RawBody:
    """
    Create an object. The namespace is taken from the body itself.
    """
    namespace = body.get('metadata', {}).get('namespace')
    created_body: bodies.RawBody = await api.post(
        url=resource.get_url(namespace=namespace),
        payload=body,
        settings=settings,
        context=context,
        logger=logger,
    )
    return created_body
