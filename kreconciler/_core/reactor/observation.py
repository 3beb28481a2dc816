"""
Observing the live objects as declared by the components' observables.

The observation is read-only and uncached: every pass re-reads the live state
from the object store from scratch, one observable at a time, in their order.
"""
from typing import Iterable

from kreconciler._cogs.clients import errors
from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import bags, observables
from kreconciler._core.engines import stores


async def observe(
        observables_: Iterable[observables.Observable],
        *,
        store: stores.ObjectStore,
        logger: typedefs.Logger,
) -> bags.ObjectBag:
    """
    Resolve the observables into a bag of currently live objects.

    An absent object of a point lookup is simply not in the result:
    it is up to the caller to decide whether the absence is an error.
    Any other failure aborts the whole observation (no partial results).
    """
    observed = bags.ObjectBag()
    for observable in observables_:
        if observable.is_point:
            try:
                body = await store.get(
                    api_version=observable.api_version,
                    kind=observable.kind,
                    namespace=observable.namespace,
                    name=observable.name or '',
                )
            except errors.APINotFoundError:
                logger.debug(f"   >>absent: {observable}")
            else:
                logger.debug(f"   >>get: {observable}")
                observed.add(bags.TaggedObject(body))
        else:
            items = await store.list(
                api_version=observable.api_version,
                kind=observable.kind,
                namespace=observable.namespace,
                labels=observable.labels or {},
            )
            logger.debug(f"   >>list: {observable} -> {len(items)} object(s)")
            observed.add(*(bags.TaggedObject(body) for body in items))
    return observed
