"""
Reconciliation of the components' expected objects with the observed ones.

The logic is straightforward: the component declares the expected objects
and the way to observe their live counterparts; then, both bags are compared
by the objects' identities, and:

* create(obj) where obj is in expected but not in observed;
* update(obj) where obj is in both, and its payload differs;
* delete(obj) where obj is in observed but not in expected.

Only the managed objects are created and updated. A missing referenced object
is an error, surfaced to the component's status, but never created.
The deletion does not look at the lifecycle: whatever is observed
but not expected is deleted.

No failure of an individual object stops the processing of other objects:
all failures are collected and raised together once everything is processed.
The same bag of the objects is then given to the component to compute its status.
"""
import copy
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from kreconciler._cogs.configs import configuration
from kreconciler._cogs.helpers import typedefs
from kreconciler._cogs.structs import bags, bodies, references
from kreconciler._core.actions import errors, invocation
from kreconciler._core.engines import stores
from kreconciler._core.intents import components
from kreconciler._core.reactor import differing, observation

STAGE_EXPECTED = 'gathering expected resources'
STAGE_OBSERVING = 'observing resources'
STAGE_MUTATING = 'mutating resources'


async def observe_and_mutate(
        *,
        component: components.Component,
        status: Any,
        mutate: bool,
        aggregated: bags.ObjectBag,
        store: stores.ObjectStore,
        scheme: references.Scheme,
        settings: configuration.ReconcilerSettings,
        logger: typedefs.Logger,
) -> Tuple[bags.ObjectBag, bags.ObjectBag, str, Optional[errors.ObservationError]]:
    """
    Gather the expected objects of a component, observe them, and mutate them.

    Every stage runs only if the previous one has succeeded. On a failure,
    both bags are empty (never `None`), and the stage tells what has failed.
    The error is returned, not raised: the caller decides how to proceed.
    If the component returns no expected objects at all (`None`, not an empty bag),
    nothing is observed, so that nothing is deleted by mistake.
    """
    expected = bags.ObjectBag()
    observed = bags.ObjectBag()
    resource = component.resource
    labels = component.labels

    stage = STAGE_EXPECTED
    try:
        result = await invocation.invoke(component.expected_resources, resource, labels, aggregated,
                                         settings=settings)
        if result is None:  # nothing is known, so nothing is observed (and nothing is deleted).
            return expected, observed, stage, None
        expected = _as_bag(result)

        stage = STAGE_OBSERVING
        observables_ = component.observables(scheme, resource, labels, expected)
        observed = await observation.observe(observables_, store=store, logger=logger)

        if mutate:
            stage = STAGE_MUTATING
            result = await invocation.invoke(component.mutate, resource, status, expected, observed,
                                             settings=settings)
            expected = _as_bag(result)

    except Exception as e:
        return bags.ObjectBag(), bags.ObjectBag(), stage, errors.ObservationError(stage, component.name, e)

    return expected, observed, stage, None


async def reconcile_component(
        *,
        component: components.Component,
        status: Any,
        aggregated: bags.ObjectBag,
        store: stores.ObjectStore,
        scheme: references.Scheme,
        settings: configuration.ReconcilerSettings,
        logger: typedefs.Logger,
) -> None:
    """
    Reconcile the expected & observed objects of one component.

    The expected objects are appended to the aggregated bag (for the following
    components and for the status), and stamped with the component's owner
    references. The accumulated errors (if any) are raised as `AggregateError`
    after the component's status is updated.
    """
    logger.info("{ reconciling component")
    try:
        errs: List[Exception] = []
        reconciled: List[Dict[str, Any]] = []

        expected, observed, stage, error = await observe_and_mutate(
            component=component, status=status, mutate=True, aggregated=aggregated,
            store=store, scheme=scheme, settings=settings, logger=logger,
        )
        if error is not None:
            logger.error(f"Failed: [{stage}] {error.__cause__}")
            errs.append(error)
        else:
            aggregated.add(*expected)
            for item in expected:
                bodies.set_owner_references(item.obj, component.owner_references)
                logger.debug(f"   exp: {item.identity} ({item.lifecycle})")
            for item in observed:
                logger.debug(f"   obs: {item.identity}")

        # Create or update the expected objects, depending on whether they are observed.
        for item in expected:
            identity = item.identity
            match = _find(identity, observed)
            if match is not None:
                bodies.set_resource_version(item.obj, bodies.get_resource_version(match.obj))
                if (
                    item.lifecycle == bags.Lifecycle.MANAGED and
                    differing.payload_differs(
                        item.obj, match.obj,
                        comparable=lambda body: component.comparable(
                            body, settings.comparison.payload_fields),
                        scope=settings.comparison.scope,
                        logger=logger,
                    ) and
                    component.differs(item.obj, match.obj)
                ):
                    try:
                        await store.update(copy.deepcopy(item.obj))
                    except Exception as e:
                        errs.append(errors.MutationError('update', identity, e))
                        logger.error(f"Failed: [update] {identity}: {e}")
                    else:
                        logger.info(f"   update: {identity}")
                else:
                    logger.debug(f"   nochange: {identity}")
                reconciled.append(match.obj)
            elif item.lifecycle == bags.Lifecycle.MANAGED:
                try:
                    await store.create(item.obj)
                except Exception as e:
                    errs.append(errors.MutationError('create', identity, e))
                    logger.error(f"Failed: [create] {identity}: {e}")
                else:
                    logger.info(f"   +create: {identity}")
                    reconciled.append(item.obj)
            else:
                missing = errors.ReferencedResourceMissing(identity, component.name)
                errs.append(missing)
                logger.error(f"Failed: [missing resource] {missing}")

        # Delete the observed objects which are not expected anymore (regardless of the lifecycle).
        for item in observed:
            identity = item.identity
            if _find(identity, expected) is None:
                try:
                    await store.delete(item.obj)
                except Exception as e:
                    errs.append(errors.MutationError('delete', identity, e))
                    logger.error(f"Failed: [delete] {identity}: {e}")
                else:
                    logger.info(f"   -delete: {identity}")

        aggregate = errors.AggregateError.from_errors(errs)
        component.update_component_status(component.resource, status, reconciled, aggregate)
        if aggregate is not None:
            raise aggregate
    finally:
        logger.info("} reconciling component")


async def finalize_component(
        *,
        component: components.Component,
        status: Any,
        aggregated: bags.ObjectBag,
        store: stores.ObjectStore,
        scheme: references.Scheme,
        settings: configuration.ReconcilerSettings,
        logger: typedefs.Logger,
) -> None:
    """
    Finalize one component of a custom resource being deleted.

    The expected objects are observed (but not mutated), and then the component
    cleans up whatever it needs to. The engine deletes nothing itself.
    The component's finalization runs even if the observation has failed
    (then, with nothing observed); both errors are raised together.
    """
    logger.info("{ finalizing component")
    try:
        expected, observed, stage, error = await observe_and_mutate(
            component=component, status=status, mutate=False, aggregated=aggregated,
            store=store, scheme=scheme, settings=settings, logger=logger,
        )
        if error is not None:
            logger.error(f"Failed: [{stage}] {error.__cause__}")
        aggregated.add(*expected)

        finalization_error: Optional[Exception] = None
        try:
            await invocation.invoke(component.finalize, component.resource, status, observed,
                                    settings=settings)
        except Exception as e:
            finalization_error = e
            logger.error(f"Failed: [finalize] {e}")

        aggregate = errors.AggregateError.from_errors([error, finalization_error])
        if aggregate is not None:
            raise aggregate
    finally:
        logger.info("} finalizing component")


def _find(
        identity: bodies.ObjectIdentity,
        bag: bags.ObjectBag,
) -> Optional[bags.TaggedObject]:
    for item in bag:
        if item.identity == identity:
            return item
    return None


def _as_bag(
        result: Union[None, bags.ObjectBag, Iterable[Union[bags.TaggedObject, Dict[str, Any]]]],
) -> bags.ObjectBag:
    if result is None:
        return bags.ObjectBag()
    elif isinstance(result, bags.ObjectBag):
        return result
    else:
        return bags.ObjectBag(
            item if isinstance(item, bags.TaggedObject) else bags.TaggedObject(item)
            for item in result
        )
