"""
Reconciliation passes of the custom resources, one instance at a time.

Every pass goes through the same steps, strictly sequentially::

    fetching → validating → defaulting →
    (reconciling | finalizing) per component → status updating

A pass is not retried internally: it is expected to be re-invoked externally
(e.g. by a watching & queueing layer) on failures or on any new changes.
Multiple passes of different instances can run concurrently (as asyncio tasks),
but every pass has its own aggregated bag, which is never shared.
"""
import dataclasses
from typing import List, Optional, Type

from kreconciler._cogs.clients import errors as client_errors
from kreconciler._cogs.configs import configuration
from kreconciler._cogs.structs import bags, references
from kreconciler._core.actions import errors, loggers
from kreconciler._core.engines import stores
from kreconciler._core.intents import resources
from kreconciler._core.reactor import reconciling


@dataclasses.dataclass(frozen=True)
class Result:
    """
    The outcome of a pass as reported to the caller.

    There is no requeueing hint: the retry policy is the caller's concern.
    """
    exception: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.exception is None


class Reconciler:
    """
    The reconciler of one kind of custom resources.

    The handle is a subclass of `CustomResource`; it is instantiated
    with the freshly fetched body of the resource on every pass.
    """

    def __init__(
            self,
            handle: Type[resources.CustomResource],
            store: stores.ObjectStore,
            scheme: references.Scheme,
            settings: Optional[configuration.ReconcilerSettings] = None,
    ) -> None:
        super().__init__()
        self.handle = handle
        self.store = store
        self.scheme = scheme
        self.settings = settings if settings is not None else configuration.ReconcilerSettings()

    async def reconcile(self, namespaced_name: references.NamespacedName) -> Result:
        """
        Run one pass for one custom resource; never raise its failures.
        """
        try:
            await self.reconcile_cr(namespaced_name)
        except Exception as e:
            return Result(exception=e)
        else:
            return Result()

    async def reconcile_cr(self, namespaced_name: references.NamespacedName) -> None:
        """
        Run one pass for one custom resource; raise its failures, if any.

        A vanished resource is reported as `APINotFoundError`, and nothing
        is written: there is nothing to write to. In all other cases,
        the status is updated with the pass's error (if any) before it is raised.
        """
        namespace, name = namespaced_name
        logger = loggers.ObjectLogger.from_namespaced_name(
            api_version=self.handle.api_version,
            kind=self.handle.kind,
            namespace=namespace,
            name=name,
        )

        try:
            body = await self.store.get(
                api_version=self.handle.api_version,
                kind=self.handle.kind,
                namespace=namespace,
                name=name,
            )
        except client_errors.APINotFoundError:
            logger.warning(f"Not found: {namespace or ''}/{name}. Skipping the reconciliation.")
            raise

        resource = self.handle(body)
        logger = loggers.ObjectLogger.from_body(body)

        error: Optional[Exception]
        logger.debug("Validating the spec.")
        try:
            resource.validate()
        except errors.ValidationError as e:
            error = e
        except Exception as e:
            error = errors.ValidationError(str(e))
            error.__cause__ = e
        else:
            error = None
        status = resource.new_status()

        if error is not None:
            logger.error(f"Invalid spec: {error}")
        else:
            logger.debug("Applying the defaults.")
            resource.apply_defaults()
            error = await self._process_components(resource, status, logger=logger)

        if resource.update_status(status, error):
            logger.debug("Updating the status.")
            try:
                await self.store.update(resource.body)
            except Exception as e:
                logger.error(f"Failed to update the status: {e}")
                if error is not None:
                    raise e from error
                raise

        if error is not None:
            raise error
        logger.info("Reconciliation succeeded.")

    async def _process_components(
            self,
            resource: resources.CustomResource,
            status: object,
            *,
            logger: loggers.ObjectLogger,
    ) -> Optional[errors.AggregateError]:
        aggregated = bags.ObjectBag()
        errs: List[Exception] = []
        deleting = resource.deletion_pending
        for component in resource.components():
            process = reconciling.finalize_component if deleting else reconciling.reconcile_component
            try:
                await process(
                    component=component,
                    status=status,
                    aggregated=aggregated,
                    store=self.store,
                    scheme=self.scheme,
                    settings=self.settings,
                    logger=logger.for_component(component.name),
                )
            except Exception as e:
                errs.append(e)
        return errors.AggregateError.from_errors(errs)
