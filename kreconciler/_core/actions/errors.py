"""
The errors of the reconciliation passes.

None of these errors is fatal to the hosting process: every failure is scoped
to the current pass, and is recoverable by re-invoking the pass later.

The object-level failures never stop the processing of the sibling objects
or the sibling components. Instead, they are collected into an
`AggregateError`, which is given to the components and to the custom resource
for the status computation, and is finally returned to the caller.

The absence of the custom resource itself is not one of these errors:
it is `kreconciler._cogs.clients.errors.APINotFoundError` as reported
by the object store.
"""
from typing import Iterable, Optional, Tuple

from kreconciler._cogs.structs import bodies


class ReconciliationError(Exception):
    """ The base class for all failures of a reconciliation pass. """


class ValidationError(ReconciliationError):
    """ The custom resource's spec is invalid; the components are skipped. """


class ObservationError(ReconciliationError):
    """
    One of the stages of the component's observation has failed.

    The stage is one of: gathering the expected resources, observing them,
    or mutating them; the original error is chained as the cause.
    """

    def __init__(self, stage: str, component: str, cause: BaseException) -> None:
        super().__init__(f"Failed {stage} of {component}: {cause}")
        self.stage = stage
        self.component = component
        self.__cause__ = cause


class ReferencedResourceMissing(ReconciliationError):
    """ A referenced (not managed) object is absent from the observed state. """

    def __init__(self, identity: bodies.ObjectIdentity, component: str) -> None:
        super().__init__(f"Missing resource not managed by {component}: {identity}")
        self.identity = identity
        self.component = component


class MutationError(ReconciliationError):
    """ A create/update/delete operation has failed for one object. """

    def __init__(self, operation: str, identity: bodies.ObjectIdentity, cause: BaseException) -> None:
        super().__init__(f"Failed to {operation} {identity}: {cause}")
        self.operation = operation
        self.identity = identity
        self.__cause__ = cause


class AggregateError(ReconciliationError):
    """
    Multiple errors as one: e.g. of all objects of one component.

    The nested aggregates are flattened, so that the errors are always
    a flat sequence of the individual (non-aggregate) errors.
    """

    def __init__(self, errors: Iterable[BaseException]) -> None:
        flat = tuple(_flatten(errors))
        super().__init__(
            str(flat[0]) if len(flat) == 1 else
            f"[{', '.join(str(error) for error in flat)}]"
        )
        self.errors: Tuple[BaseException, ...] = flat

    def __len__(self) -> int:
        return len(self.errors)

    @classmethod
    def from_errors(cls, errors: Iterable[Optional[BaseException]]) -> Optional["AggregateError"]:
        """
        Aggregate the errors, if there are any. Otherwise, return `None`.
        """
        flat = tuple(_flatten(error for error in errors if error is not None))
        return cls(flat) if flat else None


def _flatten(errors: Iterable[BaseException]) -> Iterable[BaseException]:
    for error in errors:
        if isinstance(error, AggregateError):
            yield from error.errors
        else:
            yield error
