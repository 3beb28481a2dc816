"""
All configuration flags, options, settings to fine-tune a reconciler.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).

The settings object is constructed by the application once and passed
explicitly into the reconciler and the API-backed object store.
There is no global or default instance shared between reconcilers.
"""
import concurrent.futures
import dataclasses
from typing import Collection, Iterable, Optional, Union

from kreconciler._cogs.structs import diffs


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the whole request-response cycle of every API call.

    The object store calls of a reconciliation pass carry their own deadline;
    the reconciliation engine itself has no timeouts or cancellation.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for the connection establishment only (with TCP & SSL handshakes).
    """

    error_backoffs: Union[float, Iterable[float]] = (1, 1, 2, 3, 5, 8)
    """
    Backoffs in seconds on connection errors and HTTP 5xx responses.

    The number of backoffs is the number of retries (plus the first attempt).
    A single number means a single retry. An empty sequence means no retries.
    The errors are escalated once the backoffs are exhausted.
    """


@dataclasses.dataclass
class ExecutionSettings:
    """
    Settings for synchronous component callbacks (e.g. thread-/process-pools).
    """

    executor: concurrent.futures.Executor = dataclasses.field(
        default_factory=concurrent.futures.ThreadPoolExecutor)
    """
    The executor to be used for synchronous callbacks of the components.

    The callbacks are still invoked one at a time: the executor only keeps
    the event loop responsive while a slow synchronous callback runs.
    """

    _max_workers: Optional[int] = None

    @property
    def max_workers(self) -> Optional[int]:
        """
        How many threads/processes is dedicated to the callbacks' execution.
        """
        return self._max_workers

    @max_workers.setter
    def max_workers(self, value: int) -> None:
        if value < 1:
            raise ValueError("Can't set thread pool limit lower than 1.")
        self._max_workers = value

        if hasattr(self.executor, '_max_workers'):
            self.executor._max_workers = value  # type: ignore
        else:
            raise TypeError("Current executor does not support `max_workers`.")


@dataclasses.dataclass
class ComparisonSettings:

    payload_fields: Collection[str] = ('spec', 'data')
    """
    The top-level fields holding the comparable payload of an object,
    checked in this order. The first one present in an object is used.
    If none is present, the object's essence is used instead.

    The components can override this via their own `Component.comparable`.
    """

    scope: diffs.DiffScope = diffs.DiffScope.FULL
    """
    Which fields are noticed when the expected & observed payloads are compared.

    With ``DiffScope.LEFT``, only the fields present in the expected object
    are compared, so that server-side defaults in the observed object
    do not cause the updates on every pass.
    """


@dataclasses.dataclass
class ReconcilerSettings:
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    execution: ExecutionSettings = dataclasses.field(default_factory=ExecutionSettings)
    comparison: ComparisonSettings = dataclasses.field(default_factory=ComparisonSettings)
