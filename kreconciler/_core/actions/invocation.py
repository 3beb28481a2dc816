"""
Invoking the components' callbacks.

Both sync & async functions are supported, so as their partials.
Also, decorated wrappers and lambdas are recognized.
All of this goes via the same invocation logic and protocol.

The invocation is always awaited to its end before the next one starts:
the callbacks of one reconciliation pass never run concurrently.
"""
import asyncio
import contextvars
import functools
import inspect
from typing import Any, Callable, Coroutine, Optional, TypeVar, Union

from kreconciler._cogs.configs import configuration

# An internal typing hack shows that the callback can be sync fn with the result,
# or an async fn which returns a coroutine which, in turn, returns the result.
_R = TypeVar('_R')
SyncOrAsync = Union[_R, Coroutine[None, None, _R]]

# A generic sync-or-async callable with no args/kwargs checks (unlike in protocols).
Invokable = Callable[..., SyncOrAsync[Optional[object]]]


async def invoke(
        fn: Invokable,
        *args: Any,
        settings: Optional[configuration.ReconcilerSettings] = None,
        **kwargs: Any,
) -> Any:
    """
    Invoke a single function, but safely for the main asyncio process.

    Used for the potentially slow & blocking callbacks of the components
    (gathering the expected resources, mutating them, finalizing).
    Other callbacks are called directly, and are expected to be synchronous
    and fast (such as building the observables or comparing the objects).

    The synchronous methods are executed in the executor (threads or processes),
    thus making it non-blocking for the main event loop of the application.
    """
    if is_async_fn(fn):
        result = await fn(*args, **kwargs)  # type: ignore
    else:

        # Not that we want to use functools, but for executors kwargs, it is officially recommended:
        # https://docs.python.org/3/library/asyncio-eventloop.html#asyncio.loop.run_in_executor
        real_fn = functools.partial(fn, *args, **kwargs)

        # Copy the asyncio context from current thread to the callback's thread.
        context = contextvars.copy_context()
        real_fn = functools.partial(context.run, real_fn)

        # Prevent orphaned threads during the pass's cancellation. It is better to be stuck
        # in the task than to have orphan threads which deplete the executor's pool capacity.
        # Cancellation is postponed until the thread exits, but it happens anyway (for consistency).
        loop = asyncio.get_running_loop()
        executor = settings.execution.executor if settings is not None else None
        future = loop.run_in_executor(executor, real_fn)
        cancellation: Optional[asyncio.CancelledError] = None
        while not future.done():
            try:
                await asyncio.shield(future)  # slightly expensive: creates tasks
            except asyncio.CancelledError as e:
                cancellation = e
        if cancellation is not None:
            raise cancellation
        result = future.result()

    return result


def is_async_fn(
        fn: Optional[Invokable],
) -> bool:
    if fn is None:
        return False
    elif isinstance(fn, functools.partial):
        return is_async_fn(fn.func)
    elif hasattr(fn, '__wrapped__'):  # @functools.wraps()
        return is_async_fn(fn.__wrapped__)
    else:
        return inspect.iscoroutinefunction(fn)
