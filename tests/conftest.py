import io
import logging
import re
import sys
from typing import Any, Callable, Dict, List, Tuple

import aiohttp.web
import pytest
from aiohttp.test_utils import TestServer

from kreconciler._cogs.clients.auth import APIContext
from kreconciler._cogs.configs.configuration import ReconcilerSettings
from kreconciler._cogs.structs.credentials import ConnectionInfo
from kreconciler._cogs.structs.references import BUILTIN_RESOURCES, Resource, Scheme
from kreconciler._core.actions.loggers import ObjectLogger, ObjectPrefixingTextFormatter, \
                                             configure


@pytest.fixture()
def settings():
    settings = ReconcilerSettings()
    settings.networking.error_backoffs = []  # no retries unless a test wants them.
    return settings


@pytest.fixture()
def custom_resource():
    return Resource('example.com', 'v1', 'kexamples', 'KExample', subresources=frozenset({'status'}))


@pytest.fixture()
def scheme(custom_resource):
    return Scheme(BUILTIN_RESOURCES + (custom_resource,))


@pytest.fixture()
def cr_body():
    return {
        'apiVersion': 'example.com/v1',
        'kind': 'KExample',
        'metadata': {'namespace': 'ns1', 'name': 'name1', 'uid': 'uid1'},
        'spec': {'field': 'value'},
    }


@pytest.fixture()
def logger(cr_body):
    return ObjectLogger.from_body(cr_body).for_component('component1')


#
# A fake K8s API server: a real aiohttp server on a local port, with canned responses.
#

class FakeAPI:
    """
    A local HTTP server with the responses registered per method & path.

    The responses are consumed in order; the last one stays for the repeated calls.
    All received requests are recorded with their methods, paths, queries & payloads.
    """

    def __init__(self) -> None:
        super().__init__()
        self.responses: Dict[Tuple[str, str], List[Tuple[int, Any]]] = {}
        self.requests: List[Dict[str, Any]] = []
        self.server: TestServer

    def __len__(self) -> int:
        return len(self.requests)

    def add(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        self.responses.setdefault((method.upper(), path), []).append((status, payload))

    @property
    def url(self) -> str:
        return str(self.server.make_url('/'))

    async def handle(self, request: aiohttp.web.Request) -> aiohttp.web.StreamResponse:
        data = await request.json() if request.can_read_body else None
        self.requests.append(dict(
            method=request.method,
            path=request.path,
            query=dict(request.query),
            headers=dict(request.headers),
            data=data,
        ))
        queue = self.responses.get((request.method, request.path))
        if not queue:
            return aiohttp.web.json_response({'kind': 'Status', 'code': 404,
                                              'message': 'No fake response.'}, status=404)
        status, payload = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(payload, bytes):
            return aiohttp.web.Response(body=payload, status=status)
        return aiohttp.web.json_response(payload, status=status)


@pytest.fixture()
async def fake_api():
    api = FakeAPI()
    app = aiohttp.web.Application()
    app.router.add_route('*', '/{tail:.*}', api.handle)
    api.server = TestServer(app)
    await api.server.start_server()
    try:
        yield api
    finally:
        await api.server.close()


@pytest.fixture()
async def context(fake_api):
    async with APIContext(ConnectionInfo(server=fake_api.url, token='fake-token')) as context:
        yield context


#
# Helpers for the logging checks.
#

@pytest.fixture()
def logstream(caplog):
    """ Prefixing is done at the final output. We have to intercept it. """

    logger = logging.getLogger()
    handlers = list(logger.handlers)

    # Setup all log levels of sub-libraries. A side-effect: the handlers are also added.
    configure(verbose=True)

    # Remove any stream handlers added in the step above. But keep the caplog's handlers.
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            logger.removeHandler(handler)

    # Inject our stream-intercepting handler.
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    formatter = ObjectPrefixingTextFormatter('prefix %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    try:
        with caplog.at_level(logging.DEBUG):
            yield stream
    finally:
        logger.removeHandler(handler)
        logger.handlers[:] = handlers  # undo `configure()`


@pytest.fixture()
def assert_logs(caplog) -> Callable[..., None]:
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    caplog.set_level(logging.DEBUG)

    def assert_logs_fn(patterns, prohibited=[], strict=False):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            # The expected pattern is at position 0.
            # Looking-ahead: if one of the following patterns matches, while the
            # 0th does not, then the log message is missing, and we fail the test.
            for idx, pattern in enumerate(remaining_patterns):
                m = re.search(pattern, message)
                if m:
                    if idx == 0:
                        remaining_patterns[:1] = []
                        break  # out of `remaining_patterns` cycle
                    else:
                        skipped_patterns = remaining_patterns[:idx]
                        raise AssertionError(f"Few patterns were skipped: {skipped_patterns!r}")
                elif strict:
                    raise AssertionError(f"Unexpected log message: {message!r}")

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                m = re.search(pattern, message)
                if m:
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        # If all patterns have been matched in order, we are done.
        # if some are left, but the messages are over, then we fail.
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
