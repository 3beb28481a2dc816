import concurrent.futures

import pytest

from kreconciler._cogs.configs.configuration import ReconcilerSettings
from kreconciler._cogs.structs.diffs import DiffScope


def test_declared_defaults():
    settings = ReconcilerSettings()
    assert settings.networking.request_timeout == 5 * 60
    assert settings.networking.connect_timeout is None
    assert settings.networking.error_backoffs == (1, 1, 2, 3, 5, 8)
    assert isinstance(settings.execution.executor, concurrent.futures.ThreadPoolExecutor)
    assert settings.execution.max_workers is None
    assert tuple(settings.comparison.payload_fields) == ('spec', 'data')
    assert settings.comparison.scope == DiffScope.FULL


def test_settings_are_independent():
    settings1 = ReconcilerSettings()
    settings2 = ReconcilerSettings()
    assert settings1.networking is not settings2.networking
    assert settings1.execution.executor is not settings2.execution.executor


def test_max_workers_are_applied_to_the_executor():
    settings = ReconcilerSettings()
    settings.execution.max_workers = 3
    assert settings.execution.max_workers == 3
    assert settings.execution.executor._max_workers == 3


def test_max_workers_below_one_are_rejected():
    settings = ReconcilerSettings()
    with pytest.raises(ValueError):
        settings.execution.max_workers = 0
