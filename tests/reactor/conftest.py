import copy

import pytest

from kreconciler._cogs.structs.bags import Lifecycle, ObjectBag
from kreconciler._core.intents.components import Component
from kreconciler._core.intents.resources import CustomResource
from kreconciler.testing import MemoryStore


class KExample(CustomResource):
    api_version = 'example.com/v1'
    kind = 'KExample'


class StaticComponent(Component):
    """
    A component with the expected objects given in advance, for the tests.
    """

    def __init__(self, name, resource, expected=(), referenced=(), observables=None, **kwargs):
        super().__init__(name, resource, **kwargs)
        self.expected = list(expected)
        self.referenced = list(referenced)
        self.declared_observables = observables
        self.statuses = []
        self.finalized = []

    def expected_resources(self, resource, labels, aggregated):
        bag = ObjectBag.of(copy.deepcopy(self.expected))
        bag.add(*ObjectBag.of(copy.deepcopy(self.referenced), Lifecycle.REFERENCED))
        return bag

    def observables(self, scheme, resource, labels, expected):
        if self.declared_observables is not None:
            return self.declared_observables
        return super().observables(scheme, resource, labels, expected)

    def update_component_status(self, resource, status, reconciled, error):
        self.statuses.append((list(reconciled), error))
        status.setdefault('components', {})[self.name] = 'failed' if error else 'ready'

    def finalize(self, resource, status, observed):
        self.finalized.append(list(observed.objects()))


def _make_obj(kind, name, namespace='a', api_version='v1', **fields):
    return dict({'apiVersion': api_version, 'kind': kind,
                 'metadata': {'namespace': namespace, 'name': name}}, **fields)


@pytest.fixture()
def make_obj():
    return _make_obj


@pytest.fixture()
def component_cls():
    return StaticComponent


@pytest.fixture()
def resource(cr_body):
    return KExample(cr_body)


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def status():
    return {}
