import pytest

from kreconciler._cogs.structs.references import BUILTIN_RESOURCES, NamespacedName, Resource, \
                                                 Scheme, UnregisteredKindError


@pytest.fixture()
def namespaced():
    return Resource('group', 'version', 'plural', 'Kind')


@pytest.fixture()
def clustered():
    return Resource('group', 'version', 'plural', 'Kind', namespaced=False)


def test_api_version():
    assert Resource('', 'v1', 'pods', 'Pod').api_version == 'v1'
    assert Resource('apps', 'v1', 'deployments', 'Deployment').api_version == 'apps/v1'


def test_resources_are_equal_by_their_endpoints():
    resource1 = Resource('group', 'version', 'plural', 'Kind1')
    resource2 = Resource('group', 'version', 'plural', 'Kind2', namespaced=False)
    assert resource1 == resource2
    assert hash(resource1) == hash(resource2)


@pytest.mark.parametrize('kwargs, expected', [
    pytest.param(dict(), '/apis/group/version/plural', id='list-cluster-wide'),
    pytest.param(dict(namespace='ns'), '/apis/group/version/namespaces/ns/plural', id='list-ns'),
    pytest.param(dict(namespace='ns', name='n'),
                 '/apis/group/version/namespaces/ns/plural/n', id='object'),
    pytest.param(dict(namespace='ns', name='n', subresource='status'),
                 '/apis/group/version/namespaces/ns/plural/n/status', id='subresource'),
    pytest.param(dict(namespace='ns', params={'labelSelector': 'a=b'}),
                 '/apis/group/version/namespaces/ns/plural?labelSelector=a%3Db', id='params'),
    pytest.param(dict(server='https://host/', namespace='ns'),
                 'https://host/apis/group/version/namespaces/ns/plural', id='server'),
])
def test_namespaced_urls(namespaced, kwargs, expected):
    assert namespaced.get_url(**kwargs) == expected


def test_cluster_urls_ignore_namespaces(clustered):
    url = clustered.get_url(namespace='ns', name='n')
    assert url == '/apis/group/version/plural/n'


def test_core_v1_urls():
    url = Resource('', 'v1', 'pods', 'Pod').get_url(namespace='ns', name='n')
    assert url == '/api/v1/namespaces/ns/pods/n'


def test_namespaced_objects_require_namespaces(namespaced):
    with pytest.raises(ValueError, match=r"namespaces are required"):
        namespaced.get_url(name='n')


def test_subresources_require_names(namespaced):
    with pytest.raises(ValueError, match=r"Subresources"):
        namespaced.get_url(namespace='ns', subresource='status')


def test_namespaced_name_rendering():
    assert str(NamespacedName('ns', 'n')) == 'ns/n'
    assert str(NamespacedName(None, 'n')) == 'n'


def test_scheme_lookup(namespaced):
    scheme = Scheme([namespaced])
    assert len(scheme) == 1
    assert list(scheme) == [namespaced]
    assert ('group/version', 'Kind') in scheme
    assert scheme.lookup('group/version', 'Kind') is namespaced


def test_scheme_lookup_of_unknown_kinds():
    scheme = Scheme()
    with pytest.raises(UnregisteredKindError, match=r"Unknown kind 'Kind' of 'v1'"):
        scheme.lookup('v1', 'Kind')


def test_schemes_are_independent(namespaced):
    scheme1 = Scheme()
    scheme2 = Scheme()
    scheme1.register(namespaced)
    assert len(scheme1) == 1
    assert len(scheme2) == 0


def test_builtin_resources_are_registrable():
    scheme = Scheme(BUILTIN_RESOURCES)
    assert scheme.lookup('v1', 'ConfigMap').plural == 'configmaps'
    assert scheme.lookup('apps/v1', 'Deployment').plural == 'deployments'
    assert not scheme.lookup('v1', 'Namespace').namespaced
