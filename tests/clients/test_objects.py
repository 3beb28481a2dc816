import pytest

from kreconciler._cogs.clients.creating import create_obj
from kreconciler._cogs.clients.deleting import delete_obj
from kreconciler._cogs.clients.errors import APINotFoundError
from kreconciler._cogs.clients.fetching import list_objs, read_obj
from kreconciler._cogs.clients.updating import replace_obj
from kreconciler._cogs.structs.references import Resource

CONFIGMAPS = Resource('', 'v1', 'configmaps', 'ConfigMap')
NAMESPACES = Resource('', 'v1', 'namespaces', 'Namespace', namespaced=False)


async def test_reading(fake_api, context, settings, logger):
    fake_api.add('get', '/api/v1/namespaces/ns/configmaps/c', {'metadata': {'name': 'c'}})
    body = await read_obj(resource=CONFIGMAPS, namespace='ns', name='c',
                          settings=settings, context=context, logger=logger)
    assert body == {'metadata': {'name': 'c'}}


async def test_reading_of_absent_objects(fake_api, context, settings, logger):
    fake_api.add('get', '/api/v1/namespaces/ns/configmaps/c',
                 {'kind': 'Status', 'code': 404, 'reason': 'NotFound'}, status=404)
    with pytest.raises(APINotFoundError):
        await read_obj(resource=CONFIGMAPS, namespace='ns', name='c',
                       settings=settings, context=context, logger=logger)


async def test_listing_restores_kinds_and_versions(fake_api, context, settings, logger):
    fake_api.add('get', '/api/v1/namespaces/ns/configmaps', {
        'apiVersion': 'v1',
        'kind': 'ConfigMapList',
        'items': [{'metadata': {'name': 'c1'}}, {'metadata': {'name': 'c2'}}],
    })
    items = await list_objs(resource=CONFIGMAPS, namespace='ns', labels={'b': '2', 'a': '1'},
                            settings=settings, context=context, logger=logger)
    assert items == [
        {'apiVersion': 'v1', 'kind': 'ConfigMap', 'metadata': {'name': 'c1'}},
        {'apiVersion': 'v1', 'kind': 'ConfigMap', 'metadata': {'name': 'c2'}},
    ]
    assert fake_api.requests[0]['query'] == {'labelSelector': 'a=1,b=2'}


async def test_listing_cluster_wide_without_labels(fake_api, context, settings, logger):
    fake_api.add('get', '/api/v1/configmaps', {'items': []})
    items = await list_objs(resource=CONFIGMAPS, namespace=None,
                            settings=settings, context=context, logger=logger)
    assert items == []
    assert fake_api.requests[0]['query'] == {}


async def test_creating_in_the_body_namespace(fake_api, context, settings, logger):
    body = {'kind': 'ConfigMap', 'metadata': {'namespace': 'ns', 'name': 'c'}}
    fake_api.add('post', '/api/v1/namespaces/ns/configmaps', dict(body, created=True))
    result = await create_obj(resource=CONFIGMAPS, body=body,
                              settings=settings, context=context, logger=logger)
    assert result['created'] is True
    assert fake_api.requests[0]['data'] == body


async def test_creating_cluster_objects(fake_api, context, settings, logger):
    body = {'kind': 'Namespace', 'metadata': {'name': 'ns'}}
    fake_api.add('post', '/api/v1/namespaces', body)
    await create_obj(resource=NAMESPACES, body=body,
                     settings=settings, context=context, logger=logger)
    assert fake_api.requests[0]['path'] == '/api/v1/namespaces'


async def test_replacing_without_status_subresource(fake_api, context, settings, logger):
    body = {'kind': 'ConfigMap', 'metadata': {'namespace': 'ns', 'name': 'c',
                                              'resourceVersion': '1'},
            'data': {'k': 'v'}, 'status': {'x': 'y'}}
    fake_api.add('put', '/api/v1/namespaces/ns/configmaps/c', dict(body, replaced=True))
    result = await replace_obj(resource=CONFIGMAPS, body=body,
                               settings=settings, context=context, logger=logger)
    assert result['replaced'] is True
    assert len(fake_api) == 1
    assert fake_api.requests[0]['data'] == body


async def test_replacing_with_status_subresource(fake_api, context, settings, logger,
                                                 custom_resource):
    body = {'kind': 'KExample', 'metadata': {'namespace': 'ns', 'name': 'n',
                                             'resourceVersion': '1'},
            'spec': {'a': 1}, 'status': {'x': 'y'}}
    path = '/apis/example.com/v1/namespaces/ns/kexamples/n'
    fake_api.add('put', path, {'metadata': {'resourceVersion': '2'}, 'spec': {'a': 1}})
    fake_api.add('put', path + '/status', {'metadata': {'resourceVersion': '3'},
                                           'status': {'x': 'y'}})
    result = await replace_obj(resource=custom_resource, body=body,
                               settings=settings, context=context, logger=logger)

    assert result == {'metadata': {'resourceVersion': '3'}, 'status': {'x': 'y'}}
    assert len(fake_api) == 2
    assert 'status' not in fake_api.requests[0]['data']
    assert fake_api.requests[0]['data']['metadata']['resourceVersion'] == '1'
    assert fake_api.requests[1]['path'] == path + '/status'
    assert fake_api.requests[1]['data']['status'] == {'x': 'y'}
    assert fake_api.requests[1]['data']['metadata']['resourceVersion'] == '2'
    assert body['status'] == {'x': 'y'}  # not modified


async def test_deleting(fake_api, context, settings, logger):
    fake_api.add('delete', '/api/v1/namespaces/ns/configmaps/c', {'kind': 'Status'})
    await delete_obj(resource=CONFIGMAPS, namespace='ns', name='c',
                     settings=settings, context=context, logger=logger)
    assert fake_api.requests[0]['data'] == {
        'apiVersion': 'v1',
        'kind': 'DeleteOptions',
        'propagationPolicy': 'Background',
    }
