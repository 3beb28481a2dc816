import base64
import ssl

import aiohttp
import pytest

from kreconciler._cogs.clients.auth import APIContext, decode_to_pem, make_basic_auth, \
                                           make_headers, make_ssl_context
from kreconciler._cogs.structs.credentials import ConnectionInfo

PEM = '-----BEGIN CERTIFICATE-----\nxyz\n-----END CERTIFICATE-----\n'


@pytest.mark.parametrize('data', [
    pytest.param(PEM, id='str-pem'),
    pytest.param(PEM.encode('ascii'), id='bytes-pem'),
    pytest.param(base64.b64encode(PEM.encode('ascii')), id='base64-bytes'),
    pytest.param(base64.b64encode(PEM.encode('ascii')).decode('ascii'), id='base64-str'),
])
def test_pem_decoding(data):
    assert decode_to_pem(data) == PEM


def test_token_goes_to_the_bearer_header():
    headers = make_headers(ConnectionInfo(server='https://localhost', token='tkn'))
    assert headers['Authorization'] == 'Bearer tkn'
    assert headers['User-Agent'].startswith('kreconciler/')


def test_no_authorization_header_without_a_token():
    headers = make_headers(ConnectionInfo(server='https://localhost'))
    assert 'Authorization' not in headers


@pytest.mark.parametrize('kwargs', [
    pytest.param(dict(), id='nothing'),
    pytest.param(dict(username='user'), id='no-password'),
    pytest.param(dict(username='user', password='pass', token='tkn'), id='token-preferred'),
])
def test_no_basic_auth(kwargs):
    assert make_basic_auth(ConnectionInfo(server='https://localhost', **kwargs)) is None


def test_ssl_verification_by_default():
    context = make_ssl_context(ConnectionInfo(server='https://localhost'))
    assert context.verify_mode == ssl.CERT_REQUIRED
    assert context.check_hostname


def test_ssl_verification_can_be_disabled():
    context = make_ssl_context(ConnectionInfo(server='https://localhost', verify_tls=False))
    assert context.verify_mode == ssl.CERT_NONE
    assert not context.check_hostname


def test_client_cert_needs_both_parts():
    assert not ConnectionInfo(server='https://localhost', client_cert_data=PEM).has_client_cert
    assert ConnectionInfo(server='https://localhost', client_cert_data=PEM,
                          client_key_data=PEM).has_client_cert


async def test_session_with_token():
    async with APIContext(ConnectionInfo(server='https://localhost', token='tkn')) as context:
        assert context.session.headers['Authorization'] == 'Bearer tkn'
        assert context.server == 'https://localhost'


async def test_session_with_basic_auth():
    info = ConnectionInfo(server='https://localhost', username='user', password='pass')
    async with APIContext(info) as context:
        assert context.session.auth == aiohttp.BasicAuth('user', 'pass')
        assert 'Authorization' not in context.session.headers


async def test_session_is_closed_on_exit():
    async with APIContext(ConnectionInfo(server='https://localhost')) as context:
        pass
    assert context.session.closed
