import json

import pytest
import requests

from clinic.client import ApiError, MediCoreClient, SessionContext, summarize_errors


def _response(status, body, reason='OK'):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = body if isinstance(body, bytes) else json.dumps(body).encode()
    return resp


class FakeHttp:
    """Stands in for ``requests.Session``; replies from a queue."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.replies.pop(0)


@pytest.fixture
def session(tmp_path):
    return SessionContext(tmp_path / 'medicore' / 'session.json')


def test_summarize_errors():
    assert summarize_errors('Validation failed', None) == 'Validation failed'
    assert summarize_errors('Validation failed', [
        {'field': 'email', 'message': 'Enter a valid email address.'},
        {'field': 'age', 'message': 'Required'},
    ]) == 'Validation failed: email: Enter a valid email address.; age: Required'


def test_session_roundtrip_and_corrupt_file(session):
    assert session.load() is None
    session.save({'id': 'U1', 'role': 'doctor'}, 'tok')
    assert session.token == 'tok'
    assert session.role == 'doctor'
    session.path.write_text('{not json')
    assert session.user is None
    session.clear()
    session.clear()
    assert not session.path.exists()


def test_login_saves_session_and_sends_bearer(session):
    http = FakeHttp(
        _response(200, {'success': True, 'data': {'user': {'id': 'U1', 'role': 'admin'}, 'token': 'abc'}}),
        _response(200, {'success': True, 'data': [{'id': 'P001'}],
                        'pagination': {'page': 1, 'limit': 10, 'total': 1, 'pages': 1}}),
    )
    api = MediCoreClient('http://testserver/api/', session, http=http)
    api.login('admin@medicore.com', 'password')
    assert session.role == 'admin'

    rows, page = api.get_page('/patients', params={'status': 'Active'})
    assert rows == [{'id': 'P001'}]
    assert page['total'] == 1
    method, url, kwargs = http.calls[1]
    assert (method, url) == ('GET', 'http://testserver/api/patients')
    assert kwargs['headers']['Authorization'] == 'Bearer abc'
    assert kwargs['timeout'] == 10
    assert 'Authorization' not in http.calls[0][2]['headers']


def test_error_envelope_raises(session):
    http = FakeHttp(_response(400, {
        'success': False, 'message': 'Validation failed',
        'errors': [{'field': 'email', 'message': 'Required', 'value': None}],
    }, reason='Bad Request'))
    api = MediCoreClient('http://testserver/api', session, http=http)
    with pytest.raises(ApiError) as info:
        api.post('/patients', {'name': 'X'})
    assert info.value.status == 400
    assert info.value.message == 'Validation failed: email: Required'
    assert info.value.errors[0]['field'] == 'email'


def test_non_json_response_raises(session):
    api = MediCoreClient('http://testserver/api', session,
                         http=FakeHttp(_response(502, b'<html>bad gateway</html>', reason='Bad Gateway')))
    with pytest.raises(ApiError) as info:
        api.get('/health')
    assert info.value.status == 502


def test_logout_clears_session_even_on_failure(session):
    session.save({'id': 'U1'}, 'abc')
    api = MediCoreClient('http://testserver/api', session,
                         http=FakeHttp(_response(401, {'success': False, 'message': 'Token expired'})))
    with pytest.raises(ApiError):
        api.logout()
    assert session.load() is None


def test_default_http_session(session, monkeypatch):
    seen = {}

    def fake_request(self, method, url, **kwargs):
        seen.update(method=method, url=url)
        return _response(200, {'success': True, 'data': {'status': 'OK'}})

    monkeypatch.setattr(requests.Session, 'request', fake_request)
    api = MediCoreClient('http://testserver/api', session, timeout=3)
    assert api.get('/health') == {'status': 'OK'}
    assert seen == {'method': 'GET', 'url': 'http://testserver/api/health'}
