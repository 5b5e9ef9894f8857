from datetime import datetime, timezone

import pytest
import requests

from gympro.admin import services as admin_services
from gympro.backend import AuthError, DataServiceError
from gympro.backend.supabase import SupabaseDataService, encode_filters, parse_content_range


class FakeResponse:
    def __init__(self, status_code=200, payload=None, headers=None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = '' if payload is None else str(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """Records requests and answers with queued responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        pass


def _client(*responses, token=None):
    http = FakeSession(*responses)
    service = SupabaseDataService(
        'https://project.supabase.co/', 'anon-key',
        timeout=3.0, token_provider=lambda: token, session=http,
    )
    return service, http


def test_encode_filters():
    when = datetime(2026, 10, 1, tzinfo=timezone.utc)
    assert encode_filters([
        ('status', 'eq', 'completed'),
        ('payment_date', 'gte', when),
        ('id', 'in', ['a', 'b']),
        ('check_out', 'is', None),
        ('check_out', 'eq', None),
    ]) == [
        ('status', 'eq.completed'),
        ('payment_date', 'gte.2026-10-01T00:00:00+00:00'),
        ('id', 'in.(a,b)'),
        ('check_out', 'is.null'),
        ('check_out', 'is.null'),
    ]


def test_encode_filters_rejects_unknown_operator():
    with pytest.raises(DataServiceError):
        encode_filters([('email', 'ilike', '%x%')])


def test_select_builds_postgrest_query():
    service, http = _client(FakeResponse(payload=[{'id': 'p-1', 'amount': 10}]), token='user-token')

    rows = service.select('payments', columns=['id', 'amount'], filters=[('user_id', 'eq', 'u-1')],
                          order='payment_date', descending=True, limit=5)

    assert rows == [{'id': 'p-1', 'amount': 10}]
    method, url, kwargs = http.calls[0]
    assert method == 'GET'
    assert url == 'https://project.supabase.co/rest/v1/payments'
    assert kwargs['params'] == [
        ('select', 'id,amount'),
        ('user_id', 'eq.u-1'),
        ('order', 'payment_date.desc'),
        ('limit', '5'),
    ]
    assert kwargs['headers']['apikey'] == 'anon-key'
    assert kwargs['headers']['Authorization'] == 'Bearer user-token'
    assert kwargs['timeout'] == 3.0


def test_anon_key_is_the_bearer_when_signed_out():
    service, http = _client(FakeResponse(payload=[]))
    service.select('users')
    assert http.calls[0][2]['headers']['Authorization'] == 'Bearer anon-key'


def test_count_reads_content_range():
    service, http = _client(FakeResponse(headers={'Content-Range': '0-0/42'}))
    assert service.count('users', filters=[('role', 'eq', 'member')]) == 42
    method, _url, kwargs = http.calls[0]
    assert method == 'HEAD'
    assert kwargs['headers']['Prefer'] == 'count=exact'


@pytest.mark.parametrize('header, expected', [('0-24/3573', 3573), ('*/0', 0)])
def test_parse_content_range(header, expected):
    assert parse_content_range(header) == expected


@pytest.mark.parametrize('header', [None, '0-24/*', 'garbage'])
def test_parse_content_range_errors(header):
    with pytest.raises(DataServiceError):
        parse_content_range(header)


def test_insert_serializes_dates_and_returns_row():
    service, http = _client(FakeResponse(status_code=201, payload=[{'id': 'a-1'}]))
    when = datetime(2026, 10, 19, 7, 0, tzinfo=timezone.utc)

    assert service.insert('attendance', {'user_id': 'u-1', 'check_in': when}) == {'id': 'a-1'}
    method, _url, kwargs = http.calls[0]
    assert method == 'POST'
    assert kwargs['json'] == {'user_id': 'u-1', 'check_in': '2026-10-19T07:00:00+00:00'}
    assert kwargs['headers']['Prefer'] == 'return=representation'


def test_empty_insert_response_is_an_error():
    service, _http = _client(FakeResponse(status_code=201, payload=[]))
    with pytest.raises(DataServiceError):
        service.insert('attendance', {'user_id': 'u-1'})


def test_update_patches_filtered_rows():
    service, http = _client(FakeResponse(payload=[{'id': 'r-1', 'status': 'approved'}]))
    rows = service.update('personal_trainer_requests', {'status': 'approved'},
                          filters=[('id', 'eq', 'r-1'), ('status', 'neq', 'approved')])
    assert rows == [{'id': 'r-1', 'status': 'approved'}]
    method, _url, kwargs = http.calls[0]
    assert method == 'PATCH'
    assert kwargs['params'] == [('id', 'eq.r-1'), ('status', 'neq.approved')]


def test_http_errors_become_data_service_errors():
    service, _http = _client(FakeResponse(status_code=500, payload={'message': 'boom'}))
    with pytest.raises(DataServiceError) as excinfo:
        service.select('users')
    assert excinfo.value.status_code == 500


@pytest.mark.parametrize('error', [requests.exceptions.Timeout(), requests.exceptions.ConnectionError()])
def test_transport_errors_become_data_service_errors(error):
    service, _http = _client(error)
    with pytest.raises(DataServiceError):
        service.select('users')


def test_sign_in():
    service, http = _client(FakeResponse(payload={
        'access_token': 'jwt', 'user': {'id': 'u-1', 'email': 'ana@example.com'},
    }))
    result = service.sign_in('ana@example.com', 'secret1')
    assert (result.user_id, result.email, result.access_token) == ('u-1', 'ana@example.com', 'jwt')

    method, url, kwargs = http.calls[0]
    assert (method, url) == ('POST', 'https://project.supabase.co/auth/v1/token')
    assert kwargs['params'] == {'grant_type': 'password'}


def test_sign_in_rejected_credentials():
    service, _http = _client(FakeResponse(status_code=400, payload={'error': 'invalid_grant'}))
    with pytest.raises(AuthError):
        service.sign_in('ana@example.com', 'wrong')


def test_sign_up_without_session_is_rejected():
    service, _http = _client(FakeResponse(payload={'id': 'u-1', 'email': 'ana@example.com'}))
    with pytest.raises(AuthError):
        service.sign_up('ana@example.com', 'secret1')


def test_sign_out_sends_user_token():
    service, http = _client(FakeResponse(status_code=204))
    service.sign_out('jwt')
    method, url, kwargs = http.calls[0]
    assert (method, url) == ('POST', 'https://project.supabase.co/auth/v1/logout')
    assert kwargs['headers']['Authorization'] == 'Bearer jwt'


def test_sign_out_without_token_skips_the_call():
    service, http = _client()
    service.sign_out(None)
    assert http.calls == []


def test_get_user_with_expired_token():
    service, _http = _client(FakeResponse(status_code=401, payload={'msg': 'expired'}))
    assert service.get_user('old') is None


def _html_page():
    response = FakeResponse(payload=requests.exceptions.JSONDecodeError('Expecting value', '<html>', 0))
    response.text = '<html>Bad gateway</html>'
    return response


@pytest.mark.parametrize('call', [
    lambda s: s.select('users'),
    lambda s: s.insert('attendance', {'user_id': 'u-1'}),
    lambda s: s.update('attendance', {'check_out': None}, filters=[('id', 'eq', 'a-1')]),
    lambda s: s.sign_in('ana@example.com', 'secret1'),
    lambda s: s.get_user('jwt'),
])
def test_non_json_body_becomes_data_service_error(call):
    service, _http = _client(_html_page())
    with pytest.raises(DataServiceError) as excinfo:
        call(service)
    assert excinfo.value.detail == '<html>Bad gateway</html>'


def test_enrollments_page_data_survives_gateway_page():
    service, _http = _client(_html_page())
    assert admin_services.list_enrollments(service) == []
