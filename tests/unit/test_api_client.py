"""
Unit tests for obani/api/client.py.

Mocking strategy:
  - ApiClient takes an injectable `http` session; tests pass a MagicMock
    whose .request returns a fake response (or raises)
  - Assertions look at the ApiResult and at the arguments handed to http.request
"""

import pytest
import requests
from unittest.mock import MagicMock

from obani.api.client import ApiClient, fetch_concurrently
from obani.models import ApiResult, AuthState, Contact, Interaction, Introduction, Page

BASE = 'https://api.test/api'


def _response(payload=None, status=200, json_error=False):
    resp = MagicMock()
    resp.status_code = status
    if json_error:
        resp.json.side_effect = ValueError('Expecting value')
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def client(http):
    return ApiClient(base_url=BASE, http=http, timeout=(1, 2))


def _call_kwargs(http):
    args, kwargs = http.request.call_args
    return args, kwargs


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------

class TestHeaders:

    def test_no_token_no_authorization(self, client, http):
        http.request.return_value = _response({'success': True, 'data': None})
        client.request('GET', '/auth/me')
        _, kwargs = _call_kwargs(http)
        assert kwargs['headers'] == {'Content-Type': 'application/json'}

    def test_bearer_token_from_provider(self, client, http):
        client.token_provider = lambda: 'tok-1'
        http.request.return_value = _response({'success': True, 'data': None})
        client.request('GET', '/auth/me')
        _, kwargs = _call_kwargs(http)
        assert kwargs['headers']['Authorization'] == 'Bearer tok-1'

    def test_token_read_per_request(self, client, http):
        tokens = iter(['first', None])
        client.token_provider = lambda: next(tokens)
        http.request.return_value = _response({'success': True, 'data': None})
        client.request('GET', '/a')
        client.request('GET', '/b')
        second = http.request.call_args_list[1][1]['headers']
        assert 'Authorization' not in second

    def test_url_and_timeout(self, client, http):
        http.request.return_value = _response({'success': True, 'data': None})
        client.request('GET', '/contacts/42')
        args, kwargs = _call_kwargs(http)
        assert args == ('GET', f'{BASE}/contacts/42')
        assert kwargs['timeout'] == (1, 2)

    def test_base_url_trailing_slash_stripped(self, http):
        c = ApiClient(base_url=BASE + '/', http=http)
        http.request.return_value = _response({'success': True, 'data': None})
        c.request('GET', '/x')
        assert http.request.call_args[0][1] == f'{BASE}/x'


# ---------------------------------------------------------------------------
# Envelope normalization
# ---------------------------------------------------------------------------

class TestEnvelope:

    def test_success_passes_data(self, client, http):
        http.request.return_value = _response({'success': True, 'data': {'x': 1}})
        result = client.request('GET', '/x')
        assert result == ApiResult(success=True, data={'x': 1}, status=200)

    def test_server_failure_keeps_error_and_status(self, client, http):
        http.request.return_value = _response({'success': False, 'error': 'Invalid credentials'}, status=401)
        result = client.request('POST', '/auth/login')
        assert not result.success
        assert result.error == 'Invalid credentials'
        assert result.unauthorized

    def test_connection_error_becomes_failed_result(self, client, http):
        http.request.side_effect = requests.exceptions.ConnectionError('Connection refused')
        result = client.request('GET', '/contacts')
        assert not result.success
        assert 'Connection refused' in result.error
        assert result.status is None

    def test_timeout_becomes_failed_result(self, client, http):
        http.request.side_effect = requests.exceptions.Timeout()
        result = client.request('GET', '/contacts')
        assert not result.success
        assert result.error == 'Network error'

    def test_non_json_body(self, client, http):
        http.request.return_value = _response(status=502, json_error=True)
        result = client.request('GET', '/contacts')
        assert not result.success
        assert result.error == 'Invalid response from server (HTTP 502)'

    def test_non_object_payload(self, client, http):
        http.request.return_value = _response(['not', 'an', 'envelope'])
        result = client.request('GET', '/contacts')
        assert not result.success
        assert result.error == 'Unexpected response from server'

    def test_payload_not_matching_model(self, client, http):
        http.request.return_value = _response({'success': True, 'data': {'user': {'email': 'x'}, 'token': 't'}})
        result = client.login('a@b.io', 'pw')
        assert not result.success
        assert result.error.startswith('Malformed response from server')


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

class TestEndpoints:

    def test_login_parses_auth_state(self, client, http):
        http.request.return_value = _response({
            'success': True,
            'data': {'user': {'id': 'u1', 'email': 'a@b.io', 'name': 'Ana'}, 'token': 'tok'},
        })
        result = client.login('a@b.io', 'pw')
        assert isinstance(result.data, AuthState)
        assert result.data.token == 'tok'
        _, kwargs = _call_kwargs(http)
        assert kwargs['json'] == {'email': 'a@b.io', 'password': 'pw'}

    def test_register_sends_name(self, client, http):
        http.request.return_value = _response({'success': False, 'error': 'Email taken'})
        client.register('a@b.io', 'pw', 'Ana')
        assert http.request.call_args[1]['json'] == {'email': 'a@b.io', 'password': 'pw', 'name': 'Ana'}

    def test_list_contacts_pagination_params(self, client, http):
        http.request.return_value = _response({
            'success': True,
            'data': {'items': [{'id': 'c1', 'firstName': 'Ana'}], 'total': 1, 'page': 1,
                     'pageSize': 200, 'totalPages': 1},
        })
        result = client.list_contacts(1, 200)
        assert isinstance(result.data, Page)
        assert isinstance(result.data.items[0], Contact)
        assert http.request.call_args[1]['params'] == {'page': 1, 'pageSize': 200}

    def test_get_all_contacts_returns_list(self, client, http):
        http.request.return_value = _response({'success': True, 'data': [{'firstName': 'Ana'}]})
        result = client.get_all_contacts()
        assert [c.first_name for c in result.data] == ['Ana']
        assert http.request.call_args[0][1] == f'{BASE}/contacts/all'

    def test_create_contact_sends_wire_shape(self, client, http):
        http.request.return_value = _response({'success': True, 'data': {'id': 'c9', 'firstName': 'Ana'}})
        result = client.create_contact(Contact(first_name='Ana', relationship_strength=4))
        body = http.request.call_args[1]['json']
        assert body['firstName'] == 'Ana'
        assert body['relationshipStrength'] == 4
        assert result.data.id == 'c9'

    def test_delete_contact(self, client, http):
        http.request.return_value = _response({'success': True, 'data': None})
        result = client.delete_contact('c1')
        assert result.success
        assert http.request.call_args[0] == ('DELETE', f'{BASE}/contacts/c1')

    def test_contact_interactions(self, client, http):
        http.request.return_value = _response({
            'success': True,
            'data': {'items': [{'id': 'i1', 'contactId': 'c1', 'type': 'CALL'}]},
        })
        result = client.get_contact_interactions('c1')
        assert isinstance(result.data.items[0], Interaction)

    def test_list_introductions_status_filter(self, client, http):
        http.request.return_value = _response({'success': True, 'data': {'items': []}})
        client.list_introductions(status='MADE')
        assert http.request.call_args[1]['params'] == {'page': 1, 'pageSize': 20, 'status': 'MADE'}

    def test_suggested_introductions(self, client, http):
        http.request.return_value = _response({'success': True, 'data': [{'id': 'n1', 'matchScore': 90}]})
        result = client.get_suggested_introductions(limit=5)
        assert isinstance(result.data[0], Introduction)
        assert http.request.call_args[1]['params'] == {'limit': 5}

    def test_dashboard_sections_and_at_risk(self, client, http):
        http.request.return_value = _response({'success': True, 'data': {
            'networkHealth': {'totalContacts': 3},
            'introductionMetrics': {'successRate': 0.5},
            'atRiskContacts': [{'firstName': 'Ben', 'lastContactedAt': '2026-06-01T00:00:00Z'}],
        }})
        result = client.get_dashboard()
        assert result.success
        assert result.data['networkHealth']['totalContacts'] == 3
        assert result.data['networkHealth']['averageStrength'] == 0.0
        assert result.data['introductionMetrics']['successRate'] == 0.5
        assert result.data['growthMetrics'] == {'monthlyTrend': []}
        assert isinstance(result.data['atRiskContacts'][0], Contact)

    @pytest.mark.parametrize('data', [
        ['not', 'an', 'object'],
        {'networkHealth': 'healthy'},
        {'interactionTrends': {'byType': ['CALL']}},
        {'introductionMetrics': {'successRate': 'half'}},
        {'atRiskContacts': ['Ben']},
        {'atRiskContacts': [{'firstName': 'P', 'lastContactedAt': 'yesterday'}]},
    ])
    def test_malformed_dashboard_is_failed_result(self, client, http, data):
        http.request.return_value = _response({'success': True, 'data': data})
        result = client.get_dashboard()
        assert not result.success
        assert result.error.startswith('Malformed response from server')

    def test_at_risk(self, client, http):
        http.request.return_value = _response({'success': True, 'data': [{'firstName': 'Ben'}]})
        result = client.get_at_risk(limit=3)
        assert result.data[0].first_name == 'Ben'
        assert http.request.call_args[1]['params'] == {'limit': 3}


# ---------------------------------------------------------------------------
# fetch_concurrently
# ---------------------------------------------------------------------------

def test_fetch_concurrently_keeps_argument_order():
    a = ApiResult(success=True, data='a')
    b = ApiResult(success=False, error='b failed')
    results = fetch_concurrently(lambda: a, lambda: b)
    assert results == [a, b]


def test_fetch_concurrently_one_failure_does_not_hide_the_other():
    ok = ApiResult(success=True, data=[1])
    results = fetch_concurrently(lambda: ok, lambda: ApiResult(success=False, error='Network error'))
    assert results[0].data == [1]
    assert results[1].error == 'Network error'
