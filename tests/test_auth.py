"""
Auth token manager and JSON path tests
"""

import pytest

from fixtures import build_case, make_response
from test_engine.auth import AuthTokenManager
from test_engine.context import VariableStore
from test_engine.errors import AuthError
from utils.json_path import MISSING, get_path_value


@pytest.fixture
def manager():
    return AuthTokenManager(token_path='token', token_variable='authToken')


@pytest.mark.unit
class TestExtract:

    def test_stores_token_from_default_path(self, manager):
        store = VariableStore()
        case = build_case(1, config={'authType': 'authorizer'})

        token = manager.extract(case, make_response(200, json_body={'token': 'abc123'}), store)

        assert token == 'abc123'
        assert store.get('authToken') == 'abc123'

    def test_nested_path_from_manager_settings(self):
        manager = AuthTokenManager(token_path='data.session.accessToken', token_variable='jwt')
        store = VariableStore()
        response = make_response(200, json_body={'data': {'session': {'accessToken': 'nested'}}})

        manager.extract(build_case(1, config={'authType': 'authorizer'}), response, store)

        assert store.get('jwt') == 'nested'

    def test_case_overrides_path_and_variable(self, manager):
        store = VariableStore()
        case = build_case(1, config={
            'authType': 'authorizer',
            'tokenPath': 'tokens[1]',
            'tokenVariable': 'adminToken',
        })

        manager.extract(case, make_response(200, json_body={'tokens': ['a', 'b']}), store)

        assert store.get('adminToken') == 'b'
        assert not store.has('authToken')

    def test_repeated_authorizer_overwrites_token(self, manager):
        store = VariableStore()
        case = build_case(1, config={'authType': 'authorizer'})

        manager.extract(case, make_response(200, json_body={'token': 'first'}), store)
        manager.extract(case, make_response(200, json_body={'token': 'second'}), store)

        assert store.get('authToken') == 'second'

    @pytest.mark.parametrize('body', [{'user': 'alice'}, {'token': None}, {'token': ''}, {'token': {'v': 1}}])
    def test_missing_token_in_success_response_raises(self, manager, body):
        with pytest.raises(AuthError):
            manager.extract(build_case(1), make_response(200, json_body=body), VariableStore())

    def test_non_json_success_response_raises(self, manager):
        with pytest.raises(AuthError):
            manager.extract(build_case(1), make_response(200, text='token=abc'), VariableStore())

    def test_error_response_is_ignored(self, manager):
        store = VariableStore()

        assert manager.extract(build_case(1), make_response(403, json_body={'token': 'x'}), store) is None
        assert len(store) == 0


@pytest.mark.unit
class TestInject:

    def test_adds_bearer_header(self, manager):
        store = VariableStore({'authToken': 'abc123'})

        headers = manager.inject(build_case(1), {'Accept': '*/*'}, store)

        assert headers == {'Accept': '*/*', 'Authorization': 'Bearer abc123'}

    def test_replaces_existing_header_case_insensitively(self, manager):
        store = VariableStore({'authToken': 'new'})

        headers = manager.inject(build_case(1), {'AUTHORIZATION': 'Basic old'}, store)

        assert headers == {'Authorization': 'Bearer new'}

    def test_does_not_modify_given_headers(self, manager):
        store = VariableStore({'authToken': 'new'})
        original = {'Authorization': 'Basic old'}

        manager.inject(build_case(1), original, store)

        assert original == {'Authorization': 'Basic old'}

    def test_missing_token_raises(self, manager):
        with pytest.raises(AuthError) as exc_info:
            manager.inject(build_case(1), {}, VariableStore())

        assert 'no token available for authorized case' in exc_info.value.message

    def test_case_variable_override(self, manager):
        store = VariableStore({'authToken': 'user', 'adminToken': 'admin'})
        case = build_case(1, config={'authType': 'authorized', 'tokenVariable': 'adminToken'})

        headers = manager.inject(case, {}, store)

        assert headers['Authorization'] == 'Bearer admin'


@pytest.mark.unit
class TestJsonPath:

    def test_dotted_path_with_indexes(self):
        doc = {'data': {'items': [{'id': 1}, {'id': 2, 'tags': ['x', 'y']}]}}

        assert get_path_value(doc, 'data.items[1].id') == 2
        assert get_path_value(doc, 'data.items[1].tags[0]') == 'x'

    def test_nested_indexes_and_root_list(self):
        assert get_path_value([[1, 2], [3, 4]], '[1][0]') == 3

    def test_missing_segments_return_missing(self):
        doc = {'data': {'items': []}}

        assert get_path_value(doc, 'data.items[0]') is MISSING
        assert get_path_value(doc, 'data.other') is MISSING
        assert get_path_value(doc, 'data.items.id') is MISSING

    def test_null_is_not_missing(self):
        assert get_path_value({'token': None}, 'token') is None

    def test_empty_path_returns_document(self):
        doc = {'a': 1}

        assert get_path_value(doc, '') is doc
