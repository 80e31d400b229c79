"""
Script sandbox tests
"""

import json
import math

import pytest

from fixtures import make_response
from test_engine.context import RequestSnapshot, VariableStore
from test_engine.errors import ScriptError
from test_engine.sandbox import (
    COMPILE_CACHE_SIZE,
    POST_SCRIPT,
    PRE_SCRIPT,
    PythonScriptSandbox,
    RequestView,
    ResponseView,
    ScriptBindings,
    _compile_source,
)


@pytest.fixture
def sandbox():
    return PythonScriptSandbox()


@pytest.fixture
def store():
    return VariableStore()


def post_bindings(store, response, label='case 1'):
    request = RequestView.from_snapshot(RequestSnapshot('GET', 'http://api.test/items', {}, None))
    return ScriptBindings(store, request=request, response=ResponseView.from_response(response), label=label)


@pytest.mark.unit
class TestBindings:

    def test_script_reads_and_writes_variables(self, sandbox, store):
        store.set('greeting', 'hello')

        sandbox.run("vars['reply'] = vars['greeting'] + ' world'", ScriptBindings(store), PRE_SCRIPT)

        assert store.get('reply') == 'hello world'

    def test_values_are_stored_as_strings(self, sandbox, store):
        sandbox.run("vars.set('count', 3)\nvars['flag'] = True", ScriptBindings(store), PRE_SCRIPT)

        assert store.get('count') == '3'
        assert store.get('flag') == 'True'

    def test_post_script_sees_parsed_json_body(self, sandbox, store):
        response = make_response(200, json_body={'items': [{'id': 11}, {'id': 12}]})

        sandbox.run("vars['second'] = response.body['items'][1]['id']", post_bindings(store, response), POST_SCRIPT)

        assert store.get('second') == '12'

    def test_post_script_sees_raw_text_for_non_json(self, sandbox, store):
        response = make_response(200, text='plain ok')

        sandbox.run("vars['text'] = response.body.upper()", post_bindings(store, response), POST_SCRIPT)

        assert store.get('text') == 'PLAIN OK'

    def test_pre_script_sees_request_templates(self, sandbox, store):
        request = RequestView.from_snapshot(RequestSnapshot('POST', 'http://api.test/{{id}}', {'X-A': '1'}, None))

        sandbox.run("vars['seen'] = request.method + ' ' + request.url", ScriptBindings(store, request=request), PRE_SCRIPT)

        assert store.get('seen') == 'POST http://api.test/{{id}}'

    def test_request_and_response_are_read_only(self, sandbox, store):
        response = make_response(200, json_body={'id': 1})

        with pytest.raises(ScriptError):
            sandbox.run("response.status = 500", post_bindings(store, response), POST_SCRIPT)
        with pytest.raises(ScriptError):
            sandbox.run("response.headers['X-New'] = '1'", post_bindings(store, response), POST_SCRIPT)

    def test_body_edits_do_not_reach_the_engine(self, sandbox, store):
        response = make_response(200, json_body={'id': 1})

        sandbox.run("response.body['id'] = 99", post_bindings(store, response), POST_SCRIPT)

        assert response.json_data == {'id': 1}

    def test_preloaded_modules_are_available(self, sandbox, store):
        script = (
            "vars['id'] = str(uuid.uuid4())\n"
            "vars['doubled'] = json.dumps({'n': math.floor(2.5) * 2})\n"
            "vars['year'] = datetime.date(2024, 5, 1).year\n"
            "vars['match'] = re.sub('[0-9]', '#', 'a1b2')"
        )

        sandbox.run(script, ScriptBindings(store), PRE_SCRIPT)

        assert len(store.get('id')) == 36
        assert store.get('doubled') == '{"n": 4}'
        assert store.get('year') == '2024'
        assert store.get('match') == 'a#b#'


@pytest.mark.unit
class TestIsolation:

    def test_script_globals_do_not_leak_between_runs(self, sandbox, store):
        sandbox.run("leaked = 'value'", ScriptBindings(store), PRE_SCRIPT)

        with pytest.raises(ScriptError) as exc_info:
            sandbox.run("vars['copy'] = leaked", ScriptBindings(store), PRE_SCRIPT)

        assert 'NameError' in exc_info.value.message
        assert not store.has('copy')

    def test_module_attributes_set_by_a_script_do_not_leak(self, sandbox, store):
        sandbox.run("math.leaked = 'from case 1'", ScriptBindings(store), PRE_SCRIPT)

        with pytest.raises(ScriptError) as exc_info:
            sandbox.run("vars['seen'] = math.leaked", ScriptBindings(store), PRE_SCRIPT)

        assert 'AttributeError' in exc_info.value.message
        assert not hasattr(math, 'leaked')

    def test_replaced_module_functions_do_not_reach_the_engine(self, sandbox, store):
        sandbox.run("json.loads = lambda *a, **k: 'hijacked'", ScriptBindings(store), PRE_SCRIPT)

        assert json.loads('{"a": 1}') == {'a': 1}
        sandbox.run("vars['parsed'] = json.loads('{\"a\": 1}')['a']", ScriptBindings(store), PRE_SCRIPT)
        assert store.get('parsed') == '1'

    def test_unsafe_builtins_are_not_available(self, sandbox, store):
        for script in ("open('/etc/passwd')", "__import__('os')", "eval('1 + 1')"):
            with pytest.raises(ScriptError):
                sandbox.run(script, ScriptBindings(store), PRE_SCRIPT)

    def test_import_statement_is_rejected(self, sandbox, store):
        with pytest.raises(ScriptError):
            sandbox.run("import os", ScriptBindings(store), PRE_SCRIPT)

    def test_functions_and_classes_can_be_defined(self, sandbox, store):
        script = (
            "class Point:\n"
            "    def __init__(self, x):\n"
            "        self.x = x\n"
            "def double(p):\n"
            "    return p.x * 2\n"
            "vars['result'] = double(Point(21))"
        )

        sandbox.run(script, ScriptBindings(store), PRE_SCRIPT)

        assert store.get('result') == '42'


@pytest.mark.unit
class TestFailures:

    def test_syntax_error_becomes_script_error(self, sandbox, store):
        with pytest.raises(ScriptError) as exc_info:
            sandbox.run("vars['a'] = (", ScriptBindings(store), PRE_SCRIPT)

        assert 'syntax error' in exc_info.value.message
        assert exc_info.value.phase == PRE_SCRIPT
        assert not exc_info.value.assertion

    def test_assertion_error_is_flagged_as_failed_check(self, sandbox, store):
        response = make_response(500, json_body={})

        with pytest.raises(ScriptError) as exc_info:
            sandbox.run("assert response.status == 200, 'status was not 200'", post_bindings(store, response), POST_SCRIPT)

        assert exc_info.value.assertion
        assert 'status was not 200' in exc_info.value.message

    def test_test_helper_records_checks(self, sandbox, store):
        response = make_response(200, json_body={'name': 'alice'})
        script = (
            "test('status is 200', response.status == 200)\n"
            "test('name is alice', lambda: response.body['name'] == 'alice')"
        )

        outcome = sandbox.run(script, post_bindings(store, response), POST_SCRIPT)

        assert outcome.tests == [('status is 200', True), ('name is alice', True)]

    def test_test_helper_fails_on_false_condition(self, sandbox, store):
        response = make_response(201, json_body={})

        with pytest.raises(ScriptError) as exc_info:
            sandbox.run("test('status is 200', lambda: response.status == 200)", post_bindings(store, response), POST_SCRIPT)

        assert exc_info.value.assertion
        assert "test 'status is 200' failed" in exc_info.value.message

    def test_log_lines_are_collected(self, sandbox, store):
        outcome = sandbox.run("log('first')\nprint('second', 2)", ScriptBindings(store), PRE_SCRIPT)

        assert outcome.logs == ['first', 'second 2']


@pytest.mark.unit
def test_compiled_scripts_are_cached_with_a_bound(sandbox, store):
    """Test: repeated scripts reuse compiled code and the cache is bounded"""
    script = "vars['n'] = int(vars.get('n', '0')) + 1"

    before = _compile_source.cache_info().hits
    sandbox.run(script, ScriptBindings(store), PRE_SCRIPT)
    sandbox.run(script, ScriptBindings(store), PRE_SCRIPT)

    assert store.get('n') == '2'
    assert _compile_source.cache_info().hits > before
    assert _compile_source.cache_info().maxsize == COMPILE_CACHE_SIZE
