"""
Reporter tests
"""

import json

import pytest

from models.types import ErrorKind, GroupStats, ResultStatus, RunReport, RunSummary, TestResult
from test_engine.reporter import Reporter


@pytest.fixture
def report():
    results = [
        TestResult(1, 'login', 'auth', 1, ResultStatus.PASSED, method='POST',
                   url='http://api.test/login', status_code=200, duration=0.1),
        TestResult(2, 'profile', 'auth', 1, ResultStatus.ERROR, ErrorKind.AUTH,
                   'no token available for authorized case', method='GET', url='http://api.test/me'),
        TestResult(3, 'orders', 'orders', 1, ResultStatus.FAILED, ErrorKind.SCRIPT,
                   'post script: expected 200', method='GET', url='http://api.test/orders',
                   status_code=500, response_body='{"error": "boom"}'),
    ]
    summary = RunSummary(total_cases=3, total_iterations=3, passed=1, failed=1, errored=1, duration=1.5)
    groups = [
        GroupStats('auth', total_cases=2, passed=1, errored=1),
        GroupStats('orders', total_cases=1, failed=1),
    ]
    return RunReport(summary=summary, results=results, groups=groups)


@pytest.mark.unit
def test_generate_report_writes_json_and_text(tmp_path, report):
    """Test: both report files are written with summary, groups and results"""
    paths = Reporter(str(tmp_path / 'results')).generate_report(report, source='suite.xlsx')

    with open(paths['json'], encoding='utf-8') as f:
        data = json.load(f)
    assert data['source'] == 'suite.xlsx'
    assert data['summary']['passed'] == 1
    assert data['summary']['completed'] is True
    assert [g['name'] for g in data['groups']] == ['auth', 'orders']
    assert [r['status'] for r in data['test_results']] == ['passed', 'error', 'failed']
    assert data['test_results'][1]['error_kind'] == 'auth'

    with open(paths['text'], encoding='utf-8') as f:
        text = f.read()
    assert 'API TEST RUN REPORT' in text
    assert '✓ 1 [1] - PASS - login' in text
    assert '! 2 [1] - ERROR - profile' in text
    assert 'FAILURES' in text
    assert 'post script: expected 200' in text
    assert 'COMPLETED' in text


@pytest.mark.unit
def test_cancelled_run_is_marked_partial(tmp_path, report):
    """Test: a cancelled run is reported as partial"""
    report.summary.cancelled = True

    paths = Reporter(str(tmp_path)).generate_report(report)

    with open(paths['text'], encoding='utf-8') as f:
        assert 'CANCELLED (partial results)' in f.read()


@pytest.mark.unit
def test_print_summary(tmp_path, report, capsys):
    """Test: console summary lists counts and failing messages"""
    Reporter(str(tmp_path)).print_summary(report)

    out = capsys.readouterr().out
    assert 'Errored:      1' in out
    assert '✗ FAIL - 3 [1]: orders' in out
    assert 'no token available for authorized case' in out


@pytest.mark.unit
def test_result_to_dict_omits_empty_fields():
    """Test: passing results carry no error fields"""
    result = TestResult(1, 'ok', '', 1, ResultStatus.PASSED, duration=0.123456)

    data = result.to_dict()

    assert 'error_kind' not in data
    assert 'message' not in data
    assert data['duration'] == 0.1235
    assert data['passed'] is True
