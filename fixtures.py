"""
Test Fixtures
Provides reusable fixtures for all tests

ARCHITECTURE NOTE:
- All pytest fixtures are defined HERE (single source of truth)
- Fixtures are imported in conftest.py via "from fixtures import *"
- FakeTransport stands in for HttpClient: it records every request and
  answers through a handler, so engine tests never touch the network
- build_case / make_response are plain helpers that tests import directly
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

from api.base_client import HttpResponse
from api.config import RunSettings, parse_group_list
from base.logger import Logger
from models.test_plan import CaseConfig, Group, TestCase, TestPlan
from test_engine.auth import AuthTokenManager
from test_engine.context import CancellationToken, ExecutionContext
from test_engine.events import EventEmitter
from test_engine.executor import CaseExecutor
from test_engine.orchestrator import SuiteOrchestrator
from test_engine.placeholders import PlaceholderResolver


# ==================== Helpers ====================

def make_response(
    status_code: int = 200,
    json_body: Any = None,
    text: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> HttpResponse:
    """Build an HttpResponse without a network round trip"""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = 'utf-8'
    if json_body is not None:
        response._content = json.dumps(json_body).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    else:
        response._content = (text or '').encode('utf-8')
        response.headers['Content-Type'] = 'text/plain'
    response.headers.update(headers or {})
    return HttpResponse(response)


@dataclass
class SentRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None


class FakeTransport:
    """Records requests and answers them with ``handler(request)``"""

    def __init__(self, handler: Optional[Callable[[SentRequest], HttpResponse]] = None):
        self.requests: List[SentRequest] = []
        self.handler = handler or (lambda request: make_response(200, json_body={'ok': True}))

    def send(self, method, url, headers=None, body=None) -> HttpResponse:
        request = SentRequest(method, url, dict(headers or {}), body)
        self.requests.append(request)
        return self.handler(request)

    @property
    def urls(self) -> List[str]:
        return [r.url for r in self.requests]


def build_case(case_id: int = 1, url: str = 'http://api.test/items', config: Optional[Dict[str, Any]] = None,
               **kwargs) -> TestCase:
    """Test case with sensible defaults; config takes the camelCase cell keys"""
    kwargs.setdefault('name', f'case {case_id}')
    kwargs.setdefault('method', 'GET')
    return TestCase(id=case_id, url=url, config=CaseConfig(**(config or {})), **kwargs)


def build_plan(**groups: List[TestCase]) -> TestPlan:
    """Plan with one group per keyword argument, in argument order"""
    return TestPlan(groups=[Group(name=name, cases=cases) for name, cases in groups.items()])


# ==================== Engine Fixtures ====================

@pytest.fixture
def transport():
    """Transport answering 200 {"ok": true} unless a test sets a handler"""
    return FakeTransport()


@pytest.fixture
def context():
    """Fresh execution context per test"""
    return ExecutionContext()


@pytest.fixture
def cancel_token():
    return CancellationToken()


@pytest.fixture
def resolver():
    """Resolver with a fixed environment and a scripted operator"""
    return PlaceholderResolver(
        prompt=lambda name: f"typed-{name}",
        environ={'API_USER': 'alice'}
    )


@pytest.fixture
def recorded_events():
    """Lifecycle events emitted during the test, in order"""
    return []


@pytest.fixture
def events(recorded_events):
    return EventEmitter([recorded_events.append])


@pytest.fixture
def executor(transport, resolver, cancel_token, events):
    return CaseExecutor(
        transport=transport,
        resolver=resolver,
        auth=AuthTokenManager(token_path='token', token_variable='authToken'),
        cancel_token=cancel_token,
        events=events
    )


@pytest.fixture
def orchestrator(executor, cancel_token):
    return SuiteOrchestrator(executor, cancel_token)


# ==================== Data-Driven Test Fixtures ====================

@pytest.fixture(scope="session")
def run_settings(pytestconfig):
    """Run settings from the environment, overridden by command line options"""
    return RunSettings().override(
        test_file=pytestconfig.getoption("--excel"),
        groups=parse_group_list(pytestconfig.getoption("--groups")),
        base_url=pytestconfig.getoption("--base-url"),
        worksheet=pytestconfig.getoption("--worksheet"),
        start_row=pytestconfig.getoption("--start-row"),
        end_row=pytestconfig.getoption("--end-row"),
    )


# ==================== Function-Scoped Fixtures ====================

@pytest.fixture(scope="function", autouse=True)
def init_error_collection():
    """Initialize error collection for each test."""
    Logger.init_error_collection()
    yield
