"""
Test Engine Module
Spreadsheet-driven HTTP test execution engine
"""

from test_engine.errors import (
    EngineError,
    TestDefinitionError,
    SubstitutionError,
    ScriptError,
    HttpError,
    AuthError,
)
from test_engine.context import VariableStore, ExecutionContext, CancellationToken
from test_engine.placeholders import PlaceholderResolver
from test_engine.sandbox import ScriptSandbox, PythonScriptSandbox
from test_engine.events import (
    TestEvent,
    SuiteBegin,
    SuiteEnd,
    GroupBegin,
    GroupEnd,
    CaseBegin,
    CaseEnd,
    EventEmitter,
)
from test_engine.auth import AuthTokenManager
from test_engine.executor import CaseExecutor
from test_engine.orchestrator import SuiteOrchestrator
from test_engine.excel_reader import ExcelReader
from test_engine.reporter import Reporter

__all__ = [
    'EngineError',
    'TestDefinitionError',
    'SubstitutionError',
    'ScriptError',
    'HttpError',
    'AuthError',
    'VariableStore',
    'ExecutionContext',
    'CancellationToken',
    'PlaceholderResolver',
    'ScriptSandbox',
    'PythonScriptSandbox',
    'TestEvent',
    'SuiteBegin',
    'SuiteEnd',
    'GroupBegin',
    'GroupEnd',
    'CaseBegin',
    'CaseEnd',
    'EventEmitter',
    'AuthTokenManager',
    'CaseExecutor',
    'SuiteOrchestrator',
    'ExcelReader',
    'Reporter',
]
