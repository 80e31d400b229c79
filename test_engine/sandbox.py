"""
Script Sandbox
Runs pre-request and post-response scripts against a bound context

Scripts are Python snippets. Each invocation gets a fresh namespace that
exposes only:

    vars      read/write access to the run's variable store
    request   read-only view of the request
    response  read-only view of the response (post scripts only)
    test      test(name, condition_or_callable), fails the iteration if falsy
    log       log(message), also bound to print
    json, re, math, random, uuid, datetime

The namespace is discarded after the script returns, so nothing defined
by one script is visible to the next one except through ``vars``. The
modules are bound as per-invocation copies of their public attributes,
so assigning to them never reaches the real module.
"""

import builtins
import copy
import datetime
import json
import math
import random
import re
import uuid
from functools import lru_cache
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType, ModuleType, SimpleNamespace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from base.logger import Logger
from test_engine.context import VariableStore, RequestSnapshot
from test_engine.errors import ScriptError


PRE_SCRIPT = 'pre'
POST_SCRIPT = 'post'

SAFE_BUILTIN_NAMES = (
    'abs', 'all', 'any', 'bin', 'bool', 'chr', 'dict', 'divmod', 'enumerate',
    'filter', 'float', 'format', 'frozenset', 'hex', 'int', 'isinstance',
    'len', 'list', 'map', 'max', 'min', 'ord', 'pow', 'range', 'repr',
    'reversed', 'round', 'set', 'slice', 'sorted', 'str', 'sum', 'tuple',
    'zip', '__build_class__',
    'Exception', 'ArithmeticError', 'AssertionError', 'IndexError',
    'KeyError', 'LookupError', 'TypeError', 'ValueError', 'ZeroDivisionError',
)

SAFE_BUILTINS = {name: getattr(builtins, name) for name in SAFE_BUILTIN_NAMES}

SCRIPT_MODULES = (json, re, math, random, uuid, datetime)

COMPILE_CACHE_SIZE = 256


def _public_attributes(module: ModuleType) -> Dict[str, Any]:
    return {
        name: value for name, value in vars(module).items()
        if not name.startswith('_') and not isinstance(value, ModuleType)
    }


MODULE_EXPORTS = {module.__name__: _public_attributes(module) for module in SCRIPT_MODULES}


@lru_cache(maxsize=COMPILE_CACHE_SIZE)
def _compile_source(source: str, filename: str):
    return compile(source, filename, 'exec')


# ==================== Bound context ====================

@dataclass(frozen=True)
class RequestView:
    """Read-only request as seen by a script"""
    method: str
    url: str
    headers: Mapping[str, str]
    body: Optional[str]

    @classmethod
    def from_snapshot(cls, request: RequestSnapshot) -> 'RequestView':
        return cls(
            method=request.method,
            url=request.url,
            headers=MappingProxyType(dict(request.headers)),
            body=request.body,
        )


@dataclass(frozen=True)
class ResponseView:
    """
    Read-only response as seen by a post script

    ``body`` is the parsed JSON document when the response is JSON and the
    raw text otherwise. It is a private copy, so edits are not seen by the
    engine.
    """
    status: int
    headers: Mapping[str, str]
    body: Any
    text: str
    elapsed: float = 0.0

    @property
    def status_code(self) -> int:
        return self.status

    @property
    def json(self) -> Any:
        return self.body if not isinstance(self.body, str) else None

    @classmethod
    def from_response(cls, response) -> 'ResponseView':
        return cls(
            status=response.status_code,
            headers=MappingProxyType(dict(response.headers)),
            body=copy.deepcopy(response.body),
            text=response.text,
            elapsed=response.elapsed,
        )


class ScriptVariables:
    """Variable store facade bound as ``vars``"""

    def __init__(self, store: VariableStore):
        self._store = store

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._store.get(name, default)

    def set(self, name: str, value: Any):
        self._store.set(name, value)

    def has(self, name: str) -> bool:
        return self._store.has(name)

    def delete(self, name: str):
        self._store.delete(name)

    def __getitem__(self, name: str) -> str:
        value = self._store.get(name)
        if value is None:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: Any):
        self._store.set(name, value)

    def __contains__(self, name: str) -> bool:
        return self._store.has(name)


@dataclass
class ScriptBindings:
    """What a script may see: the store and the in-flight exchange"""
    variables: VariableStore
    request: Optional[RequestView] = None
    response: Optional[ResponseView] = None
    label: str = 'script'


@dataclass
class ScriptOutcome:
    """Named checks and log lines produced by a script that completed"""
    tests: List[Tuple[str, bool]] = field(default_factory=list)
    logs: List[str] = field(default_factory=list)


# ==================== Sandboxes ====================

class ScriptSandbox(ABC):
    """Script execution capability used by the executor"""

    @abstractmethod
    def run(self, source: str, bindings: ScriptBindings, phase: str) -> ScriptOutcome:
        """
        Run a script to completion

        Raises:
            ScriptError: On syntax errors, runtime errors and failed checks
        """


class PythonScriptSandbox(ScriptSandbox):
    """
    Executes scripts with ``exec`` in a restricted, per-invocation namespace

    This limits what a script can reach by accident. It is not a security
    boundary for untrusted scripts.
    """

    def __init__(self):
        self.logger = Logger()

    @staticmethod
    def _compile(source: str, filename: str, phase: str):
        try:
            return _compile_source(source, filename)
        except SyntaxError as e:
            raise ScriptError(f"syntax error at line {e.lineno}: {e.msg}", phase) from e

    def _namespace(self, bindings: ScriptBindings, outcome: ScriptOutcome) -> Dict[str, Any]:
        def log(*parts):
            message = ' '.join(str(p) for p in parts)
            outcome.logs.append(message)
            self.logger.info(f"  [{bindings.label}] {message}")

        def test(name: str, condition: Any = True) -> bool:
            result = condition() if callable(condition) else condition
            passed = bool(result)
            outcome.tests.append((name, passed))
            self.logger.info(f"  {'✓' if passed else '✗'} {name}")
            if not passed:
                raise AssertionError(f"test '{name}' failed")
            return True

        return {
            '__builtins__': dict(SAFE_BUILTINS, print=log),
            '__name__': '__script__',
            'vars': ScriptVariables(bindings.variables),
            'request': bindings.request,
            'response': bindings.response,
            'test': test,
            'log': log,
            **{name: SimpleNamespace(**exports) for name, exports in MODULE_EXPORTS.items()},
        }

    def run(self, source: str, bindings: ScriptBindings, phase: str) -> ScriptOutcome:
        code = self._compile(source, f"<{phase} script: {bindings.label}>", phase)
        outcome = ScriptOutcome()
        namespace = self._namespace(bindings, outcome)

        try:
            exec(code, namespace)
        except AssertionError as e:
            raise ScriptError(str(e) or 'assertion failed', phase, assertion=True) from e
        except Exception as e:
            raise ScriptError(f"{type(e).__name__}: {e}", phase) from e

        return outcome
