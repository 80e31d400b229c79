"""
Engine Errors
Exception hierarchy raised while loading and executing a test plan
"""

from typing import Optional

from models.types import ErrorKind


class EngineError(Exception):
    """Base class for all test engine errors"""

    kind: ErrorKind = ErrorKind.TEST_DEFINITION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TestDefinitionError(EngineError):
    """
    The test plan is structurally unusable.

    Fatal to the whole run: it is never converted into a TestResult.
    """
    __test__ = False
    kind = ErrorKind.TEST_DEFINITION

    def __init__(self, message: str, row: Optional[int] = None, field: Optional[str] = None):
        self.row = row
        self.field = field
        location = []
        if row is not None:
            location.append(f"row {row}")
        if field:
            location.append(f"field '{field}'")
        if location:
            message = f"{message} ({', '.join(location)})"
        super().__init__(message)


class SubstitutionError(EngineError):
    """A placeholder references a variable that has no value"""
    kind = ErrorKind.SUBSTITUTION

    def __init__(self, variable: str, field: str, reason: str = "is not defined"):
        self.variable = variable
        self.field = field
        super().__init__(f"Variable '{variable}' {reason} (in {field})")


class ScriptError(EngineError):
    """
    A pre or post script failed to compile or raised.

    ``assertion`` is True when the script signalled a failed check
    (AssertionError or a failing ``test(...)``), as opposed to a crash.
    """
    kind = ErrorKind.SCRIPT

    def __init__(self, message: str, phase: str, assertion: bool = False):
        self.phase = phase
        self.assertion = assertion
        super().__init__(f"{phase} script: {message}")


class HttpError(EngineError):
    """Network or timeout failure while dispatching a request"""
    kind = ErrorKind.HTTP


class AuthError(EngineError):
    """No token to inject, or none found in an authorizer response"""
    kind = ErrorKind.AUTH
