"""
Internal Types
Enums and dataclasses for run-time data structures
"""

from enum import Enum
from typing import Optional, Dict, List, Any
from dataclasses import dataclass, field


# ==================== Framework Enums ====================

class AuthType(Enum):
    """How a test case takes part in token chaining"""
    NONE = "none"
    AUTHORIZER = "authorizer"
    AUTHORIZED = "authorized"


class ResultStatus(Enum):
    """Outcome of one test case iteration"""
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


class ErrorKind(Enum):
    """Error kinds recorded on non-passing results"""
    TEST_DEFINITION = "test_definition"
    SUBSTITUTION = "substitution"
    SCRIPT = "script"
    HTTP = "http"
    AUTH = "auth"


# ==================== Dataclasses ====================

@dataclass
class TestResult:
    """
    Outcome of a single iteration of a test case

    A post-script assertion that does not hold gives FAILED, every other
    engine error gives ERROR. Both carry the error kind and message.
    """
    __test__ = False

    case_id: int
    case_name: str
    group: str
    iteration: int
    status: ResultStatus
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None
    method: Optional[str] = None
    url: Optional[str] = None
    status_code: Optional[int] = None
    response_body: Optional[str] = None
    duration: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status == ResultStatus.PASSED

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for reports

        Returns:
            Dictionary representation
        """
        result = {
            'case_id': self.case_id,
            'case_name': self.case_name,
            'group': self.group,
            'iteration': self.iteration,
            'status': self.status.value,
            'passed': self.passed,
            'method': self.method,
            'url': self.url,
            'status_code': self.status_code,
            'duration': round(self.duration, 4),
        }

        if self.error_kind:
            result['error_kind'] = self.error_kind.value
        if self.message:
            result['message'] = self.message
        if self.response_body is not None:
            result['response_body'] = self.response_body

        return result


@dataclass
class GroupStats:
    """Per-group counters, logged when a group ends"""
    name: str
    total_cases: int = 0
    passed: int = 0
    failed: int = 0
    errored: int = 0
    duration: float = 0.0

    def record(self, result: TestResult):
        if result.status == ResultStatus.PASSED:
            self.passed += 1
        elif result.status == ResultStatus.FAILED:
            self.failed += 1
        else:
            self.errored += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'total_cases': self.total_cases,
            'passed': self.passed,
            'failed': self.failed,
            'errored': self.errored,
            'duration': round(self.duration, 4),
        }


@dataclass
class RunSummary:
    """Run-level counters handed to the reporter"""
    total_cases: int = 0
    total_iterations: int = 0
    passed: int = 0
    failed: int = 0
    errored: int = 0
    duration: float = 0.0
    cancelled: bool = False

    @property
    def completed(self) -> bool:
        return not self.cancelled

    @property
    def pass_rate(self) -> float:
        if self.total_iterations == 0:
            return 0.0
        return self.passed / self.total_iterations * 100

    @property
    def all_passed(self) -> bool:
        return self.passed == self.total_iterations

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_cases': self.total_cases,
            'total_iterations': self.total_iterations,
            'passed': self.passed,
            'failed': self.failed,
            'errored': self.errored,
            'pass_rate': self.pass_rate,
            'duration': round(self.duration, 4),
            'completed': self.completed,
        }


@dataclass
class RunReport:
    """Everything a run produces: results in execution order plus summaries"""
    summary: RunSummary = field(default_factory=RunSummary)
    results: List[TestResult] = field(default_factory=list)
    groups: List[GroupStats] = field(default_factory=list)

    def failed_results(self) -> List[TestResult]:
        return [r for r in self.results if not r.passed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': self.summary.to_dict(),
            'groups': [g.to_dict() for g in self.groups],
            'test_results': [r.to_dict() for r in self.results],
        }
