"""
Models package
Pydantic models for the test plan, enums and dataclasses for run results
"""

from models.test_plan import (
    HTTP_METHODS,
    CaseConfig,
    TestCase,
    Group,
    TestPlan,
)
from models.types import (
    AuthType,
    ResultStatus,
    ErrorKind,
    TestResult,
    GroupStats,
    RunSummary,
    RunReport,
)

__all__ = [
    'HTTP_METHODS',
    'CaseConfig',
    'TestCase',
    'Group',
    'TestPlan',
    'AuthType',
    'ResultStatus',
    'ErrorKind',
    'TestResult',
    'GroupStats',
    'RunSummary',
    'RunReport',
]
