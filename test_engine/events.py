"""
Test Events
Lifecycle events emitted while a plan runs, for external reporters

Order for one run:

    SuiteBegin
      GroupBegin
        CaseBegin, CaseEnd      once per iteration that starts
      GroupEnd
    SuiteEnd

SuiteEnd is emitted for cancelled runs too, but not when a
TestDefinitionError aborts the run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from models.test_plan import TestCase
from models.types import GroupStats, RunSummary, TestResult


class TestEvent:
    """Base class of all lifecycle events"""
    __test__ = False

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass
class SuiteBegin(TestEvent):
    suite_name: str
    groups: List[str]
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class SuiteEnd(TestEvent):
    suite_name: str
    duration: float
    summary: RunSummary
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class GroupBegin(TestEvent):
    group_name: str
    total_cases: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class GroupEnd(TestEvent):
    group_name: str
    duration: float
    stats: GroupStats
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CaseBegin(TestEvent):
    """An iteration of a case is about to run (after its delay)"""
    case: TestCase
    group_name: str
    iteration: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CaseEnd(TestEvent):
    """An iteration finished; ``result`` carries status, response and duration"""
    case: TestCase
    group_name: str
    iteration: int
    result: TestResult
    timestamp: datetime = field(default_factory=datetime.now)


EventListener = Callable[[TestEvent], None]


class EventEmitter:
    """Delivers events to subscribed listeners in subscription order"""

    def __init__(self, listeners: Optional[Iterable[EventListener]] = None):
        self.listeners: List[EventListener] = list(listeners or [])

    def subscribe(self, listener: EventListener):
        self.listeners.append(listener)

    def emit(self, event: TestEvent):
        for listener in self.listeners:
            listener(event)
