"""
Execution Context
Run-scoped state shared by every test case of one run
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Any


class VariableStore:
    """
    Mutable string key/value table for one run

    Written by scripts and token extraction, read by the placeholder
    resolver. Values are always stored as strings.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, str] = {}
        for name, value in (initial or {}).items():
            self.set(name, value)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(name, default)

    def set(self, name: str, value: Any):
        if not isinstance(name, str) or not name:
            raise ValueError(f"Variable name must be a non-empty string, got {name!r}")
        self._values[name] = value if isinstance(value, str) else str(value)

    def has(self, name: str) -> bool:
        return name in self._values

    def delete(self, name: str):
        self._values.pop(name, None)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current values"""
        return dict(self._values)

    def clear(self):
        self._values.clear()

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self):
        return f"VariableStore({len(self._values)} variables)"


@dataclass
class RequestSnapshot:
    """A request as the engine saw it: templates before, values after resolution"""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None


@dataclass
class ExecutionContext:
    """Variable store plus the last completed exchange, for the whole run"""
    variables: VariableStore = field(default_factory=VariableStore)
    last_request: Optional[RequestSnapshot] = None
    last_response: Any = None


class CancellationToken:
    """
    Cooperative cancellation flag

    Set from a signal handler; checked by the engine at case and
    iteration boundaries and while waiting out a delay.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, seconds: float) -> bool:
        """
        Sleep for up to ``seconds``

        Returns:
            bool: True if the wait was cut short by cancellation
        """
        deadline = time.monotonic() + seconds
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return self.is_cancelled
            if self._event.wait(remaining):
                return True
