"""
Base infrastructure components shared by the engine, the API client
and the test suite.
"""

from .logger import Logger

__all__ = [
    'Logger',
]
