"""
Utility functions for test data generation.
"""

from utils.keywords import KeywordGenerator, substitute_keywords
from utils.json_path import get_path_value, MISSING

__all__ = [
    'KeywordGenerator',
    'substitute_keywords',
    'get_path_value',
    'MISSING',
]
