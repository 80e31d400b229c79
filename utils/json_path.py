"""
Dot-notation lookups into parsed JSON documents
"""

import re
from typing import Any


MISSING = object()

_SEGMENT = re.compile(r'^([^\[\]]*)((?:\[\d+\])*)$')
_INDEX = re.compile(r'\[(\d+)\]')


def get_path_value(obj: Any, path: str) -> Any:
    """
    Traverse an object (dict or list) using a dot-notation path
    including array indexing like 'data.items[0].token'.

    Returns MISSING when any segment does not exist, so that a JSON
    null can be told apart from an absent field.
    """
    if not path:
        return obj

    current = obj
    for part in path.split('.'):
        match = _SEGMENT.match(part)
        if not match:
            return MISSING

        key, indexes = match.group(1), match.group(2)
        if key:
            if not isinstance(current, dict) or key not in current:
                return MISSING
            current = current[key]

        for index in _INDEX.findall(indexes):
            index = int(index)
            if not isinstance(current, list) or index >= len(current):
                return MISSING
            current = current[index]

    return current
