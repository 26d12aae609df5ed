"""
Dotted path access over the execution context.

Lookups never raise: a missing key, an out-of-range index or a step into a
scalar all yield ABSENT.
"""

from collections.abc import Mapping
from typing import Any, List, Union


class _Absent:
    """Marker for a value that does not exist in the context"""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return 'ABSENT'

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


ABSENT = _Absent()


def is_absent(value: Any) -> bool:
    """True for ABSENT and None (both mean "nothing there")."""
    return value is ABSENT or value is None


def get_path(data: Any, path: Union[str, List[str]]) -> Any:
    """
    Walk `data` key by key.

    Examples:
        get_path({'a': {'b': 1}}, 'a.b') -> 1
        get_path({'a': {'b': 1}}, 'a.c.d') -> ABSENT
        get_path({'items': [{'x': 1}]}, 'items.0.x') -> 1

    Args:
        data: Context (mapping, list or scalar)
        path: Dot separated path, or a list of keys

    Returns:
        Value found or ABSENT
    """
    keys = path.split('.') if isinstance(path, str) else path

    current = data
    for key in keys:
        if isinstance(current, Mapping):
            if key not in current:
                return ABSENT
            current = current[key]
        elif isinstance(current, (list, tuple)):
            try:
                index = int(key)
            except ValueError:
                return ABSENT
            if not 0 <= index < len(current):
                return ABSENT
            current = current[index]
        else:
            return ABSENT

    return current
