"""
Helpers shared by the format handlers.
"""

import re
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, TypeVar

from .errors import SheetRangeError, SheetTypeError

T = TypeVar('T')
K = TypeVar('K', bound=Hashable)

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


def group_by(items: Iterable[T], key: Callable[[T], K]) -> Dict[K, List[T]]:
    """Group items by key, keeping first-seen key order and item order."""
    groups: Dict[K, List[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def unique(values: Iterable[T]) -> List[T]:
    """Drop duplicates, keeping the first occurrence of each value."""
    return list(dict.fromkeys(values))


def parse_int(value: Any) -> Optional[int]:
    """
    Read a leading integer from a string.

    Returns None when the value does not start with a number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_pitch_level(value: Any) -> int:
    """Validate a pitch class in [0, 11]."""
    if not is_integer(value):
        raise SheetTypeError('"pitchLevel" must be an integer')
    if value < 0 or value > 11:
        raise SheetRangeError('"pitchLevel" is out of range [0, 11]')
    return value


def check_bpm(value: Any) -> int:
    """Validate a positive integer tempo."""
    if not is_integer(value):
        raise SheetTypeError('"bpm" must be an integer')
    if value <= 0:
        raise SheetRangeError('"bpm" must be greater than 0')
    return value


def file_stem(filename: str, compound_ext: str = '') -> str:
    """
    Strip the extension from a file name.

    A compound extension (e.g. ``.yp.``) wins over the last dot when present.
    Names without an extension are returned unchanged.
    """
    idx = filename.rfind(compound_ext) if compound_ext else -1
    if idx < 0:
        idx = filename.rfind('.')
    return filename[:idx] if idx > 0 else filename
