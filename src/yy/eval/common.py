from __future__ import annotations

from typing import Any, Callable, Iterator

from ..runtime import Frame, YyNumber, YyString, YyValue
from ..types import Completion, YyIndexError, YyTypeError, type_name

EvalFunc = Callable[[Any, Frame], Completion]

IMPLICIT_BINDER = "yt"

def stringify(value: YyValue) -> str:
    """Display text; strings print raw at the top level, quoted inside containers."""
    if isinstance(value, YyString):
        return value.value

    return repr(value)

def map_key(value: YyValue) -> str:
    return stringify(value)

def expect_number(value: YyValue, context: str) -> float:
    if isinstance(value, YyNumber):
        return value.value

    raise YyTypeError(f"{context} must be a number, got {type_name(value)}")

def expect_integer(value: YyValue, context: str) -> int:
    num = expect_number(value, context)
    if not num.is_integer():
        raise YyTypeError(f"{context} must be an integer, got {value!r}")

    return int(num)

def resolve_index(index: int, length: int) -> int:
    """Map a possibly negative index onto 0..length-1."""
    resolved = index + length if index < 0 else index
    if resolved < 0 or resolved >= length:
        raise YyIndexError(f"index {index} out of bounds for length {length}")

    return resolved

def inclusive_range(start: int, end: int) -> Iterator[int]:
    """Both ends included; counts down when start > end."""
    step = 1 if start <= end else -1
    return iter(range(start, end + step, step))
