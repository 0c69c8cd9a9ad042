from __future__ import annotations

import os
from typing import Optional

from .types import (
    YyValue,
    YyNull,
    YyNumber,
    YyString,
    YyBool,
    YyArray,
    YyMap,
    YyFn,
    YyNative,
)


def yy_equals(lhs: YyValue, rhs: YyValue) -> bool:
    """Structural equality; values of different kinds are never equal."""
    match (lhs, rhs):
        case (YyNull(), YyNull()):
            return True
        case (YyNumber(value=a), YyNumber(value=b)):
            return a == b
        case (YyString(value=a), YyString(value=b)):
            return a == b
        case (YyBool(value=a), YyBool(value=b)):
            return a == b
        case (YyArray(items=a), YyArray(items=b)):
            if a is b:
                return True
            if len(a) != len(b):
                return False
            return all(yy_equals(x, y) for x, y in zip(a, b))
        case (YyMap(slots=a), YyMap(slots=b)):
            if a is b:
                return True
            if a.keys() != b.keys():
                return False
            return all(yy_equals(a[k], b[k]) for k in a)
        case (YyFn(), YyFn()) | (YyNative(), YyNative()):
            return lhs is rhs or (isinstance(lhs, YyNative) and lhs == rhs)
        case _:
            return False


# ---------- Environment configuration ----------

def env_flag(name: str) -> bool:
    """True when the variable is set to a truthy switch (1, true, yes, on)."""
    raw = os.environ.get(name)
    if raw is None:
        return False
    return raw.strip().lower() in ("1", "true", "yes", "on")


def env_int(name: str, default: Optional[int]) -> Optional[int]:
    """Integer variable; 0 or a negative value disables the limit, junk keeps the default."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else None


def env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else None
