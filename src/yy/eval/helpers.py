from __future__ import annotations

from ..runtime import YyArray, YyBool, YyMap, YyNull, YyString, YyValue

def is_truthy(val: YyValue) -> bool:
    match val:
        case YyBool(value=b):
            return b
        case YyNull():
            return False
        case YyString(value=s):
            return bool(s)
        case YyArray(items=items):
            return bool(items)
        case YyMap(slots=slots):
            return bool(slots)
        case _:
            return True
