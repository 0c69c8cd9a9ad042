"""Built-in functions (yap, len, yahtzee, ...) registered via yy.runtime."""

from __future__ import annotations

import random
from typing import List, Optional

from .runtime import (
    register_stdlib, context_of, Frame,
    YyArray, YyBool, YyMap, YyNull, YyNumber, YyString, YyValue,
)
from .types import YyArityError, YyIndexError, YyTypeError, YyUserAbort, type_name
from .eval.common import expect_integer, resolve_index, stringify
from .eval.helpers import is_truthy

# One process-wide source for every random pick
_RNG = random.Random()

def seed_random(seed: Optional[int]) -> None:
    _RNG.seed(seed)

def _join(args: List[YyValue]) -> str:
    return " ".join(stringify(arg) for arg in args)

@register_stdlib("yap")
def std_yap(frame: Frame, args: List[YyValue]) -> YyNull:
    context_of(frame).emit(_join(args) + "\n")
    return YyNull()

@register_stdlib("yelp")
def std_yelp(frame: Frame, args: List[YyValue]) -> YyNull:
    context_of(frame).emit(_join(args))
    return YyNull()

@register_stdlib("yahtzee", arity=1)
def std_yahtzee(_frame: Frame, args: List[YyValue]) -> YyValue:
    pool = args[0]

    match pool:
        case YyNumber():
            bound = expect_integer(pool, "yahtzee bound")
            return YyNumber(float(_RNG.randint(min(0, bound), max(0, bound))))
        case YyArray(items=items):
            choices: List[YyValue] = items
        case YyString(value=text):
            choices = [YyString(ch) for ch in text]
        case YyMap(slots=slots):
            choices = [YyString(key) for key in slots]
        case _:
            raise YyTypeError(f"yahtzee cannot pick from {type_name(pool)}")

    if not choices:
        raise YyIndexError(f"yahtzee cannot pick from an empty {type_name(pool)}")

    return _RNG.choice(choices)

@register_stdlib("len", arity=1)
def std_len(_frame: Frame, args: List[YyValue]) -> YyNumber:
    match args[0]:
        case YyString(value=text):
            return YyNumber(float(len(text)))
        case YyArray(items=items):
            return YyNumber(float(len(items)))
        case YyMap(slots=slots):
            return YyNumber(float(len(slots)))
        case other:
            raise YyTypeError(f"len() not supported for {type_name(other)}")

@register_stdlib("chr", arity=1)
def std_chr(_frame: Frame, args: List[YyValue]) -> YyString:
    code = expect_integer(args[0], "chr() argument")
    try:
        return YyString(chr(code))
    except (ValueError, OverflowError):
        raise YyTypeError(f"chr() argument out of range: {code}") from None

@register_stdlib("ord", arity=1)
def std_ord(_frame: Frame, args: List[YyValue]) -> YyNumber:
    arg = args[0]
    if not isinstance(arg, YyString) or len(arg.value) != 1:
        raise YyTypeError("ord() expects a single-character string")
    return YyNumber(float(ord(arg.value)))

def _to_number(value: YyValue, fn_name: str) -> float:
    match value:
        case YyNumber(value=num):
            return num
        case YyBool(value=b):
            return 1.0 if b else 0.0
        case YyString(value=text):
            try:
                return float(text.strip())
            except ValueError:
                raise YyTypeError(f"{fn_name}() cannot convert {text!r}") from None
        case _:
            raise YyTypeError(f"{fn_name}() cannot convert {type_name(value)}")

@register_stdlib("int", arity=1)
def std_int(_frame: Frame, args: List[YyValue]) -> YyNumber:
    num = _to_number(args[0], "int")
    if num != num or num in (float("inf"), float("-inf")):
        raise YyTypeError("int() cannot convert a non-finite number")
    return YyNumber(float(int(num)))

@register_stdlib("float", arity=1)
def std_float(_frame: Frame, args: List[YyValue]) -> YyNumber:
    return YyNumber(_to_number(args[0], "float"))

@register_stdlib("str", arity=1)
def std_str(_frame: Frame, args: List[YyValue]) -> YyString:
    return YyString(stringify(args[0]))

@register_stdlib("yoink")
def std_yoink(_frame: Frame, args: List[YyValue]) -> YyValue:
    if len(args) not in (1, 2):
        raise YyArityError(f"yoink expects 1 or 2 argument(s); got {len(args)}")

    target = args[0]
    if not isinstance(target, YyArray):
        raise YyTypeError(f"yoink expects an array, got {type_name(target)}")
    if not target.items:
        raise YyIndexError("yoink from an empty array")

    if len(args) == 1:
        return target.items.pop()

    idx = resolve_index(expect_integer(args[1], "yoink index"), len(target.items))
    return target.items.pop(idx)

@register_stdlib("assert")
def std_assert(_frame: Frame, args: List[YyValue]) -> YyNull:
    """`assert(cond[, msg])` stops the program when cond is falsy."""
    if len(args) not in (1, 2):
        raise YyArityError(f"assert expects 1 or 2 argument(s); got {len(args)}")

    if is_truthy(args[0]):
        return YyNull()

    message = "assert failed"
    if len(args) == 2:
        message += ": " + stringify(args[1])
    raise YyUserAbort(message)
