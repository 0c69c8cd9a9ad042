"""Permissive coercions layered over the strict operators while a yolo block runs."""
from __future__ import annotations

import math
from typing import Callable, Dict, Optional, Tuple

from ..runtime import (
    RunContext, YyArray, YyBool, YyFn, YyMap, YyNative, YyNull, YyNumber, YyString, YyValue, bake,
)
from ..types import YyDivideByZero, YyResourceExceeded, YyTypeError, type_name
from .common import stringify

BinaryRule = Callable[[YyValue, YyValue, RunContext], YyValue]

# (op, lhs type, rhs type) -> rule; None matches any operand type
YOLO_BINARY: Dict[Tuple[str, Optional[type], Optional[type]], BinaryRule] = {}

def yolo_rule(op: str, lhs: Optional[type], rhs: Optional[type]):
    def dec(fn: BinaryRule) -> BinaryRule:
        YOLO_BINARY[(op, lhs, rhs)] = fn
        return fn

    return dec

def _count(value: YyNumber, unit: int, what: str, ctx: RunContext) -> int:
    """Repeat count clamped at zero, checked against the collection ceiling."""
    n = value.value
    if math.isnan(n) or n <= 0 or unit == 0:
        return 0
    if math.isinf(n):
        raise YyResourceExceeded(f"cannot repeat a {what} infinitely many times")

    count = int(n)
    ctx.check_size(unit * count, what)
    return count

@yolo_rule('*', YyString, YyNumber)
def _repeat_string(lhs: YyString, rhs: YyNumber, ctx: RunContext) -> YyValue:
    return YyString(lhs.value * _count(rhs, len(lhs.value), "string", ctx))

@yolo_rule('*', YyNumber, YyString)
def _repeat_string_swapped(lhs: YyNumber, rhs: YyString, ctx: RunContext) -> YyValue:
    return _repeat_string(rhs, lhs, ctx)

@yolo_rule('*', YyArray, YyNumber)
def _repeat_array(lhs: YyArray, rhs: YyNumber, ctx: RunContext) -> YyValue:
    return YyArray(lhs.items * _count(rhs, len(lhs.items), "array", ctx))

@yolo_rule('*', YyNumber, YyArray)
def _repeat_array_swapped(lhs: YyNumber, rhs: YyArray, ctx: RunContext) -> YyValue:
    return _repeat_array(rhs, lhs, ctx)

@yolo_rule('/', YyNumber, YyString)
@yolo_rule('/', YyString, YyNumber)
def _split_chars(lhs: YyValue, rhs: YyValue, ctx: RunContext) -> YyValue:
    """`n / "abc"` breaks the string into one-character strings; a count below 1 gives null."""
    num, text = (lhs, rhs) if isinstance(lhs, YyNumber) else (rhs, lhs)
    if not num.value > 0:
        return YyNull()
    return YyArray([YyString(ch) for ch in text.value])

@yolo_rule('+', YyFn, None)
@yolo_rule('+', YyNative, None)
def _bake(lhs: YyValue, rhs: YyValue, ctx: RunContext) -> YyValue:
    return bake(lhs, rhs)

# A function on the right bakes too; the exact String pairs outrank concatenation below
@yolo_rule('+', None, YyFn)
@yolo_rule('+', None, YyNative)
@yolo_rule('+', YyString, YyFn)
@yolo_rule('+', YyString, YyNative)
def _bake_swapped(lhs: YyValue, rhs: YyValue, ctx: RunContext) -> YyValue:
    return bake(rhs, lhs)

@yolo_rule('+', YyString, None)
@yolo_rule('+', None, YyString)
def _concat(lhs: YyValue, rhs: YyValue, ctx: RunContext) -> YyValue:
    text = stringify(lhs) + stringify(rhs)
    ctx.check_size(len(text), "string")
    return YyString(text)

def _as_number(value: YyValue) -> YyValue:
    if isinstance(value, YyBool):
        return YyNumber(1.0 if value.value else 0.0)
    return value

def _bool_arith(op: str) -> BinaryRule:
    def rule(lhs: YyValue, rhs: YyValue, ctx: RunContext) -> YyValue:
        from .expr import apply_strict_operator
        return apply_strict_operator(op, _as_number(lhs), _as_number(rhs), ctx)
    return rule

for _op in ('+', '-', '*', '/', '%', '<', '>', '<=', '>='):
    for _pair in ((YyBool, YyNumber), (YyNumber, YyBool), (YyBool, YyBool)):
        YOLO_BINARY[(_op, *_pair)] = _bool_arith(_op)

def apply_yolo_operator(op: str, lhs: YyValue, rhs: YyValue, ctx: RunContext) -> Optional[YyValue]:
    """Result of a coercion rule, or None to fall through to strict dispatch."""
    if op in ('/', '%') and isinstance(rhs, YyNumber) and rhs.value == 0:
        raise YyDivideByZero("modulo by zero" if op == '%' else "division by zero")

    for key in ((op, type(lhs), type(rhs)), (op, type(lhs), None), (op, None, type(rhs))):
        rule = YOLO_BINARY.get(key)
        if rule is not None:
            return rule(lhs, rhs, ctx)

    return None

def _negate(value: YyValue) -> YyValue:
    coerced = apply_yolo_unary('-', value)
    if coerced is not None:
        return coerced
    if isinstance(value, YyNumber):
        return YyNumber(-value.value)
    raise YyTypeError(f"bad operand type for unary -: {type_name(value)}")

def _swap_pairs(slots: Dict[str, YyValue]) -> YyMap:
    # only scalar values can become keys
    swapped: Dict[str, YyValue] = {}
    for key, value in slots.items():
        if isinstance(value, (YyString, YyNumber, YyBool)):
            swapped[stringify(value)] = YyString(key)
    return YyMap(swapped)

def apply_yolo_unary(op: str, value: YyValue) -> Optional[YyValue]:
    match (op, value):
        case ('-', YyString(value=text)):
            return YyString(text[::-1])
        case ('-', YyBool(value=b)):
            return YyNumber(-1.0 if b else 0.0)
        case ('-', YyArray(items=items)):
            return YyArray([_negate(item) for item in items])
        case ('-', YyMap(slots=slots)):
            return _swap_pairs(slots)
        case _:
            return None
