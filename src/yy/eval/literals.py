from __future__ import annotations

from typing import List, Tuple, Union

from lark import Token, Tree

from ..runtime import Frame, YyArray, YyBool, YyMap, YyNull, YyNumber, YyString, YyValue, context_of
from ..types import Completion, Returning, Aborted, is_abrupt
from ..tree import is_token
from .common import EvalFunc, expect_integer, inclusive_range, map_key, stringify

def eval_literal(tok: Token) -> YyValue:
    match tok.type:
        case 'NUMBER':
            return YyNumber(float(tok.value))
        case 'STRING':
            return YyString(str(tok.value))
        case 'TRUE':
            return YyBool(True)
        case 'FALSE':
            return YyBool(False)
        case _:
            return YyNull()

def eval_template(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    parts: List[str] = []

    for part in n.children:
        if is_token(part):
            parts.append(str(part.value))
            continue

        value = eval_func(part, frame)
        if is_abrupt(value):
            return value
        parts.append(stringify(value))

    return YyString("".join(parts))

def eval_array_literal(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    items: List[YyValue] = []

    for child in n.children:
        value = eval_func(child, frame)
        if is_abrupt(value):
            return value
        items.append(value)

    return YyArray(items)

def eval_map_literal(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    slots = {}

    for pair in n.children:
        key_node, value_node = pair.children
        key = eval_func(key_node, frame)
        if is_abrupt(key):
            return key
        value = eval_func(value_node, frame)
        if is_abrupt(value):
            return value
        slots[map_key(key)] = value

    return YyMap(slots)

def eval_range_bounds(n: Tree, frame: Frame, eval_func: EvalFunc) -> Union[Tuple[int, int], Returning, Aborted]:
    start_node, end_node = n.children
    start = eval_func(start_node, frame)
    if is_abrupt(start):
        return start
    end = eval_func(end_node, frame)
    if is_abrupt(end):
        return end

    return expect_integer(start, "range start"), expect_integer(end, "range end")

def eval_range_value(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    """A range used as a plain value becomes a fresh array."""
    bounds = eval_range_bounds(n, frame, eval_func)
    if is_abrupt(bounds):
        return bounds

    ctx = context_of(frame)
    start, end = bounds
    ctx.check_size(abs(end - start) + 1, "range")
    items: List[YyValue] = []
    for i in inclusive_range(start, end):
        ctx.tick()
        items.append(YyNumber(float(i)))

    return YyArray(items)
