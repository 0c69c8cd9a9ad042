from __future__ import annotations

from typing import List, Tuple

from lark import Tree

from ..runtime import (
    Frame, YyArray, YyFn, YyMap, YyNative, YyNull, YyString, YyValue,
    call_fn, call_native,
)
from ..types import Completion, YyTypeError, is_abrupt, type_name
from .common import EvalFunc, expect_integer, expect_number, map_key, resolve_index

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    callee_node, args_node = n.children

    callee = eval_func(callee_node, frame)
    if is_abrupt(callee):
        return callee

    args: List[YyValue] = []
    for arg_node in args_node.children:
        value = eval_func(arg_node, frame)
        if is_abrupt(value):
            return value
        args.append(value)

    return call_value(callee, args, frame)

def call_value(callee: YyValue, args: List[YyValue], frame: Frame) -> Completion:
    match callee:
        case YyFn():
            return call_fn(callee, args)
        case YyNative():
            return call_native(callee, args, frame)
        case _:
            raise YyTypeError(f"{type_name(callee)} is not callable")

# ---------- Indexing ----------

def eval_index(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    target_node, key_node = n.children

    target = eval_func(target_node, frame)
    if is_abrupt(target):
        return target
    key = eval_func(key_node, frame)
    if is_abrupt(key):
        return key

    return index_value(target, key)

def index_value(target: YyValue, key: YyValue) -> YyValue:
    match target:
        case YyArray(items=items):
            return items[resolve_index(expect_integer(key, "array index"), len(items))]
        case YyString(value=text):
            return YyString(text[resolve_index(expect_integer(key, "string index"), len(text))])
        case YyMap(slots=slots):
            return slots.get(map_key(key), YyNull())
        case _:
            raise YyTypeError(f"{type_name(target)} is not indexable")

# ---------- Slicing ----------

def slice_bounds(length: int, start: YyValue, end: YyValue) -> Tuple[int, int]:
    """End-exclusive bounds; a negative end counts from one past the last element."""
    lo = int(expect_number(start, "slice start"))
    hi = int(expect_number(end, "slice end"))

    if lo < 0:
        lo += length
    if hi < 0:
        hi += length + 1

    lo = max(0, min(lo, length))
    hi = max(lo, min(hi, length))
    return lo, hi

def eval_slice(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    target_node, start_node, end_node = n.children

    values = []
    for node in (target_node, start_node, end_node):
        value = eval_func(node, frame)
        if is_abrupt(value):
            return value
        values.append(value)

    return slice_value(*values)

def slice_value(target: YyValue, start: YyValue, end: YyValue) -> YyValue:
    match target:
        case YyArray(items=items):
            lo, hi = slice_bounds(len(items), start, end)
            return YyArray(items[lo:hi])
        case YyString(value=text):
            lo, hi = slice_bounds(len(text), start, end)
            return YyString(text[lo:hi])
        case _:
            raise YyTypeError(f"{type_name(target)} cannot be sliced")
