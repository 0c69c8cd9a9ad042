from __future__ import annotations

from typing import Iterable, Union

from lark import Tree

from ..runtime import Frame, YyArray, YyMap, YyNull, YyNumber, YyString, YyValue, context_of
from ..tree import tree_label
from ..types import Completion, Aborted, Returning, YyTypeError, is_abrupt, type_name
from .common import IMPLICIT_BINDER, EvalFunc, expect_integer, inclusive_range
from .helpers import is_truthy
from .literals import eval_range_bounds

def _numbers(start: int, end: int) -> Iterable[YyValue]:
    return (YyNumber(float(i)) for i in inclusive_range(start, end))

def iteration_items(iter_node: Tree, frame: Frame, eval_func: EvalFunc) -> Union[Iterable[YyValue], Returning, Aborted]:
    """Items a `yall` visits; containers are snapshotted at loop entry."""
    if tree_label(iter_node) == 'range':
        bounds = eval_range_bounds(iter_node, frame, eval_func)
        if is_abrupt(bounds):
            return bounds
        return _numbers(*bounds)

    value = eval_func(iter_node, frame)
    if is_abrupt(value):
        return value

    match value:
        case YyNumber():
            return _numbers(0, expect_integer(value, "loop bound"))
        case YyArray(items=items):
            return list(items)
        case YyMap(slots=slots):
            return [YyString(key) for key in list(slots)]
        case YyString(value=text):
            return [YyString(ch) for ch in text]
        case _:
            raise YyTypeError(f"cannot iterate over {type_name(value)}")

def eval_yall(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    binder_tok, iter_node, body = n.children
    name = str(binder_tok.value) if binder_tok is not None else IMPLICIT_BINDER

    items = iteration_items(iter_node, frame, eval_func)
    if is_abrupt(items):
        return items

    ctx = context_of(frame)
    result: Completion = YyNull()

    for item in items:
        ctx.tick()
        iteration = frame.child()
        iteration.declare(name, item)

        result = eval_func(body, iteration)
        if is_abrupt(result):
            return result

    return result

def eval_yoyo(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    cond_node, body = n.children
    ctx = context_of(frame)
    result: Completion = YyNull()

    while True:
        ctx.tick()

        if cond_node is not None:
            cond = eval_func(cond_node, frame)
            if is_abrupt(cond):
                return cond
            if not is_truthy(cond):
                return result

        result = eval_func(body, frame)
        if is_abrupt(result):
            return result
