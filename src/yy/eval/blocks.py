from __future__ import annotations

from typing import Any, List

from lark import Tree

from ..runtime import Frame, YyNull, context_of
from ..types import Completion, is_abrupt
from .common import EvalFunc

def eval_program(children: List[Any], frame: Frame, eval_func: EvalFunc) -> Completion:
    """Run a stmt list in `frame`, returning the last value or the first abrupt completion."""
    result: Completion = YyNull()
    ctx = context_of(frame)

    for child in children:
        ctx.tick()
        result = eval_func(child, frame)
        if is_abrupt(result):
            return result

    return result

def eval_block(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    return eval_program(n.children, frame.child(), eval_func)
