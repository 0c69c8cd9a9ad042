from __future__ import annotations

from lark import Tree

from ..runtime import Frame, YyNull, context_of
from ..tree import node_position, tree_label
from ..types import Aborted, Completion, Returning, is_abrupt
from .common import EvalFunc, stringify
from .helpers import is_truthy

def eval_yif(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    for clause in n.children:
        if tree_label(clause) == 'yels':
            return eval_func(clause.children[0], frame)

        cond_node, body = clause.children
        cond = eval_func(cond_node, frame)
        if is_abrupt(cond):
            return cond
        if is_truthy(cond):
            return eval_func(body, frame)

    return YyNull()

def eval_yeet(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    if not n.children:
        return Returning(YyNull())

    value = eval_func(n.children[0], frame)
    if is_abrupt(value):
        return value

    return Returning(value)

def eval_yikes(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    parts = []
    for child in n.children:
        value = eval_func(child, frame)
        if is_abrupt(value):
            return value
        parts.append(stringify(value))

    line, column, pos = node_position(n)
    return Aborted(" ".join(parts), line, column, pos)

def eval_yolo(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    with context_of(frame).yolo():
        return eval_func(n.children[0], frame)
