from __future__ import annotations

from typing import Callable, Dict

from lark import Tree

from .runtime import Frame, init_stdlib
from .tree import is_token, node_position
from .types import Completion, Node, YyError
from .eval.blocks import eval_block, eval_program
from .eval.bind import eval_assign, eval_compound, eval_declare
from .eval.chains import eval_call, eval_index, eval_slice
from .eval.control import eval_yeet, eval_yif, eval_yikes, eval_yolo
from .eval.expr import eval_binop, eval_logical, eval_unary
from .eval.fn import eval_fn_literal
from .eval.literals import (
    eval_array_literal,
    eval_literal,
    eval_map_literal,
    eval_range_value,
    eval_template,
)
from .eval.loops import eval_yall, eval_yoyo

init_stdlib()

def _maybe_attach_location(exc: YyError, node: Node) -> None:
    if exc.line is not None:
        return

    line, column, pos = node_position(node)
    if line is not None:
        exc.locate(line, column, pos)

# ---------------- Public API ----------------

def eval_node(n: Node, frame: Frame) -> Completion:
    try:
        return _eval_node_inner(n, frame)
    except YyError as e:
        _maybe_attach_location(e, n)
        raise

def _eval_node_inner(n: Node, frame: Frame) -> Completion:
    if is_token(n):
        return eval_literal(n)

    handler = _NODE_DISPATCH.get(n.data)
    if handler is not None:
        return handler(n, frame)

    match n.data:
        case 'ident':
            return frame.lookup(str(n.children[0].value))
        case 'literal':
            return eval_literal(n.children[0])
        case 'unary':
            op, rhs_node = n.children
            return eval_unary(op, rhs_node, frame, eval_node)
        case 'fn':
            return eval_fn_literal(n, frame)
        case _:
            raise YyError(f"unknown node type: {n.data}")

_NODE_DISPATCH: Dict[str, Callable[[Tree, Frame], Completion]] = {
    'program': lambda n, frame: eval_program(n.children, frame, eval_node),
    'block': lambda n, frame: eval_block(n, frame, eval_node),
    'template': lambda n, frame: eval_template(n, frame, eval_node),
    'array': lambda n, frame: eval_array_literal(n, frame, eval_node),
    'map': lambda n, frame: eval_map_literal(n, frame, eval_node),
    'range': lambda n, frame: eval_range_value(n, frame, eval_node),
    'binop': lambda n, frame: eval_binop(n, frame, eval_node),
    'and': lambda n, frame: eval_logical(n, frame, eval_node, is_and=True),
    'or': lambda n, frame: eval_logical(n, frame, eval_node, is_and=False),
    'declare': lambda n, frame: eval_declare(n, frame, eval_node),
    'assign': lambda n, frame: eval_assign(n, frame, eval_node),
    'compound': lambda n, frame: eval_compound(n, frame, eval_node),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
    'index': lambda n, frame: eval_index(n, frame, eval_node),
    'slice': lambda n, frame: eval_slice(n, frame, eval_node),
    'yif': lambda n, frame: eval_yif(n, frame, eval_node),
    'yall': lambda n, frame: eval_yall(n, frame, eval_node),
    'yoyo': lambda n, frame: eval_yoyo(n, frame, eval_node),
    'yeet': lambda n, frame: eval_yeet(n, frame, eval_node),
    'yikes': lambda n, frame: eval_yikes(n, frame, eval_node),
    'yolo': lambda n, frame: eval_yolo(n, frame, eval_node),
}
