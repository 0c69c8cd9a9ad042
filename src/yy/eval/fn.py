from __future__ import annotations

from lark import Tree

from ..runtime import Frame, YyFn

def eval_fn_literal(n: Tree, frame: Frame) -> YyFn:
    params_node, body = n.children
    params = [str(tok.value) for tok in params_node.children]
    return YyFn(params=params, body=body, frame=frame)
