"""Shared helpers for working with the lark Tree/Token nodes the parser builds."""
from __future__ import annotations
from typing import Any, List, Optional, Tuple
from typing_extensions import TypeGuard

from lark import Token, Tree
from lark.tree import Meta

from .token_types import Tok

Position = Tuple[Optional[int], Optional[int], Optional[int]]


def is_token(node: Any) -> TypeGuard[Token]:
    return isinstance(node, Token)


def tree_label(node: Any) -> Optional[str]:
    return node.data if isinstance(node, Tree) else None


def meta_from_tok(tok: Tok) -> Meta:
    """Build a lark Meta carrying the start position of `tok`."""
    meta = Meta()
    meta.line = tok.line
    meta.column = tok.column
    meta.start_pos = tok.pos
    meta.empty = False
    return meta


def to_token(tok: Tok, value: Optional[str] = None) -> Token:
    """Convert a lexer token into a positioned lark Token."""
    return Token(
        tok.type.name,
        tok.value if value is None else value,
        start_pos=tok.pos,
        line=tok.line,
        column=tok.column,
    )


def make_tree(label: str, children: List[Any], tok: Tok) -> Tree:
    return Tree(label, children, meta=meta_from_tok(tok))


def node_position(node: Any) -> Position:
    """Return (line, column, offset) for a tree or token, or Nones if unknown."""
    if isinstance(node, Token):
        return (node.line, node.column, node.start_pos)

    if isinstance(node, Tree):
        meta = node.meta
        if not getattr(meta, "empty", True):
            return (meta.line, meta.column, getattr(meta, "start_pos", None))

    return (None, None, None)
