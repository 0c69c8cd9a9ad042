"""
Token Types for the yy lexer and parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types"""

    # Literals
    NUMBER = auto()
    STRING = auto()
    IDENT = auto()

    # Keywords
    YIF = auto()
    YELS = auto()
    YALL = auto()
    YOYO = auto()
    YEET = auto()
    YIKES = auto()
    YOLO = auto()
    TRUE = auto()
    FALSE = auto()
    NULL = auto()

    # Arithmetic
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    MOD = auto()

    # Comparison
    EQ = auto()
    NEQ = auto()
    LT = auto()
    GT = auto()
    LTE = auto()
    GTE = auto()

    # Logical
    AND = auto()
    OR = auto()
    NEG = auto()

    # Assignment
    WALRUS = auto()
    ASSIGN = auto()
    PLUSEQ = auto()
    MINUSEQ = auto()
    STAREQ = auto()
    SLASHEQ = auto()
    MODEQ = auto()

    # Other operators
    APPEND = auto()
    RANGE = auto()
    BACKSLASH = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    MAPOPEN = auto()
    COMMA = auto()
    COLON = auto()
    SEMI = auto()

    # Structural
    NEWLINE = auto()
    EOF = auto()


# Compound assignment -> underlying binary operator
COMPOUND_OPS = {
    TT.PLUSEQ: '+',
    TT.MINUSEQ: '-',
    TT.STAREQ: '*',
    TT.SLASHEQ: '/',
    TT.MODEQ: '%',
}

ASSIGN_OPS = (TT.WALRUS, TT.ASSIGN) + tuple(COMPOUND_OPS)


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0
    pos: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
