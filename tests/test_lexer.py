from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from yy.lexer import LexError, highlight_tokens, split_template, tokenize
from yy.token_types import TT


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Optional[Tuple[Tuple[TT, object], ...]] = None
    expected_types: Optional[Tuple[TT, ...]] = None
    exc: Optional[type[Exception]] = None
    msg: Optional[str] = None
    err_line: Optional[int] = None
    err_col: Optional[int] = None


BASIC_TOKEN_CASES: List[Case] = [
    Case("number-int", "123", expected=((TT.NUMBER, "123"),)),
    Case("number-float", "3.14", expected=((TT.NUMBER, "3.14"),)),
    Case("ident-single", "x", expected=((TT.IDENT, "x"),)),
    Case("ident-snake", "foo_bar2", expected=((TT.IDENT, "foo_bar2"),)),
    Case("ident-underscore", "_tmp", expected=((TT.IDENT, "_tmp"),)),
    Case("string-double", '"hello"', expected=((TT.STRING, "hello"),)),
    Case("string-empty", '""', expected=((TT.STRING, ""),)),
    Case("string-raw-escape", '"a\\nb"', expected=((TT.STRING, "a\\nb"),)),
    Case("string-interp-raw", '"hi {name}"', expected=((TT.STRING, "hi {name}"),)),
    Case("bool-true", "true", expected=((TT.TRUE, "true"),)),
    Case("bool-false", "false", expected=((TT.FALSE, "false"),)),
    Case("null-literal", "null", expected=((TT.NULL, "null"),)),
    Case(
        "range-not-fraction",
        "1..5",
        expected=((TT.NUMBER, "1"), (TT.RANGE, ".."), (TT.NUMBER, "5")),
    ),
    Case(
        "fraction-then-range",
        "0.5..2",
        expected=((TT.NUMBER, "0.5"), (TT.RANGE, ".."), (TT.NUMBER, "2")),
    ),
]

OPERATOR_CASES: List[Case] = [
    Case("plus", "+", expected_types=(TT.PLUS,)),
    Case("minus", "-", expected_types=(TT.MINUS,)),
    Case("star", "*", expected_types=(TT.STAR,)),
    Case("slash", "/", expected_types=(TT.SLASH,)),
    Case("mod", "%", expected_types=(TT.MOD,)),
    Case("eq", "==", expected_types=(TT.EQ,)),
    Case("neq", "!=", expected_types=(TT.NEQ,)),
    Case("lte", "<=", expected_types=(TT.LTE,)),
    Case("gte", ">=", expected_types=(TT.GTE,)),
    Case("lt", "<", expected_types=(TT.LT,)),
    Case("gt", ">", expected_types=(TT.GT,)),
    Case("and", "&&", expected_types=(TT.AND,)),
    Case("or", "||", expected_types=(TT.OR,)),
    Case("not", "!", expected_types=(TT.NEG,)),
    Case("append", "<<", expected_types=(TT.APPEND,)),
    Case("walrus", ":=", expected_types=(TT.WALRUS,)),
    Case("assign", "=", expected_types=(TT.ASSIGN,)),
    Case("pluseq", "+=", expected_types=(TT.PLUSEQ,)),
    Case("minuseq", "-=", expected_types=(TT.MINUSEQ,)),
    Case("stareq", "*=", expected_types=(TT.STAREQ,)),
    Case("slasheq", "/=", expected_types=(TT.SLASHEQ,)),
    Case("modeq", "%=", expected_types=(TT.MODEQ,)),
    Case("range", "..", expected_types=(TT.RANGE,)),
    Case("backslash", "\\", expected_types=(TT.BACKSLASH,)),
    Case("map-open", "%{}", expected_types=(TT.MAPOPEN, TT.RBRACE)),
    Case(
        "punctuation",
        "()[],:;",
        expected_types=(TT.LPAR, TT.RPAR, TT.LSQB, TT.RSQB, TT.COMMA, TT.COLON, TT.SEMI),
    ),
    Case("mod-then-block", "a % {", expected_types=(TT.IDENT, TT.MOD, TT.LBRACE)),
]

KEYWORD_CASES: List[Case] = [
    Case("yif", "yif", expected_types=(TT.YIF,)),
    Case("yels", "yels", expected_types=(TT.YELS,)),
    Case("yall", "yall", expected_types=(TT.YALL,)),
    Case("yoyo", "yoyo", expected_types=(TT.YOYO,)),
    Case("yeet", "yeet", expected_types=(TT.YEET,)),
    Case("yikes", "yikes", expected_types=(TT.YIKES,)),
    Case("yolo", "yolo", expected_types=(TT.YOLO,)),
    Case("keyword-prefix-ident", "yolo_mode", expected_types=(TT.IDENT,)),
    Case("keyword-suffix-ident", "myif", expected_types=(TT.IDENT,)),
    Case("builtin-is-ident", "yap", expected_types=(TT.IDENT,)),
]

LAYOUT_CASES: List[Case] = [
    Case("newline-separates", "a\nb", expected_types=(TT.IDENT, TT.NEWLINE, TT.IDENT)),
    Case("blank-lines-collapse", "a\n\n\nb", expected_types=(TT.IDENT, TT.NEWLINE, TT.IDENT)),
    Case("leading-newline-dropped", "\n\na", expected_types=(TT.IDENT,)),
    Case(
        "newline-in-parens",
        "f(a,\nb)",
        expected_types=(TT.IDENT, TT.LPAR, TT.IDENT, TT.COMMA, TT.IDENT, TT.RPAR),
    ),
    Case(
        "newline-in-brackets",
        "[1,\n2]",
        expected_types=(TT.LSQB, TT.NUMBER, TT.COMMA, TT.NUMBER, TT.RSQB),
    ),
    Case(
        "newline-in-map",
        "%{\na: 1\n}",
        expected_types=(TT.MAPOPEN, TT.IDENT, TT.COLON, TT.NUMBER, TT.RBRACE),
    ),
    Case(
        "newline-in-block",
        "{\na\n}",
        expected_types=(TT.LBRACE, TT.NEWLINE, TT.IDENT, TT.NEWLINE, TT.RBRACE),
    ),
    Case(
        "block-inside-call",
        "f(\\x {\na\nb\n})",
        expected_types=(
            TT.IDENT, TT.LPAR, TT.BACKSLASH, TT.IDENT, TT.LBRACE, TT.NEWLINE,
            TT.IDENT, TT.NEWLINE, TT.IDENT, TT.NEWLINE, TT.RBRACE, TT.RPAR,
        ),
    ),
    Case("comment-skipped", "x // note\ny", expected_types=(TT.IDENT, TT.NEWLINE, TT.IDENT)),
    Case("comment-only", "// nothing here", expected_types=()),
    Case("slashes-in-string", '"a // b"', expected_types=(TT.STRING,)),
]

LEX_ERROR_CASES: List[Case] = [
    Case(
        "unterminated-string",
        '"abc',
        exc=LexError,
        msg="unterminated string",
        err_line=1,
        err_col=1,
    ),
    # Multi-line: error on line 2
    Case(
        "unterminated-string-line2",
        'x = 1\ny = "abc',
        exc=LexError,
        msg="unterminated string",
        err_line=2,
        err_col=5,
    ),
    Case(
        "unterminated-interpolation",
        '"a {b',
        exc=LexError,
        msg="unterminated interpolation",
        err_line=1,
        err_col=4,
    ),
    Case(
        "unexpected-char",
        "x = @",
        exc=LexError,
        msg="unexpected character",
        err_line=1,
        err_col=5,
    ),
    Case(
        "lonely-dot",
        "1.",
        exc=LexError,
        msg="unexpected character '.'",
        err_line=1,
        err_col=2,
    ),
    Case(
        "superscript-digit",
        "x := 1²",
        exc=LexError,
        msg="unexpected character '²'",
        err_line=1,
        err_col=7,
    ),
    Case(
        "arabic-indic-digit",
        "x := ٣",
        exc=LexError,
        msg="unexpected character",
        err_line=1,
        err_col=6,
    ),
    Case(
        "non-ascii-identifier",
        "café := 1",
        exc=LexError,
        msg="unexpected character 'é'",
        err_line=1,
        err_col=4,
    ),
]


def _non_eof_tokens(source: str) -> List[object]:
    return [token for token in tokenize(source) if token.type != TT.EOF]


@pytest.mark.parametrize("case", BASIC_TOKEN_CASES, ids=lambda case: case.name)
def test_basic_tokens(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)

    assert case.expected is not None
    assert len(tokens) == len(case.expected)
    for token, (expected_type, expected_value) in zip(tokens, case.expected):
        assert token.type == expected_type
        assert token.value == expected_value


@pytest.mark.parametrize(
    "case",
    OPERATOR_CASES + KEYWORD_CASES + LAYOUT_CASES,
    ids=lambda case: case.name,
)
def test_token_types(case: Case) -> None:
    tokens = _non_eof_tokens(case.source)
    assert case.expected_types is not None
    assert [token.type for token in tokens] == list(case.expected_types)


@pytest.mark.parametrize("case", LEX_ERROR_CASES, ids=lambda case: case.name)
def test_lex_errors(case: Case) -> None:
    assert case.exc is not None
    with pytest.raises(case.exc) as exc_info:
        tokenize(case.source)

    err = exc_info.value
    assert case.msg is not None and case.msg in str(err)
    assert err.line == case.err_line
    assert err.column == case.err_col
    assert err.kind == "LexError"


def test_token_positions() -> None:
    tokens = tokenize("x := 10\n  y")
    positions = [(tok.type, tok.line, tok.column, tok.pos) for tok in tokens]

    assert positions[:3] == [
        (TT.IDENT, 1, 1, 0),
        (TT.WALRUS, 1, 3, 2),
        (TT.NUMBER, 1, 6, 5),
    ]
    assert positions[4] == (TT.IDENT, 2, 3, 10)
    assert tokens[-1].type == TT.EOF


def test_tokenize_with_offset_keeps_absolute_positions() -> None:
    tokens = tokenize("a + b", line=3, column=7, offset=40)

    assert (tokens[0].line, tokens[0].column, tokens[0].pos) == (3, 7, 40)
    assert (tokens[2].line, tokens[2].column, tokens[2].pos) == (3, 11, 44)


def test_multiline_string_advances_lines() -> None:
    tokens = tokenize('s := "a\nb"\nt')

    assert tokens[2].type == TT.STRING
    assert tokens[2].value == "a\nb"
    assert tokens[-2].type == TT.IDENT
    assert tokens[-2].line == 3


def test_nested_string_inside_interpolation() -> None:
    tokens = _non_eof_tokens('"x{f("}")}y"')

    assert len(tokens) == 1
    assert tokens[0].value == 'x{f("}")}y'


def test_split_template_segments() -> None:
    segments = split_template("hi {name}!")

    assert [(seg.kind, seg.text) for seg in segments] == [
        ("text", "hi "),
        ("expr", "name"),
        ("text", "!"),
    ]
    expr = segments[1]
    assert (expr.line, expr.column, expr.pos) == (1, 5, 4)


def test_split_template_escapes() -> None:
    segments = split_template('tab\\there \\"q\\" \\{not\\} \\q')

    assert len(segments) == 1
    assert segments[0].kind == "text"
    assert segments[0].text == 'tab\there "q" {not} \\q'


def test_split_template_nested_braces() -> None:
    segments = split_template('{%{"a": 1}["a"]}')

    assert [(seg.kind, seg.text) for seg in segments] == [("expr", '%{"a": 1}["a"]')]


def test_split_template_empty_body() -> None:
    segments = split_template("")

    assert [(seg.kind, seg.text) for seg in segments] == [("text", "")]


def test_highlight_tokens_tolerates_bad_input() -> None:
    assert highlight_tokens('"open') is None

    tokens = highlight_tokens("yif x { 1 }")
    assert tokens is not None
    assert tokens[0].type == TT.YIF
