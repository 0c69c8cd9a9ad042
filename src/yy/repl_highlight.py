"""prompt_toolkit lexer for live yy syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer import highlight_tokens
from .token_types import TT, Tok
from .types import Builtins

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.YIF: "keyword",
    TT.YELS: "keyword",
    TT.YALL: "keyword",
    TT.YOYO: "keyword",
    TT.YEET: "keyword",
    TT.YIKES: "keyword",
    TT.YOLO: "keyword",
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NULL: "constant",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.BACKSLASH: "function",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.MAPOPEN: "punctuation",
    TT.COMMA: "punctuation",
    TT.COLON: "punctuation",
    TT.SEMI: "punctuation",
}

_LAYOUT = {TT.NEWLINE, TT.EOF}


def _token_text(tok: Tok) -> str:
    if tok.type == TT.STRING:
        return f'"{tok.value}"'
    return str(tok.value)


def _gap(text: str) -> StyleAndTextTuples:
    """Unstyled text between tokens; only a line comment can hide in there."""
    idx = text.find("//")
    if idx < 0:
        return [("", text)]
    spans: StyleAndTextTuples = []
    if idx > 0:
        spans.append(("", text[:idx]))
    spans.append((GROUP_STYLE["comment"], text[idx:]))
    return spans


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    tokens = highlight_tokens(text)
    if tokens is None:
        # Unterminated string: colour from the first quote on
        quote = text.find('"')
        if quote < 0:
            return [(GROUP_STYLE["error"], text)]
        return _gap(text[:quote]) + [(GROUP_STYLE["string"], text[quote:])]

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type in _LAYOUT:
            continue

        tok_text = _token_text(tok)
        if tok.pos > pos:
            result.extend(_gap(text[pos:tok.pos]))

        group = _TT_GROUP.get(tok.type, "operator")
        if tok.type == TT.IDENT and tok.value in Builtins.stdlib_functions:
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), tok_text))
        pos = tok.pos + len(tok_text)

    if pos < len(text):
        result.extend(_gap(text[pos:]))

    return result if result else [("", text)]


class YyLexer(Lexer):
    """prompt_toolkit Lexer that highlights yy source using the yy lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
