"""
Lexer for yy

Tokenizes yy source code into a stream of tokens.

Features:
- Single-pass tokenization
- Newline tokens, suppressed inside brackets and map literals
- Position tracking (line, column, offset)
- String literals with `{expr}` interpolation spans, split on demand
"""

from typing import List, NamedTuple, Optional

from .token_types import TT, Tok
from .types import YyError

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '"': '"',
    '\\': '\\',
    '{': '{',
    '}': '}',
}


class Segment(NamedTuple):
    """One piece of a string template: literal text or an embedded expression."""

    kind: str  # 'text' | 'expr'
    text: str
    line: int
    column: int
    pos: int


# ASCII only: str.isdigit() also accepts '²', which float() rejects
def is_digit(ch: str) -> bool:
    return len(ch) == 1 and '0' <= ch <= '9'


def is_ident_start(ch: str) -> bool:
    return len(ch) == 1 and ('a' <= ch <= 'z' or 'A' <= ch <= 'Z' or ch == '_')


def is_ident_char(ch: str) -> bool:
    return is_ident_start(ch) or is_digit(ch)


class LexError(YyError):
    """Lexical analysis error"""

    kind = "LexError"


class Lexer:
    """
    yy lexer.

    Newlines are statement separators only at the top level and directly
    inside `{ }` blocks; within `( )`, `[ ]` and `%{ }` they are skipped.
    """

    KEYWORDS = {
        'yif': TT.YIF,
        'yels': TT.YELS,
        'yall': TT.YALL,
        'yoyo': TT.YOYO,
        'yeet': TT.YEET,
        'yikes': TT.YIKES,
        'yolo': TT.YOLO,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'null': TT.NULL,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('%{', TT.MAPOPEN),
        (':=', TT.WALRUS),
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('&&', TT.AND),
        ('||', TT.OR),
        ('<<', TT.APPEND),
        ('..', TT.RANGE),
        ('+=', TT.PLUSEQ),
        ('-=', TT.MINUSEQ),
        ('*=', TT.STAREQ),
        ('/=', TT.SLASHEQ),
        ('%=', TT.MODEQ),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('\\', TT.BACKSLASH),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        (':', TT.COLON),
        (';', TT.SEMI),
    ]

    OPENERS = {TT.LPAR: TT.RPAR, TT.LSQB: TT.RSQB, TT.LBRACE: TT.RBRACE, TT.MAPOPEN: TT.RBRACE}

    def __init__(self, source: str, line: int = 1, column: int = 1, offset: int = 0):
        self.source = source
        self.pos = 0
        self.line = line
        self.column = column
        self.offset = offset
        self.tokens: List[Tok] = []

        # Open brackets; newlines count only when this is empty or a block is on top
        self.nesting: List[TT] = []

        self.tok_line = line
        self.tok_column = column
        self.tok_pos = offset

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        self.mark()
        ch = self.peek()

        if ch in (' ', '\t', '\r'):
            self.advance()
            return

        if ch == '/' and self.peek(1) == '/':
            self.skip_comment()
            return

        if ch == '\n':
            self.scan_newline()
            return

        if ch == '"':
            self.scan_string()
            return

        if is_digit(ch):
            self.scan_number()
            return

        if is_ident_start(ch):
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        self.advance()

        if self.nesting and self.nesting[-1] != TT.LBRACE:
            return
        if not self.tokens or self.tokens[-1].type == TT.NEWLINE:
            return

        self.emit(TT.NEWLINE, '\n')

    def scan_string(self):
        """Scan string literal; the token value is the raw body between the quotes"""
        self.advance()  # opening quote
        body = self.read_string_body(self.tok_line, self.tok_column)
        self.emit(TT.STRING, body)

    def read_string_body(self, line: int, column: int) -> str:
        """Consume up to and including the closing quote, return the raw body"""
        start = self.pos

        while self.pos < len(self.source):
            ch = self.source[self.pos]

            if ch == '\\':
                self.advance(2)
            elif ch == '{':
                self.read_interpolation()
            elif ch == '"':
                body = self.source[start:self.pos]
                self.advance()
                return body
            else:
                self.advance()

        raise LexError("unterminated string", line, column, self.offset + start - 1)

    def read_interpolation(self) -> str:
        """Consume a balanced `{...}` span and return the text between the braces"""
        line, column, pos = self.line, self.column, self.offset + self.pos
        self.advance()  # {
        start = self.pos
        depth = 1

        while self.pos < len(self.source):
            ch = self.source[self.pos]

            if ch == '"':
                quote_line, quote_column = self.line, self.column
                self.advance()
                self.read_string_body(quote_line, quote_column)
                continue

            if ch == '{':
                depth += 1
            elif ch == '}':
                depth -= 1
                if depth == 0:
                    inner = self.source[start:self.pos]
                    self.advance()
                    return inner

            self.advance()

        raise LexError("unterminated interpolation", line, column, pos)

    def scan_number(self):
        """Scan number literal"""
        value = ''

        while is_digit(self.peek()):
            value += self.advance()

        # `1..5` is a range, not a fraction
        if self.peek() == '.' and is_digit(self.peek(1)):
            value += self.advance()
            while is_digit(self.peek()):
                value += self.advance()

        self.emit(TT.NUMBER, value)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        value = ''

        while is_ident_char(self.peek()):
            value += self.advance()

        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.track_nesting(op_type)
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"unexpected character {ch!r}", self.line, self.column, self.offset + self.pos)

    def track_nesting(self, op_type: TT):
        if op_type in self.OPENERS:
            self.nesting.append(op_type)
        elif op_type in (TT.RPAR, TT.RSQB, TT.RBRACE) and self.nesting:
            # Mismatches are reported by the parser
            self.nesting.pop()

    # ========================================================================
    # Templates
    # ========================================================================

    def split_template(self) -> List[Segment]:
        """Split a raw string body into literal and expression segments"""
        parts: List[Segment] = []
        buf: List[str] = []
        text_line, text_column, text_pos = self.line, self.column, self.offset

        while self.pos < len(self.source):
            ch = self.source[self.pos]

            if ch == '\\':
                nxt = self.peek(1)
                buf.append(ESCAPES.get(nxt, '\\' + nxt))
                self.advance(2)
                continue

            if ch == '{':
                if buf:
                    parts.append(Segment('text', ''.join(buf), text_line, text_column, text_pos))
                    buf = []

                line, column, pos = self.line, self.column + 1, self.offset + self.pos + 1
                inner = self.read_interpolation()
                parts.append(Segment('expr', inner, line, column, pos))
                text_line, text_column, text_pos = self.line, self.column, self.offset + self.pos
                continue

            buf.append(ch)
            self.advance()

        if buf or not parts:
            parts.append(Segment('text', ''.join(buf), text_line, text_column, text_pos))

        return parts

    # ========================================================================
    # Utilities
    # ========================================================================

    def mark(self):
        """Remember where the token being scanned starts"""
        self.tok_line = self.line
        self.tok_column = self.column
        self.tok_pos = self.offset + self.pos

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            if ch == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return result

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', '\0'):
            self.advance()

    def emit(self, token_type: TT, value):
        """Emit a token positioned at the start of the current scan"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.tok_line,
            column=self.tok_column,
            pos=self.tok_pos,
        )
        self.tokens.append(tok)


def tokenize(source: str, line: int = 1, column: int = 1, offset: int = 0) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, line=line, column=column, offset=offset)
    return lexer.tokenize()


def split_template(raw: str, line: int = 1, column: int = 1, offset: int = 0) -> List[Segment]:
    """Split the raw body of a string token into template segments"""
    return Lexer(raw, line=line, column=column, offset=offset).split_template()


def highlight_tokens(source: str) -> Optional[List[Tok]]:
    """Best-effort tokenization for editors; None when the text does not lex"""
    try:
        return tokenize(source)
    except LexError:
        return None
