"""
Recursive Descent Parser for yy

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent for statements and primaries, precedence
  climbing for binary operators
- AST: lark Tree/Token nodes; every tree carries a Meta with its start position
"""

from typing import List, Optional

from lark import Token, Tree

from .lexer import split_template, tokenize
from .token_types import ASSIGN_OPS, COMPOUND_OPS, TT, Tok
from .tree import make_tree, to_token, tree_label
from .types import YyError

# Binding power of binary operators; higher binds tighter.
BINARY_PRECEDENCE = {
    TT.APPEND: 1,
    TT.OR: 2,
    TT.AND: 3,
    TT.EQ: 4,
    TT.NEQ: 4,
    TT.LT: 4,
    TT.GT: 4,
    TT.LTE: 4,
    TT.GTE: 4,
    TT.RANGE: 5,
    TT.PLUS: 6,
    TT.MINUS: 6,
    TT.STAR: 7,
    TT.SLASH: 7,
    TT.MOD: 7,
}

STATEMENT_END = (TT.NEWLINE, TT.SEMI, TT.RBRACE, TT.EOF)


def describe(tok: Tok) -> str:
    if tok.type == TT.EOF:
        return "end of input"
    if tok.type == TT.NEWLINE:
        return "newline"
    if tok.type == TT.STRING:
        return "string"
    return repr(tok.value)


class ParseError(YyError):
    """Parse error with position info"""

    kind = "ParseError"

    def __init__(self, message: str, token: Optional[Tok] = None, expected: Optional[str] = None):
        self.token = token
        self.expected = expected
        self.found = describe(token) if token is not None else None
        if expected is not None and token is not None:
            message = f"{message}: expected {expected}, found {self.found}"
        if token is not None:
            super().__init__(message, token.line, token.column, token.pos)
        else:
            super().__init__(message)


class Parser:
    """
    Recursive descent parser for yy.

    Expression precedence (lowest to highest):
    1. assignment (:=, =, +=, -=, *=, /=, %=), right associative
    2. append (<<)
    3. or (||)
    4. and (&&)
    5. compare (==, !=, <, >, <=, >=)
    6. range (..)
    7. add (+, -)
    8. mul (*, /, %)
    9. unary (-, !)
    10. postfix (call, index, slice)
    11. primary (literals, identifiers, parens, block forms)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1] if self.tokens else Tok(TT.EOF, None)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        self.current = self.tokens[self.pos] if self.tokens else prev
        return prev

    def check(self, *types: TT) -> bool:
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, expected: str) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise ParseError("syntax error", self.current, expected)
        return self.advance()

    def skip_newlines(self):
        while self.check(TT.NEWLINE):
            self.advance()

    def skip_separators(self):
        while self.check(TT.NEWLINE, TT.SEMI):
            self.advance()

    # ========================================================================
    # Statements
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire program"""
        start = self.current
        stmts = self.parse_statements(TT.EOF)
        return make_tree('program', stmts, start)

    def parse_statements(self, end: TT) -> List[Tree]:
        stmts = []
        self.skip_separators()

        while not self.check(end):
            if self.check(TT.EOF):
                raise ParseError("unterminated block", self.current, "'}'")

            stmts.append(self.parse_expr())

            if self.check(end):
                break
            if not self.check(TT.NEWLINE, TT.SEMI):
                raise ParseError("syntax error", self.current, "end of statement")
            self.skip_separators()

        return stmts

    def parse_block(self) -> Tree:
        start = self.expect(TT.LBRACE, "'{'")
        stmts = self.parse_statements(TT.RBRACE)
        self.expect(TT.RBRACE, "'}'")
        return make_tree('block', stmts, start)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Assignment level; everything else is delegated to precedence climbing"""
        target = self.parse_binary(1)

        if not self.check(*ASSIGN_OPS):
            return target

        op = self.advance()
        self.skip_newlines()
        value = self.parse_expr()
        return self.build_assignment(op, target, value)

    def build_assignment(self, op: Tok, target: Tree, value: Tree) -> Tree:
        label = tree_label(target)

        if op.type == TT.WALRUS:
            if label != 'ident':
                raise ParseError("invalid declaration target", op, "identifier before ':='")
            return make_tree('declare', [target.children[0], value], op)

        if label not in ('ident', 'index'):
            raise ParseError("invalid assignment target", op, "identifier or index before assignment")

        if op.type == TT.ASSIGN:
            return make_tree('assign', [target, value], op)

        return make_tree('compound', [target, to_token(op, COMPOUND_OPS[op.type]), value], op)

    def parse_binary(self, min_prec: int) -> Tree:
        left = self.parse_unary()

        while True:
            op = self.current
            prec = BINARY_PRECEDENCE.get(op.type)
            if prec is None or prec < min_prec:
                return left

            self.advance()
            self.skip_newlines()
            right = self.parse_binary(prec + 1)

            if op.type == TT.RANGE:
                left = make_tree('range', [left, right], op)
                if self.check(TT.RANGE):
                    raise ParseError("range operator is not associative", self.current)
            elif op.type == TT.AND:
                left = make_tree('and', [left, right], op)
            elif op.type == TT.OR:
                left = make_tree('or', [left, right], op)
            else:
                left = make_tree('binop', [left, to_token(op), right], op)

    def parse_unary(self) -> Tree:
        if self.check(TT.MINUS, TT.NEG):
            op = self.advance()
            operand = self.parse_unary()
            return make_tree('unary', [to_token(op), operand], op)

        return self.parse_postfix()

    def parse_postfix(self) -> Tree:
        node = self.parse_primary()

        while True:
            if self.check(TT.LPAR):
                start = self.advance()
                args = self.parse_comma_list(TT.RPAR, "')'")
                node = make_tree('call', [node, make_tree('args', args, start)], start)
            elif self.check(TT.LSQB):
                start = self.advance()
                if self.check(TT.RSQB):
                    raise ParseError("empty index", self.current, "index expression")
                inner = self.parse_expr()
                self.expect(TT.RSQB, "']'")
                if tree_label(inner) == 'range':
                    node = make_tree('slice', [node, inner.children[0], inner.children[1]], start)
                else:
                    node = make_tree('index', [node, inner], start)
            else:
                return node

    def parse_comma_list(self, close: TT, expected: str) -> List[Tree]:
        """Parse `e, e, ...` up to and including `close`; a trailing comma is allowed"""
        items = []
        self.skip_newlines()

        while not self.check(close):
            items.append(self.parse_expr())
            self.skip_newlines()
            if not self.match(TT.COMMA):
                break
            self.skip_newlines()

        self.expect(close, expected)
        return items

    # ========================================================================
    # Primaries
    # ========================================================================

    def parse_primary(self) -> Tree:
        tok = self.current

        match tok.type:
            case TT.NUMBER | TT.TRUE | TT.FALSE | TT.NULL:
                self.advance()
                return make_tree('literal', [to_token(tok)], tok)
            case TT.STRING:
                self.advance()
                return self.parse_string(tok)
            case TT.IDENT:
                self.advance()
                return make_tree('ident', [to_token(tok)], tok)
            case TT.LPAR:
                self.advance()
                self.skip_newlines()
                inner = self.parse_expr()
                self.skip_newlines()
                self.expect(TT.RPAR, "')'")
                return inner
            case TT.LSQB:
                self.advance()
                items = self.parse_comma_list(TT.RSQB, "']'")
                return make_tree('array', items, tok)
            case TT.MAPOPEN:
                return self.parse_map()
            case TT.BACKSLASH:
                return self.parse_fn()
            case TT.YIF:
                return self.parse_yif()
            case TT.YALL:
                return self.parse_yall()
            case TT.YOYO:
                return self.parse_yoyo()
            case TT.YOLO:
                self.advance()
                return make_tree('yolo', [self.parse_block()], tok)
            case TT.YEET:
                self.advance()
                if self.check(*STATEMENT_END):
                    return make_tree('yeet', [], tok)
                return make_tree('yeet', [self.parse_expr()], tok)
            case TT.YIKES:
                self.advance()
                self.expect(TT.LPAR, "'(' after yikes")
                return make_tree('yikes', self.parse_comma_list(TT.RPAR, "')'"), tok)
            case _:
                raise ParseError("syntax error", tok, "expression")

    def parse_string(self, tok: Tok) -> Tree:
        # Body starts one column after the opening quote
        segments = split_template(tok.value, tok.line, tok.column + 1, tok.pos + 1)

        if len(segments) == 1 and segments[0].kind == 'text':
            return make_tree('literal', [to_token(tok, segments[0].text)], tok)

        parts: List[object] = []
        for seg in segments:
            if seg.kind == 'text':
                parts.append(Token('STRING', seg.text, start_pos=seg.pos, line=seg.line, column=seg.column))
            else:
                parts.append(parse_expr_fragment(seg.text, seg.line, seg.column, seg.pos))

        return make_tree('template', parts, tok)

    def parse_map(self) -> Tree:
        start = self.advance()
        pairs = []
        self.skip_newlines()

        while not self.check(TT.RBRACE):
            key = self.parse_expr()
            self.skip_newlines()
            colon = self.expect(TT.COLON, "':' after map key")
            self.skip_newlines()
            value = self.parse_expr()
            pairs.append(make_tree('pair', [key, value], colon))
            self.skip_newlines()
            if not self.match(TT.COMMA):
                break
            self.skip_newlines()

        self.expect(TT.RBRACE, "'}'")
        return make_tree('map', pairs, start)

    def parse_fn(self) -> Tree:
        start = self.advance()
        params: List[Token] = []
        seen = set()

        while self.check(TT.IDENT):
            ident = self.advance()
            if ident.value in seen:
                raise ParseError(f"duplicate parameter '{ident.value}'", ident)
            seen.add(ident.value)
            params.append(to_token(ident))
            if not self.match(TT.COMMA):
                break

        params_tree = make_tree('params', params, start)
        body = self.parse_block()
        return make_tree('fn', [params_tree, body], start)

    def match_yels(self) -> bool:
        """Consume `yels`, looking past one line break"""
        if self.check(TT.NEWLINE) and self.peek(1).type == TT.YELS:
            self.advance()
        return self.match(TT.YELS)

    def parse_yif(self) -> Tree:
        start = self.advance()
        cond = self.parse_expr()
        clauses = [make_tree('guard', [cond, self.parse_block()], start)]

        while self.match_yels():
            if self.check(TT.YIF):
                guard_tok = self.advance()
                cond = self.parse_expr()
                clauses.append(make_tree('guard', [cond, self.parse_block()], guard_tok))
                continue

            else_tok = self.current
            clauses.append(make_tree('yels', [self.parse_block()], else_tok))
            break

        return make_tree('yif', clauses, start)

    def parse_yall(self) -> Tree:
        start = self.advance()
        binder = None

        if self.check(TT.IDENT) and self.peek(1).type == TT.COLON:
            binder = to_token(self.advance())
            self.advance()

        iterable = self.parse_expr()
        body = self.parse_block()
        return make_tree('yall', [binder, iterable, body], start)

    def parse_yoyo(self) -> Tree:
        start = self.advance()
        cond = None if self.check(TT.LBRACE) else self.parse_expr()
        body = self.parse_block()
        return make_tree('yoyo', [cond, body], start)


# ============================================================================
# Entry points
# ============================================================================

def parse_tokens(tokens: List[Tok]) -> Tree:
    return Parser(tokens).parse()


def parse_source(source: str) -> Tree:
    """Tokenize and parse a whole program"""
    return parse_tokens(tokenize(source))


def parse_expr_fragment(source: str, line: int = 1, column: int = 1, offset: int = 0) -> Tree:
    """Parse a single expression, e.g. an interpolation span, keeping absolute positions"""
    parser = Parser(tokenize(source, line=line, column=column, offset=offset))
    parser.skip_newlines()
    expr = parser.parse_expr()
    parser.skip_newlines()
    parser.expect(TT.EOF, "end of interpolation")
    return expr
