"""
Recursive descent parser for placeholder expressions.

Grammar:
    expr        → object | array | literal | reference
    reference   → head ("." member | "[" (STRING | INT) "]")* ("(" args? ")")?
    head        → "$" | "$$" | IDENT
    member      → IDENT | INT | "true" | "false" | "null"
    args        → expr ("," expr)*
    object      → "{" (key ":" expr ("," key ":" expr)* ","?)? "}"
    key         → IDENT | STRING | INT
    array       → "[" (expr ("," expr)* ","?)? "]"
    literal     → INT | FLOAT | STRING | "true" | "false" | "null"
"""

from __future__ import annotations

from reqtemplate.core.expression_lang.tokenizer import (
    ExpressionTokenError,
    Token,
    TokenKind,
    tokenize,
)
from reqtemplate.core.ir.expressions import (
    ArrayLiteral,
    Expr,
    FieldRef,
    FuncCall,
    Literal,
    ObjectLiteral,
    PathRoot,
)

# Keywords are valid member names after a dot: a.true, a.null
_NAME_KINDS = (TokenKind.IDENT, TokenKind.TRUE, TokenKind.FALSE, TokenKind.NULL)


class ExpressionParseError(Exception):
    """Error during expression parsing."""

    def __init__(self, message: str, pos: int = 0) -> None:
        super().__init__(message)
        self.pos = pos


class _Parser:
    """Recursive descent parser for expressions."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise ExpressionParseError(
                f"Expected {kind}, got {tok.kind} ({tok.value!r})",
                tok.pos,
            )
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    # -- Grammar rules --

    def parse_expr(self) -> Expr:
        """object | array | literal | reference"""
        tok = self.current

        if tok.kind == TokenKind.LBRACE:
            return self._parse_object()
        if tok.kind == TokenKind.LBRACKET:
            return self._parse_array()

        # Literals
        if tok.kind == TokenKind.INT:
            self.advance()
            return Literal(value=int(tok.value))
        if tok.kind == TokenKind.FLOAT:
            self.advance()
            return Literal(value=float(tok.value))
        if tok.kind == TokenKind.STRING:
            self.advance()
            return Literal(value=tok.value)
        if tok.kind == TokenKind.TRUE:
            self.advance()
            return Literal(value=True)
        if tok.kind == TokenKind.FALSE:
            self.advance()
            return Literal(value=False)
        if tok.kind == TokenKind.NULL:
            self.advance()
            return Literal(value=None)

        if tok.kind in (TokenKind.DOLLAR, TokenKind.DOLLAR_DOLLAR, TokenKind.IDENT):
            return self._parse_reference()

        raise ExpressionParseError(
            f"Unexpected token: {tok.kind} ({tok.value!r})",
            tok.pos,
        )

    def _parse_reference(self) -> Expr:
        """head ('.' member | '[' key ']')* ('(' args ')')?"""
        head = self.advance()
        path: list[str | int] = []
        if head.kind == TokenKind.DOLLAR:
            root = PathRoot.CONTEXT
        elif head.kind == TokenKind.DOLLAR_DOLLAR:
            root = PathRoot.GLOBALS
        else:
            root = PathRoot.RELATIVE
            path.append(head.value)

        while True:
            if self.match(TokenKind.DOT):
                tok = self.current
                if tok.kind in _NAME_KINDS:
                    path.append(self.advance().value)
                elif tok.kind == TokenKind.INT:
                    path.append(int(self.advance().value))
                else:
                    raise ExpressionParseError(
                        f"Expected member name after '.', got {tok.kind} ({tok.value!r})",
                        tok.pos,
                    )
            elif self.match(TokenKind.LBRACKET):
                tok = self.current
                if tok.kind == TokenKind.STRING:
                    path.append(self.advance().value)
                elif tok.kind == TokenKind.INT:
                    path.append(int(self.advance().value))
                else:
                    raise ExpressionParseError(
                        f"Expected string or integer index, got {tok.kind} ({tok.value!r})",
                        tok.pos,
                    )
                self.expect(TokenKind.RBRACKET)
            else:
                break

        ref = FieldRef(root=root, path=path)
        if self.current.kind == TokenKind.LPAREN:
            return self._parse_call(ref)
        return ref

    def _parse_call(self, callee: FieldRef) -> FuncCall:
        """'(' (expr (',' expr)*)? ')'"""
        self.expect(TokenKind.LPAREN)

        args: list[Expr] = []
        if self.current.kind != TokenKind.RPAREN:
            args.append(self.parse_expr())
            while self.match(TokenKind.COMMA):
                args.append(self.parse_expr())

        self.expect(TokenKind.RPAREN)
        return FuncCall(callee=callee, args=args)

    def _parse_object(self) -> ObjectLiteral:
        """'{' (key ':' expr (',' key ':' expr)* ','?)? '}'"""
        self.expect(TokenKind.LBRACE)
        entries: list[tuple[str, Expr]] = []
        while self.current.kind != TokenKind.RBRACE:
            key_tok = self.current
            if key_tok.kind in _NAME_KINDS or key_tok.kind in (TokenKind.STRING, TokenKind.INT):
                self.advance()
            else:
                raise ExpressionParseError(
                    f"Expected object key, got {key_tok.kind} ({key_tok.value!r})",
                    key_tok.pos,
                )
            self.expect(TokenKind.COLON)
            entries.append((key_tok.value, self.parse_expr()))
            if not self.match(TokenKind.COMMA):
                break
        self.expect(TokenKind.RBRACE)
        return ObjectLiteral(entries=entries)

    def _parse_array(self) -> ArrayLiteral:
        """'[' (expr (',' expr)* ','?)? ']'"""
        self.expect(TokenKind.LBRACKET)
        items: list[Expr] = []
        while self.current.kind != TokenKind.RBRACKET:
            items.append(self.parse_expr())
            if not self.match(TokenKind.COMMA):
                break
        self.expect(TokenKind.RBRACKET)
        return ArrayLiteral(items=items)


def parse_expr(source: str) -> Expr:
    """Parse an expression string into an AST.

    Args:
        source: Expression string (e.g., "$.request.params.domain")

    Returns:
        Parsed expression AST.

    Raises:
        ExpressionParseError: If the expression is invalid.
    """
    try:
        tokens = tokenize(source)
    except ExpressionTokenError as e:
        raise ExpressionParseError(str(e), e.pos) from e

    parser = _Parser(tokens)
    if parser.current.kind == TokenKind.EOF:
        raise ExpressionParseError("Empty expression", 0)
    expr = parser.parse_expr()

    # Ensure all tokens consumed
    if parser.current.kind != TokenKind.EOF:
        raise ExpressionParseError(
            f"Unexpected token after expression: {parser.current.value!r}",
            parser.current.pos,
        )

    return expr
