"""Recursive-descent parser for the tarantula language. Each nonterminal of the grammar is one method of Parser.

```
<program>    ::= <expression>* EOF
<expression> ::= <let> | <print> | <if> | <cond> | <logical> | <equality>
<equality>   ::= "(" ("equal?" | "nequal?") <comparison> <comparison>+ ")"
<comparison> ::= "(" (">" | ">=" | "<" | "<=") <binary> <binary>+ ")"
<binary>     ::= "(" ("+" | "-" | "*" | "/" | "//" | "%") <unary> <unary>+ ")"
<unary>      ::= ("+" | "-") <expression>
               | "(" ("not" | "true?") <expression> ")"
               | <binary> | <literal>
<literal>    ::= <string> | <number> | <identifier> | "true" | "false" | "null"
<let>        ::= "(" "let" "[" <binding>+ "]" <body> ")"
<binding>    ::= <identifier> <expression>
<body>       ::= <expression>*
<print>      ::= "(" ("print" | "println") <body> ")"
<if>         ::= "(" "if" <expression> "(" "then" <body> ")" ["(" "else" <body> ")"] ")"
<cond>       ::= "(" "cond" <clause>+ ["(" "else" <body> ")"] ")"
<clause>     ::= "(" <expression> <body> ")"
<logical>    ::= "(" ("and" | "or") <expression> <expression>+ ")"
```

Operators taking more than two operands associate by left: (+ a b c d) = (+ (+ (+ a b) c) d). The evaluator therefore
only ever sees two operands per operator. There is no error recovery: the first grammar violation raises a ParseError.
"""

from tarantula.lang.error import ParseError
from tarantula.lang.expr import Binary, Binding, Body, Clause, Cond, IfExpr, Let, Literal, Logical, Print, Unary, \
    Variable
from tarantula.lang.lexical import TokenType


EQUALITY = (TokenType.EQUAL_PREDICATE, TokenType.NEQUAL_PREDICATE)
COMPARISON = (TokenType.GREATER_THAN, TokenType.GREATER_THAN_OR_EQUAL_TO, TokenType.LESS_THAN,
              TokenType.LESS_THAN_OR_EQUAL_TO)
ARITHMETIC = (TokenType.PLUS, TokenType.MINUS, TokenType.STAR, TokenType.SLASH, TokenType.SLASHSLASH,
              TokenType.PERCENT)
LOGICAL = (TokenType.AND, TokenType.OR)
SIGNS = (TokenType.PLUS, TokenType.MINUS)

# tokens that can begin an expression
STARTS = (TokenType.LPAREN, TokenType.NUMBER, TokenType.MINUS, TokenType.PLUS, TokenType.TRUE, TokenType.FALSE,
          TokenType.NULL, TokenType.IDENTIFIER, TokenType.STRING)

LITERALS = {TokenType.TRUE: True, TokenType.FALSE: False, TokenType.NULL: None}

EXPECTED_LITERAL = ("Expected one of the following but got '{}' instead:\n"
                    " * An expression starting with '('\n"
                    " * A unary expression starting with '+' or '-'\n"
                    " * String\n"
                    " * Number\n"
                    " * Identifier\n"
                    " * Boolean\n"
                    " * null")


class Parser:
    """Builds the list of top-level expressions from the tokens of one unit of input."""

    def __init__(self, tokens):
        """tokens must end with an EOF token, as Lexer.tokenize guarantees."""
        self.tokens = tokens
        self.position = 0

    def parse(self):
        """<program> ::= <expression>* EOF"""
        expressions = []
        while self._has_tokens():
            expressions.append(self.expression())
        return expressions

    def expression(self):
        if self._peek_form(TokenType.LET):
            return self.let()
        elif self._peek_form(TokenType.PRINT, TokenType.PRINTLN):
            return self.print()
        elif self._peek_form(TokenType.IF):
            return self.if_expr()
        elif self._peek_form(TokenType.COND):
            return self.cond()
        elif self._peek_form(*LOGICAL):
            return self.logical()
        return self.equality()

    def equality(self):
        if self._peek_form(*EQUALITY):
            return self._fold(Binary, self.comparison)
        return self.comparison()

    def comparison(self):
        if self._peek_form(*COMPARISON):
            return self._fold(Binary, self.binary)
        return self.binary()

    def binary(self):
        if self._peek_form(*ARITHMETIC):
            return self._fold(Binary, self.unary)
        return self.unary()

    def logical(self):
        return self._fold(Logical, self.expression)

    def unary(self):
        """A sign binds to the whole expression after it, not just to a literal: - (+ 1 2) is -3."""
        if self._peek(*SIGNS) and not self._peek_next(*SIGNS):
            operator = self._next()
            return Unary(operator, self.expression())

        elif self._peek_form(TokenType.NOT, TokenType.TRUE_PREDICATE):
            self._next()  # (
            operator = self._next()
            right = self.expression()
            self._consume_right_paren(operator.lexeme)
            return Unary(operator, right)

        elif self._peek_form(*ARITHMETIC):
            return self.binary()

        return self.literal()

    def literal(self):
        if self._match(TokenType.STRING, TokenType.NUMBER):
            return Literal(self._previous().literal)
        elif self._match(TokenType.IDENTIFIER):
            return Variable(self._previous())
        elif self._match(*LITERALS):
            return Literal(LITERALS[self._previous().type])

        if self._peek_next(TokenType.IDENTIFIER):
            token = self._following()
            raise ParseError(token, f"Undefined identifier '{token.lexeme}'")

        for token in (self._current(), self._following()):
            if token.type is TokenType.UNIDENTIFIED:
                raise ParseError(token, f"Bad token '{token.lexeme}'")

        raise ParseError(self._current(), EXPECTED_LITERAL.format(self._current().lexeme))

    def let(self):
        self._next()  # (
        self._next()  # let

        self._consume(TokenType.LBRACKET, "Expected a '[' to start the identifier initialization list but got "
                                          f"'{self._current().lexeme}' instead")
        if not self._peek(TokenType.IDENTIFIER):
            raise ParseError(self._current(), "Expected an identifier after '[' but got "
                                              f"'{self._current().lexeme}' instead")

        bindings = []
        while not self._match(TokenType.RBRACKET) and self._has_tokens():
            bindings.append(self.binding())

        body = self.body()
        self._consume_right_paren("let")
        return Let(tuple(bindings), body)

    def binding(self):
        if self._peek(TokenType.RPAREN):
            raise ParseError(self._current(), "Expected a ']' to end the identifier initialization list but got "
                                              f"'{self._current().lexeme}' instead")

        identifier = self._consume(TokenType.IDENTIFIER, "Expected an identifier")
        if not self._peek(*STARTS):
            raise ParseError(self._current(), f"Expected an expression after identifier '{identifier.lexeme}' but "
                                              f"got '{self._current().lexeme}' instead")
        return Binding(identifier, self.expression())

    def body(self):
        exprs = []
        while self._peek(*STARTS) and self._has_tokens():
            exprs.append(self.expression())
        return Body(tuple(exprs))

    def print(self):
        self._next()  # (
        operator = self._next()
        body = self.body()
        self._consume_right_paren(operator.lexeme)
        return Print(operator, body)

    def if_expr(self):
        self._next()  # (
        self._next()  # if

        condition = self.expression()

        self._consume(TokenType.LPAREN, "Expected '(' to begin 'then' expression")
        self._consume(TokenType.THEN, "Expected 'then' expression")
        then_body = self.body()
        self._consume_right_paren("then")

        else_body = self._else()
        self._consume_right_paren("if")
        return IfExpr(condition, then_body, else_body)

    def cond(self):
        self._next()  # (
        self._next()  # cond

        clauses = []
        while self._peek(*STARTS) and not self._peek_form(TokenType.ELSE) and self._has_tokens():
            clauses.append(self.clause())
        if not clauses:
            raise ParseError(self._current(), "Expected at least one clause")

        else_body = self._else()
        self._consume_right_paren("cond")
        return Cond(tuple(clauses), else_body)

    def clause(self):
        self._consume(TokenType.LPAREN, "Expected a '(' to start a clause expression")
        if not self._peek(*STARTS):
            raise ParseError(self._current(), "Expected an expression")

        condition = self.expression()
        body = self.body()
        self._consume_right_paren("")
        return Clause(condition, body)

    def _else(self):
        """Parses an optional ("else" <body>) form; returns None if there is none."""
        if not self._peek_form(TokenType.ELSE):
            return None

        self._next()  # (
        self._next()  # else
        body = self.body()
        self._consume_right_paren("else")
        return body

    def _fold(self, node, operand):
        """Parses "(" <operator> <operand> <operand>+ ")", nesting extra operands to the left."""
        self._next()  # (
        operator = self._next()

        first = operand()
        expr = node(operator, first, operand())
        while self._peek(*STARTS):
            expr = node(operator, expr, operand())

        self._consume_right_paren(operator.lexeme)
        return expr

    def _current(self):
        return self.tokens[self.position]

    def _following(self):
        """Token after the current one (the EOF token if there is none)."""
        return self.tokens[min(self.position + 1, len(self.tokens) - 1)]

    def _previous(self):
        return self.tokens[self.position - 1]

    def _next(self):
        """Consumes and returns the current token. Never moves past EOF."""
        if self._has_tokens():
            self.position += 1
            return self._previous()
        return self._current()

    def _has_tokens(self):
        return self._current().type is not TokenType.EOF

    def _peek(self, *types):
        return self._current().type in types

    def _peek_next(self, *types):
        return self._following().type in types

    def _peek_form(self, *types):
        """Whether a "(" followed by one of types is next."""
        return self._peek(TokenType.LPAREN) and self._peek_next(*types)

    def _match(self, *types):
        if self._peek(*types):
            self._next()
            return True
        return False

    def _consume(self, kind, message):
        if self._peek(kind):
            return self._next()
        raise ParseError(self._current(), message)

    def _consume_right_paren(self, name):
        self._consume(TokenType.RPAREN, f"Expression '{name}' is missing a closing ')'")


def parse(tokens):
    """Returns the top-level expressions of tokens. Shorthand for Parser(tokens).parse()."""
    return Parser(tokens).parse()
