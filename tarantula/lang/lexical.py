"""Lexical analysis for the tarantula language. Turns source text into a list of Tokens for the parser, and keeps a
table of the source's lines so that errors can show the line they came from.

Lexemes can be loosely defined as follows:

```
<grouping>    ::= "(" | ")" | "[" | "]"
<arithmetic>  ::= "+" | "-" | "*" | "/" | "//" | "%"
<comparison>  ::= ">" | ">=" | "<" | "<="
<string>      ::= '"' <char>* '"'             ; no escape sequences, may span lines
<number>      ::= <digit>+ ("." <digit>+)?    ; always a 64-bit float
<identifier>  ::= <start> (<start> | <digit> | "?" | "-")*
<start>       ::= "a".."z" | "A".."Z" | "_" | "$"

<comment>     ::= ";" <char>* <newline>
                | "``" <char>* "``"           ; does not nest
```

Anything else that is not whitespace becomes an UNIDENTIFIED token: the parser, not the lexer, rejects it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Tuple

from tarantula.lang.error import LexicalError


class TokenType(Enum):
    # grouping
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"

    # arithmetic
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    SLASHSLASH = "//"
    PERCENT = "%"

    # comparison
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL_TO = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL_TO = "<="

    # keywords
    PRINT = "print"
    PRINTLN = "println"
    LET = "let"
    TRUE = "true"
    FALSE = "false"
    NULL = "null"
    NOT = "not"
    EQUAL_PREDICATE = "equal?"
    NEQUAL_PREDICATE = "nequal?"
    TRUE_PREDICATE = "true?"
    IF = "if"
    THEN = "then"
    ELSE = "else"
    COND = "cond"
    AND = "and"
    OR = "or"

    # literals
    STRING = "<string>"
    NUMBER = "<number>"
    IDENTIFIER = "<identifier>"

    UNIDENTIFIED = "<unidentified>"
    EOF = "<eof>"


KEYWORDS = {kind.value: kind for kind in TokenType if kind.value.isalpha() or kind.value.endswith("?")}

SINGLES = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "%": TokenType.PERCENT,
}

WHITESPACE = " \t\r\n"


@dataclass(frozen=True)
class Token:
    """Unit of output from the Lexer. column is 1-based and points at the first character of lexeme."""
    type: TokenType
    lexeme: str
    literal: Any
    line: int
    column: int

    def __str__(self):
        literal = "" if self.literal is None else f" {self.literal!r}"
        return f"{self.line}:{self.column} {self.type.name} '{self.lexeme}'{literal}"


def is_digit(char):
    return "0" <= char <= "9"


def is_identifier_start(char):
    return len(char) == 1 and ("a" <= char <= "z" or "A" <= char <= "Z" or char in "_$")


def is_identifier_part(char):
    return is_identifier_start(char) or is_digit(char) or (len(char) == 1 and char in "?-")


class Lexer:
    """Single forward scan over source with at most two characters of lookahead."""

    def __init__(self, source):
        self.source = source
        self.tokens: List[Token] = []
        self.lines: List[Tuple[int, int]] = []  # (begin, end) offsets of each closed line

        self._position = 0     # index of the next character to consume
        self._start = 0        # index of the first character of the current lexeme
        self._line_start = 0   # index of the first character of the current line
        self._line = 1
        self._column = 0       # column of the last consumed character

    def tokenize(self):
        """Scans source and returns its tokens, always terminated by an EOF token. Raises a LexicalError if a string is
        never closed.
        """
        while not self._at_end():
            self._start = self._position
            self._scan_token()

        self.lines.append((self._line_start, self._position))
        self.tokens.append(Token(TokenType.EOF, "", None, self._line, self._column + 1))
        return self.tokens

    def line(self, n):
        """Returns the nth line (1-based) of source verbatim, without its line break."""
        if n == len(self.lines) + 1 and not self._closed():
            return self.source[self._line_start:self._position]
        if not 1 <= n <= len(self.lines):
            raise ValueError(f"line number must be in the range [1, {len(self.lines)}], got {n}")

        begin, end = self.lines[n - 1]
        return self.source[begin:end]

    def _closed(self):
        return self.tokens and self.tokens[-1].type is TokenType.EOF

    def _scan_token(self):
        column = self._column + 1
        char = self._advance()

        if char in SINGLES:
            self._add(SINGLES[char], column)
        elif char == ">":
            self._add(TokenType.GREATER_THAN_OR_EQUAL_TO if self._match("=") else TokenType.GREATER_THAN, column)
        elif char == "<":
            self._add(TokenType.LESS_THAN_OR_EQUAL_TO if self._match("=") else TokenType.LESS_THAN, column)
        elif char == "/":
            self._add(TokenType.SLASHSLASH if self._match("/") else TokenType.SLASH, column)
        elif char == "\"":
            self._string(column)
        elif char == ";":
            while self._peek() != "\n" and not self._at_end():
                self._advance()
        elif char == "`" and self._match("`"):
            while not self._match("`", "`") and not self._at_end():
                self._advance()
        elif is_digit(char):
            self._number(column)
        elif is_identifier_start(char):
            while is_identifier_part(self._peek()):
                self._advance()
            self._add(KEYWORDS.get(self._lexeme(), TokenType.IDENTIFIER), column)
        elif char not in WHITESPACE:
            self._add(TokenType.UNIDENTIFIED, column)

    def _string(self, column):
        line = self._line
        while self._peek() != "\"" and not self._at_end():
            self._advance()

        if self._at_end():
            token = Token(TokenType.STRING, "\"", None, line, column)  # points at the opening quote
            raise LexicalError(token, f"Unterminated string starting at ln {line}, col {column}")

        self._advance()  # closing "
        lexeme = self._lexeme()
        self.tokens.append(Token(TokenType.STRING, lexeme, lexeme[1:-1], line, column))

    def _number(self, column):
        while is_digit(self._peek()):
            self._advance()

        if self._peek() == "." and is_digit(self._peek(2)):
            self._advance()
            while is_digit(self._peek()):
                self._advance()

        self._add(TokenType.NUMBER, column, float(self._lexeme()))

    def _add(self, kind, column, literal=None):
        self.tokens.append(Token(kind, self._lexeme(), literal, self._line, column))

    def _lexeme(self):
        return self.source[self._start:self._position]

    def _advance(self):
        char = self.source[self._position]
        self._position += 1

        if char == "\n":
            self.lines.append((self._line_start, self._position - 1))
            self._line_start = self._position
            self._line += 1
            self._column = 0
        else:
            self._column += 1
        return char

    def _peek(self, distance=1):
        """Returns the character distance positions ahead, or "" past the end of source."""
        idx = self._position + distance - 1
        return self.source[idx] if idx < len(self.source) else ""

    def _match(self, *chars):
        """Consumes chars if they are next in source."""
        if all(self._peek(distance) == char for distance, char in enumerate(chars, 1)):
            for __ in chars:
                self._advance()
            return True
        return False

    def _at_end(self):
        return self._position >= len(self.source)


def tokenize(source):
    """Returns the tokens of source. Shorthand for Lexer(source).tokenize()."""
    return Lexer(source).tokenize()
