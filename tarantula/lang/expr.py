"""Abstract syntax tree of the tarantula language. There is exactly one node class per grammar production (see
grammar.py), and nodes are immutable once the parser has built them.

Nodes that can fail at runtime keep the token of their operator so that the error can point at it.
"""

from dataclasses import dataclass, fields
from typing import Any, Optional, Tuple

from tarantula.lang.lexical import Token


class Expr:
    """Superclass of every node."""

    @property
    def nodes(self):
        """Child nodes, in source order."""
        children = []
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Expr):
                children.append(value)
            elif isinstance(value, tuple):
                children.extend(value)
        return children

    def label(self):
        """One-line description of this node, without its children."""
        return type(self).__name__

    def display(self, indents=0):
        """Recursively displays tree with readable format.

        Format:
        <Expr>(<label>, nodes=[
            <Expr>(<label>, nodes=[
                ...
                <Expr>(<label>)  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self.label()}"
        if self.nodes:
            result += "(nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}])"
        return result


@dataclass(frozen=True)
class Literal(Expr):
    value: Any

    def label(self):
        return f"Literal({self.value!r})"


@dataclass(frozen=True)
class Variable(Expr):
    name: Token

    def label(self):
        return f"Variable('{self.name.lexeme}')"


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr

    def label(self):
        return f"Unary('{self.operator.lexeme}')"


@dataclass(frozen=True)
class Binary(Expr):
    operator: Token
    first: Expr
    second: Expr

    def label(self):
        return f"Binary('{self.operator.lexeme}')"


@dataclass(frozen=True)
class Logical(Expr):
    """'and'/'or'. Kept apart from Binary because second is only evaluated on demand."""
    operator: Token
    first: Expr
    second: Expr

    def label(self):
        return f"Logical('{self.operator.lexeme}')"


@dataclass(frozen=True)
class Body(Expr):
    """Sequence of expressions; its value is the value of the last one (null if empty)."""
    exprs: Tuple[Expr, ...]


@dataclass(frozen=True)
class Print(Expr):
    operator: Token  # print or println
    body: Body

    def label(self):
        return f"Print('{self.operator.lexeme}')"


@dataclass(frozen=True)
class Binding(Expr):
    identifier: Token
    value: Expr

    def label(self):
        return f"Binding('{self.identifier.lexeme}')"


@dataclass(frozen=True)
class Let(Expr):
    bindings: Tuple[Binding, ...]
    body: Body


@dataclass(frozen=True)
class IfExpr(Expr):
    condition: Expr
    then_body: Body
    else_body: Optional[Body] = None


@dataclass(frozen=True)
class Clause(Expr):
    condition: Expr
    body: Body


@dataclass(frozen=True)
class Cond(Expr):
    clauses: Tuple[Clause, ...]
    else_body: Optional[Body] = None
