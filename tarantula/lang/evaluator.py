"""Tree-walking evaluator for the tarantula language.

Runtime values are plain Python objects: float (number), str (string), bool (boolean) and None (null). The scope an
expression is evaluated in is passed down explicitly; entering a 'let' passes a child scope to its bindings and body,
and leaving it simply drops that child.
"""

import math
import sys

from tarantula.lang.error import EvalError
from tarantula.lang.expr import Binary, Body, Cond, IfExpr, Let, Literal, Logical, Print, Unary, Variable
from tarantula.lang.lexical import TokenType
from tarantula.lang.scope import Scope


def typeof(value):
    """Name of the runtime type of value, as used in error messages."""
    if isinstance(value, str):
        return "string"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, float):
        return "number"
    return "null"


def is_truthy(value):
    """null and 0 are false, booleans are themselves, everything else is true."""
    if value is None:
        return False
    elif isinstance(value, bool):
        return value
    elif isinstance(value, float):
        return value != 0
    return True


def is_equal(a, b):
    """Equality by value. Values of different types are never equal (true is not 1), and NaN equals NaN."""
    if typeof(a) != typeof(b):
        return False
    elif typeof(a) == "number" and math.isnan(a):
        return math.isnan(b)
    return a == b


def stringify(value):
    """Returns the text print displays for value. Integral numbers lose their trailing '.0'."""
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        elif math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        text = repr(value)
        return text[:-2] if text.endswith(".0") else text
    return value


def modulus(a, b):
    """Remainder with the sign of a. Like C's fmod, but NaN instead of an error when it is undefined."""
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def floor(quotient):
    return float(math.floor(quotient)) if math.isfinite(quotient) else quotient


class Interpreter:
    """Evaluates expressions against a global scope that lives as long as the Interpreter, so successive calls to
    interpret (e.g. one per shell line) share it.
    """

    def __init__(self, out=None):
        self.globals = Scope()
        self.out = out  # defaults to sys.stdout at write time

        self._visitors = {
            Literal: self._literal,
            Variable: self._variable,
            Unary: self._unary,
            Binary: self._binary,
            Logical: self._logical,
            Body: self._body,
            Print: self._print,
            Let: self._let,
            IfExpr: self._if,
            Cond: self._cond,
        }

    def interpret(self, expressions):
        """Evaluates each top-level expression in order. The first EvalError stops the remaining ones."""
        for expr in expressions:
            self.evaluate(expr, self.globals)

    def evaluate(self, expr, scope):
        """Returns the value of expr in scope."""
        return self._visitors[type(expr)](expr, scope)

    def write(self, text):
        (self.out or sys.stdout).write(text)

    def _literal(self, expr, scope):
        return expr.value

    def _variable(self, expr, scope):
        return scope.get(expr.name)

    def _unary(self, expr, scope):
        operator = expr.operator
        right = self.evaluate(expr.right, scope)

        if operator.type is TokenType.NOT:
            return not is_truthy(right)
        elif operator.type is TokenType.TRUE_PREDICATE:
            return is_truthy(right)

        if typeof(right) != "number":
            raise EvalError(operator, f"Expected number after unary operator \"{operator.lexeme}\"")
        return -right if operator.type is TokenType.MINUS else right

    def _binary(self, expr, scope):
        operator = expr.operator
        first = self.evaluate(expr.first, scope)
        second = self.evaluate(expr.second, scope)
        kind = operator.type

        if kind is TokenType.EQUAL_PREDICATE:
            return is_equal(first, second)
        elif kind is TokenType.NEQUAL_PREDICATE:
            return not is_equal(first, second)
        elif kind in COMPARE:
            return self._compare(operator, first, second)

        if typeof(first) != "number" or typeof(second) != "number":
            raise EvalError(operator, f"Binary operator \"{operator.lexeme}\" only operates on numbers")

        if kind is TokenType.PLUS:
            return first + second
        elif kind is TokenType.MINUS:
            return first - second
        elif kind is TokenType.STAR:
            return first * second
        elif kind is TokenType.PERCENT:
            return modulus(first, second)

        if second == 0:
            raise EvalError(operator, "Cannot divide by zero")
        quotient = first / second
        return floor(quotient) if kind is TokenType.SLASHSLASH else quotient

    def _compare(self, operator, first, second):
        types = typeof(first), typeof(second)
        if types not in (("number", "number"), ("string", "string")):
            raise EvalError(operator, f"Expected the operands to operator '{operator.lexeme}' to be of type 'number' "
                                      f"or 'string' but got '{types[0]}' and '{types[1]}' instead")
        return COMPARE[operator.type](first, second)

    def _logical(self, expr, scope):
        first = self.evaluate(expr.first, scope)

        if expr.operator.type is TokenType.OR:
            if is_truthy(first):
                return first
        elif not is_truthy(first):
            return first

        return self.evaluate(expr.second, scope)

    def _body(self, expr, scope):
        value = None
        for sub_expr in expr.exprs:
            value = self.evaluate(sub_expr, scope)
        return value

    def _print(self, expr, scope):
        end = "\n" if expr.operator.type is TokenType.PRINTLN else ""
        for sub_expr in expr.body.exprs:
            self.write(stringify(self.evaluate(sub_expr, scope)) + end)

    def _let(self, expr, scope):
        local = scope.child()
        for binding in expr.bindings:
            self._bind(binding, local)
        return self.evaluate(expr.body, local)

    def _bind(self, binding, scope):
        scope.define(binding.identifier.lexeme, self.evaluate(binding.value, scope))

    def _if(self, expr, scope):
        if is_truthy(self.evaluate(expr.condition, scope)):
            return self.evaluate(expr.then_body, scope)
        elif expr.else_body is not None:
            return self.evaluate(expr.else_body, scope)
        return None

    def _cond(self, expr, scope):
        for clause in expr.clauses:
            if is_truthy(self.evaluate(clause.condition, scope)):
                return self.evaluate(clause.body, scope)

        if expr.else_body is not None:
            return self.evaluate(expr.else_body, scope)
        return None


# str comparison in Python is by code point
COMPARE = {
    TokenType.GREATER_THAN: lambda a, b: a > b,
    TokenType.GREATER_THAN_OR_EQUAL_TO: lambda a, b: a >= b,
    TokenType.LESS_THAN: lambda a, b: a < b,
    TokenType.LESS_THAN_OR_EQUAL_TO: lambda a, b: a <= b,
}
