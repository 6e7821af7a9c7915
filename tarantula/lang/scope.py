"""Lexical scope of the tarantula language. A 'let' expression creates a child Scope of the scope it is evaluated in;
lookups walk up the chain of parents to the global scope.
"""

from tarantula.lang.error import EvalError


class Scope:
    """Mapping of identifier name to value, with an optional enclosing scope."""

    def __init__(self, parent=None):
        self.parent = parent
        self.values = {}

    def define(self, name, value):
        """Binds value to name in this scope only, overwriting any previous binding here. Enclosing scopes are never
        touched, so a binding that reuses an outer name shadows it.
        """
        self.values[name] = value

    def get(self, identifier):
        """Returns the value bound to the identifier token, searching enclosing scopes in turn. Raises an EvalError
        pointing at identifier if no scope binds it.
        """
        scope = self
        while scope is not None:
            if identifier.lexeme in scope.values:
                return scope.values[identifier.lexeme]
            scope = scope.parent

        raise EvalError(identifier, f"Undefined identifier '{identifier.lexeme}'")

    def child(self):
        """Returns a new Scope enclosed by this one."""
        return Scope(self)
