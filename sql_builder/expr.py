"""Raw SQL expressions usable as column values."""

from typing import Any, Tuple


class Expr:
    """Raw SQL fragment with its own bind values, e.g. Expr('price * ? + ?', 2, 100)."""
    __slots__ = ('_expr', '_args')

    def __init__(self, expression: str, *args: Any):
        object.__setattr__(self, '_expr', expression)
        object.__setattr__(self, '_args', tuple(args))

    @property
    def expr(self) -> str:
        return self._expr

    @property
    def args(self) -> Tuple[Any, ...]:
        return self._args

    def __setattr__(self, name, value):
        raise AttributeError('Expr is immutable')

    def __eq__(self, other):
        if not isinstance(other, Expr):
            return NotImplemented
        return self._expr == other._expr and self._args == other._args

    def __hash__(self):
        return hash((self._expr, self._args))

    def __repr__(self):
        return f'Expr({self._expr!r}, args={list(self._args)!r})'
