"""SQL Builder subpackage for generating MySQL-style statements and bind lists."""

from .query_builder import SQLBuilder
from .expr import Expr
from .expand import expand_in
from .adapt_sql import adapt_sql

__all__ = [
    'SQLBuilder',
    'Expr',
    'expand_in',
    'adapt_sql'
]
