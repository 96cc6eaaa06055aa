"""SQL statement builder for INSERT, batch INSERT, UPDATE, SELECT and DELETE."""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from .expr import Expr

Statement = Tuple[str, List[Any]]


class SQLBuilder:
    """Builds MySQL-style statements with '?' placeholders from condition and data maps.

    Condition map keys: select, table, join, where, group, order, offset, limit, binds.
    Identifiers and SQL fragments are trusted; only values are parameterized.
    """
    def __init__(self, table: str, prefix: str = ''):
        """Initialize with the default table and the table prefix of its handle."""
        self.table = table
        self.prefix = prefix or ''

    def _table(self, table: Optional[str]) -> str:
        return f'{self.prefix}{table or self.table}'

    def build_insert(self, data: Dict[str, Any], table: Optional[str] = None) -> Statement:
        """Generate INSERT for a single row."""
        cols = list(data.keys())
        binds = list(data.values())
        ph = ','.join('?' for _ in cols)
        return f'INSERT INTO {self._table(table)} ({",".join(cols)}) VALUES ({ph})', binds

    def build_batch_insert(self, columns: Sequence[str], rows: Sequence[Dict[str, Any]],
                           table: Optional[str] = None) -> Statement:
        """Generate multi-row INSERT; rows are projected onto columns, missing keys bind NULL."""
        binds = []
        groups = []
        for row in rows:
            binds.extend(row.get(c) for c in columns)
            groups.append(f'({",".join("?" for _ in columns)})')
        return f'INSERT INTO {self._table(table)} ({",".join(columns)}) VALUES {",".join(groups)}', binds

    def build_update(self, query: Dict[str, Any], data: Dict[str, Any]) -> Statement:
        """Generate UPDATE; SET binds always precede the condition binds."""
        sets = []
        binds = []
        for col, val in data.items():
            if isinstance(val, Expr):
                sets.append(f'{col} = {val.expr}')
                binds.extend(val.args)
            else:
                sets.append(f'{col} = ?')
                binds.append(val)
        clauses = [f'UPDATE {self._table(query.get("table"))}', f'SET {",".join(sets)}']
        if 'where' in query:
            clauses.append(f'WHERE {query["where"]}')
        binds.extend(query.get('binds') or [])
        return ' '.join(clauses), binds

    def build_query(self, query: Dict[str, Any]) -> Statement:
        """Generate SELECT with optional joins, WHERE, GROUP BY, ORDER BY, OFFSET and LIMIT."""
        clauses = [f'SELECT {query.get("select", "*")}']
        table = self._table(query.get('table'))
        if 'join' in query:
            clauses.append(f'FROM {table} AS a')
            clauses.extend(query['join'])
        else:
            clauses.append(f'FROM {table}')
        if 'where' in query:
            clauses.append(f'WHERE {query["where"]}')
        if 'group' in query:
            clauses.append(f'GROUP BY {query["group"]}')
        if 'order' in query:
            clauses.append(f'ORDER BY {query["order"]}')
        if 'offset' in query:
            clauses.append(f'OFFSET {int(query["offset"])}')
        if 'limit' in query:
            clauses.append(f'LIMIT {int(query["limit"])}')
        return ' '.join(clauses), list(query.get('binds') or [])

    def build_count(self, query: Dict[str, Any], column: Optional[str] = None) -> Statement:
        """Generate COUNT query; any caller select is replaced."""
        query = dict(query, select=f'COUNT({column})' if column else 'COUNT(*)')
        return self.build_query(query)

    def build_find_one(self, query: Dict[str, Any]) -> Statement:
        """Generate single-row SELECT; any caller limit is replaced by 1."""
        return self.build_query(dict(query, limit=1))

    def build_delete(self, query: Dict[str, Any]) -> Statement:
        """Generate DELETE; no WHERE means the whole table."""
        sql = f'DELETE FROM {self._table(query.get("table"))}'
        if 'where' in query:
            sql += f' WHERE {query["where"]}'
        return sql, list(query.get('binds') or [])
