"""Table-bound executor: builds statements and runs them on a pooled handle."""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
import pandas as pd
from sqlalchemy import text
from sqlalchemy.engine import CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError
from sql_builder import SQLBuilder, adapt_sql, expand_in
from .pool import DEFAULT_HANDLE, Registry
from .transaction import normalize, run_in_transaction

logger = logging.getLogger(__name__)

RowFactory = Callable[[Dict[str, Any]], Any]


def log_failure(op: str, message: str):
    """Log a failed operation."""
    logger.error(f'[MySQL] {op} Error: {message}')


class SqlTable:
    """CRUD and transactions for one table on one connection handle.

    Write methods return the last inserted id or the rows affected. Read methods
    return dict rows, or whatever `into` makes of each row. Failures are logged and
    the original exception is re-raised.
    """
    def __init__(self, registry: Registry, table: str, db: str = DEFAULT_HANDLE, debug: bool = False):
        self.registry = registry
        self.table = table
        self.db = db or DEFAULT_HANDLE
        self.debug = debug

    @property
    def engine(self) -> Engine:
        return self.registry.resolve(self.db)

    @property
    def builder(self) -> SQLBuilder:
        return SQLBuilder(self.table, self.registry.prefix(self.db))

    def _log(self, sql: str, binds: Any):
        """Log SQL and binds if debug enabled."""
        if self.debug:
            logger.debug(f'SQL: {sql} | Binds: {binds}')

    def _prepare(self, sql: str, binds: Sequence[Any], expand: bool = True):
        """Expand IN-list binds and switch to named parameters."""
        if expand:
            sql, binds = expand_in(sql, binds)
        self._log(sql, binds)
        return adapt_sql(sql, binds)

    def _exec(self, op: str, sql: str, binds: Sequence[Any], extract: Callable[[CursorResult], int],
              expand: bool = True) -> int:
        """Run a write statement in its own transaction and extract id or rowcount from the result."""
        engine = self.engine
        try:
            named, params = self._prepare(sql, binds, expand)
            with engine.begin() as conn:
                return extract(conn.execute(text(named), params))
        except (SQLAlchemyError, ValueError) as e:
            log_failure(op, str(e))
            raise

    def _fetch(self, op: str, sql: str, binds: Sequence[Any], expand: bool = True) -> List[Dict[str, Any]]:
        engine = self.engine
        try:
            named, params = self._prepare(sql, binds, expand)
            with engine.connect() as conn:
                return [dict(row) for row in conn.execute(text(named), params).mappings().all()]
        except (SQLAlchemyError, ValueError) as e:
            log_failure(op, str(e))
            raise

    @staticmethod
    def _last_id(result: CursorResult) -> int:
        try:
            return result.lastrowid or 0
        except SQLAlchemyError as e:
            logger.debug(f'lastrowid unavailable: {e}')
            return 0

    @staticmethod
    def _rows(result: CursorResult) -> int:
        try:
            rows = result.rowcount
        except SQLAlchemyError as e:
            logger.debug(f'rowcount unavailable: {e}')
            return 0
        return rows if rows and rows > 0 else 0

    def insert(self, data: Dict[str, Any]) -> int:
        """Insert one row; returns the new id."""
        sql, binds = self.builder.build_insert(data)
        return self._exec('Insert', sql, binds, self._last_id, expand=False)

    def batch_insert(self, columns: Sequence[str], rows: Sequence[Dict[str, Any]]) -> int:
        """Insert many rows in one statement; returns rows affected."""
        sql, binds = self.builder.build_batch_insert(columns, rows)
        return self._exec('BatchInsert', sql, binds, self._rows, expand=False)

    def update(self, query: Dict[str, Any], data: Dict[str, Any]) -> int:
        """Update rows matching query['where']; returns rows affected."""
        sql, binds = self.builder.build_update(query, data)
        return self._exec('Update', sql, binds, self._rows)

    def delete(self, query: Dict[str, Any]) -> int:
        """Delete rows matching query['where']; returns rows affected."""
        sql, binds = self.builder.build_delete(query)
        return self._exec('Delete', sql, binds, self._rows)

    def count(self, query: Dict[str, Any], column: Optional[str] = None) -> int:
        """COUNT(*) or COUNT(column) of matching rows."""
        sql, binds = self.builder.build_count(query, column)
        rows = self._fetch('Count', sql, binds)
        return int(next(iter(rows[0].values()))) if rows else 0

    def find_one(self, query: Dict[str, Any], into: Optional[RowFactory] = None) -> Any:
        """First matching row, or None when nothing matches."""
        sql, binds = self.builder.build_find_one(query)
        rows = self._fetch('FindOne', sql, binds)
        if not rows:
            return None
        return into(rows[0]) if into else rows[0]

    def find(self, query: Dict[str, Any], into: Optional[RowFactory] = None) -> List[Any]:
        """All matching rows."""
        sql, binds = self.builder.build_query(query)
        rows = self._fetch('Find', sql, binds)
        return [into(r) for r in rows] if into else rows

    def find_all(self, *columns: str, into: Optional[RowFactory] = None) -> List[Any]:
        """Every row of the table, optionally only some columns."""
        query = {'select': ','.join(columns)} if columns else {}
        sql, binds = self.builder.build_query(query)
        rows = self._fetch('FindAll', sql, binds, expand=False)
        return [into(r) for r in rows] if into else rows

    def find_df(self, query: Dict[str, Any]) -> pd.DataFrame:
        """Matching rows as a DataFrame."""
        sql, binds = self.builder.build_query(query)
        engine = self.engine
        try:
            named, params = self._prepare(sql, binds)
            with engine.connect() as conn:
                return pd.read_sql(text(named), conn, params=params)
        except (SQLAlchemyError, ValueError) as e:
            log_failure('FindDF', str(e))
            raise

    def do_transactions(self, operations: Iterable[Any]) -> None:
        """Run insert/batchInsert/update/delete operations atomically, in order.

        Items are Operation instances or (tag, payload) pairs. Any failure rolls
        back every operation and is re-raised.
        """
        engine = self.engine
        try:
            ops = normalize(operations)
            with engine.connect() as conn:
                run_in_transaction(conn, self.builder, ops)
        except (SQLAlchemyError, TypeError, ValueError) as e:
            log_failure('DoTransactions', str(e))
            raise
