"""Tagged write operations executed together in one transaction."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from sqlalchemy import text
from sqlalchemy.engine import Connection
from sql_builder import SQLBuilder, adapt_sql, expand_in
from .errors import UnknownOperationError

logger = logging.getLogger(__name__)


class Operation:
    """One unit of work inside a transaction."""
    tag = ''
    expand = True  # IN-list expansion; never needed for inserts

    def __init__(self, table: Optional[str] = None):
        self.table = table

    def statement(self, builder: SQLBuilder) -> Tuple[str, List[Any]]:
        raise NotImplementedError

    def execute(self, conn: Connection, builder: SQLBuilder):
        """Build, expand and run the statement on conn."""
        sql, binds = self.statement(builder)
        if self.expand:
            sql, binds = expand_in(sql, binds)
        logger.debug(f'{self.tag} SQL: {sql} | Binds: {binds}')
        named, params = adapt_sql(sql, binds)
        return conn.execute(text(named), params)

    @classmethod
    def from_input(cls, item: Any) -> 'Operation':
        """Accept an Operation or a (tag, payload) pair such as ("insert", {"table": ..., "data": {...}})."""
        if isinstance(item, Operation):
            return item
        if isinstance(item, (tuple, list)) and len(item) == 2 and isinstance(item[0], str):
            tag, payload = item
            factory = OPERATIONS.get(tag)
            if factory is None:
                raise UnknownOperationError(f'Unknown operation: {tag}')
            return factory.from_payload(payload or {})
        raise TypeError(f'Unsupported operation type: {type(item)}')

    def __repr__(self):
        return f'{type(self).__name__}(table={self.table!r})'


class Insert(Operation):
    tag = 'insert'
    expand = False

    def __init__(self, data: Dict[str, Any], table: Optional[str] = None):
        super().__init__(table)
        self.data = data

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'Insert':
        return cls(payload.get('data', {}), payload.get('table'))

    def statement(self, builder):
        return builder.build_insert(self.data, self.table)


class BatchInsert(Operation):
    tag = 'batchInsert'
    expand = False

    def __init__(self, columns: Sequence[str], rows: Sequence[Dict[str, Any]], table: Optional[str] = None):
        super().__init__(table)
        self.columns = list(columns)
        self.rows = list(rows)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'BatchInsert':
        return cls(payload.get('columns', []), payload.get('data', []), payload.get('table'))

    def statement(self, builder):
        return builder.build_batch_insert(self.columns, self.rows, self.table)


class Update(Operation):
    tag = 'update'

    def __init__(self, query: Dict[str, Any], data: Dict[str, Any], table: Optional[str] = None):
        super().__init__(table)
        self.query = query
        self.data = data

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'Update':
        return cls(payload.get('query', {}), payload.get('data', {}))

    def statement(self, builder):
        query = dict(self.query, table=self.table) if self.table else self.query
        return builder.build_update(query, self.data)


class Delete(Operation):
    tag = 'delete'

    def __init__(self, query: Dict[str, Any], table: Optional[str] = None):
        super().__init__(table)
        self.query = query

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'Delete':
        return cls(payload)

    def statement(self, builder):
        query = dict(self.query, table=self.table) if self.table else self.query
        return builder.build_delete(query)


OPERATIONS = {op.tag: op for op in (Insert, BatchInsert, Update, Delete)}


def normalize(operations: Iterable[Any]) -> List[Operation]:
    """Convert a batch to Operations; an unknown tag rejects the whole batch.

    A mapping of tag -> payload is read as its (tag, payload) pairs.
    """
    if isinstance(operations, Mapping):
        operations = operations.items()
    return [Operation.from_input(item) for item in operations]


def run_in_transaction(conn: Connection, builder: SQLBuilder, operations: Sequence[Operation]) -> None:
    """Run operations in order inside one transaction: commit if all succeed, otherwise roll back and re-raise."""
    trans = conn.begin()
    try:
        for op in operations:
            op.execute(conn, builder)
    except Exception:
        trans.rollback()
        raise
    trans.commit()
