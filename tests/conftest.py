"""Shared fixtures: an in-memory SQLite engine registered as the 'db' handle."""

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from sqlcon import Registry, SqlTable

SCHEMA = [
    """CREATE TABLE t_users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        age INTEGER,
        balance INTEGER DEFAULT 0
    )""",
    """CREATE TABLE t_orders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        amount INTEGER NOT NULL
    )""",
]


@pytest.fixture
def engine() -> Iterator[Engine]:
    """Single shared in-memory SQLite connection with the test schema."""
    engine = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
    yield engine
    engine.dispose()


@pytest.fixture
def registry(engine: Engine) -> Iterator[Registry]:
    """Registry with the SQLite engine as handle 'db' and table prefix 't_'."""
    reg = Registry()
    reg.register("db", engine, prefix="t_")
    yield reg
    reg.dispose()


@pytest.fixture
def users(registry: Registry) -> SqlTable:
    return SqlTable(registry, "users")


@pytest.fixture
def orders(registry: Registry) -> SqlTable:
    return SqlTable(registry, "orders")
