"""Per-handle database settings read from the environment and an optional env file."""

import os
from typing import Any, Dict, Mapping, Optional
from dotenv import dotenv_values, find_dotenv
from sqlalchemy.engine import URL

# Defaults applied when <HANDLE>_<KEY> is not set
DEFAULTS = {
    'host': 'localhost',
    'port': 3306,
    'username': 'root',
    'password': '',
    'database': 'test',
    'charset': 'utf8mb4',
    'collation': 'utf8_general_ci',
    'prefix': '',
    'max_open_conns': 20,
    'max_idle_conns': 10,
    'pool_timeout': 30,
    'pool_recycle': 3600,
}


def load_env(env_file: Optional[str] = None) -> Dict[str, str]:
    """Settings from an env file (default: nearest .env) overlaid by the process environment."""
    path = env_file if env_file is not None else find_dotenv(usecwd=True)
    values = {k: v for k, v in dotenv_values(path).items() if v is not None} if path else {}
    values.update(os.environ)
    return values


def env_key(section: str, key: str) -> str:
    """Environment variable name for a handle setting, e.g. ('db', 'max_open_conns') -> DB_MAX_OPEN_CONNS."""
    return f'{section}_{key}'.upper()


def get_env_string(section: str, key: str, default: str = '', source: Optional[Mapping[str, str]] = None) -> str:
    source = os.environ if source is None else source
    return source.get(env_key(section, key), default)


def get_env_int(section: str, key: str, default: int = 0, source: Optional[Mapping[str, str]] = None) -> int:
    raw = get_env_string(section, key, '', source)
    if raw == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f'{env_key(section, key)} must be an integer, got {raw!r}')


class DbSettings:
    """Connection and pool settings of one handle."""
    def __init__(self, name: str = 'db', **values: Any):
        unknown = set(values) - set(DEFAULTS)
        if unknown:
            raise ValueError(f'Unknown settings: {sorted(unknown)}')
        self.name = name
        merged: Dict[str, Any] = dict(DEFAULTS, **values)
        for key, value in merged.items():
            setattr(self, key, value)

    @classmethod
    def from_env(cls, name: str = 'db', source: Optional[Mapping[str, str]] = None) -> 'DbSettings':
        """Load settings for handle `name` from `source` (default os.environ)."""
        values = {}
        for key, default in DEFAULTS.items():
            if isinstance(default, int):
                values[key] = get_env_int(name, key, default, source)
            else:
                values[key] = get_env_string(name, key, default, source)
        return cls(name, **values)

    def url(self) -> URL:
        """SQLAlchemy URL for the MySQL connector driver."""
        return URL.create(
            'mysql+mysqlconnector', username=self.username, password=self.password,
            host=self.host, port=self.port, database=self.database,
            query={'charset': self.charset, 'collation': self.collation}
        )

    def engine_options(self) -> Dict[str, Any]:
        """Pool sizing for create_engine: idle connections are the pool, the rest overflow."""
        # QueuePool treats pool_size=0 as unbounded
        idle = max(1, min(self.max_idle_conns, self.max_open_conns))
        return {
            'pool_size': idle,
            'max_overflow': max(0, self.max_open_conns - idle),
            'pool_timeout': self.pool_timeout,
            'pool_recycle': self.pool_recycle,
            'pool_pre_ping': True,
        }

    def __repr__(self):
        return f'DbSettings({self.name!r}, host={self.host!r}, port={self.port}, database={self.database!r})'
