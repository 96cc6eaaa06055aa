"""Registry of named pooled database connections."""

import logging
from typing import Dict, Iterable, Mapping, Optional
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, DBAPIError, NoSuchModuleError
from sqlalchemy.pool import QueuePool
from .config import DbSettings, load_env
from .errors import ConfigurationError, HandleNotInitialized

logger = logging.getLogger(__name__)

DEFAULT_HANDLE = 'db'


class Registry:
    """Handle name -> pooled engine, filled once at startup and read afterwards."""
    def __init__(self):
        self._engines: Dict[str, Engine] = {}
        self._prefixes: Dict[str, str] = {}

    def init_db(self, *names: str, source: Optional[Mapping[str, str]] = None, env_file: Optional[str] = None,
                echo: bool = False) -> 'Registry':
        """Create an engine for every handle name (default 'db') from env-file and environment settings."""
        if source is None:
            source = load_env(env_file)
        for name in names or (DEFAULT_HANDLE,):
            self.connect(DbSettings.from_env(name, source), echo=echo)
        return self

    def connect(self, settings: DbSettings, echo: bool = False) -> Engine:
        """Create, ping and register the engine described by settings."""
        try:
            engine = create_engine(settings.url(), poolclass=QueuePool, echo=echo, **settings.engine_options())
        except (ArgumentError, ImportError, NoSuchModuleError) as e:
            logger.critical(f'[MySQL] Connect Error: {e}')
            raise ConfigurationError(f'cannot create engine for {settings.name}: {e}') from e
        try:
            with engine.connect():
                pass
        except DBAPIError as e:
            logger.warning(f'[MySQL] Ping failed for {settings.name}: {e}')
        self.register(settings.name, engine, settings.prefix)
        return engine

    def register(self, name: str, engine: Engine, prefix: str = '') -> None:
        """Register a pre-built engine under a handle name."""
        if name in self._engines and self._engines[name] is not engine:
            self._engines[name].dispose()
        self._engines[name] = engine
        self._prefixes[name] = prefix or ''
        logger.info(f'Registered database handle {name}')

    def resolve(self, name: Optional[str] = None) -> Engine:
        """Engine for a handle; an unknown handle is a deployment error."""
        name = name or DEFAULT_HANDLE
        engine = self._engines.get(name)
        if engine is None:
            logger.critical(f'[MySQL] Database Error: {name} is not initialized')
            raise HandleNotInitialized(name)
        return engine

    def prefix(self, name: Optional[str] = None) -> str:
        """Table prefix of a handle, '' when unset."""
        return self._prefixes.get(name or DEFAULT_HANDLE, '')

    def names(self) -> Iterable[str]:
        return list(self._engines)

    def __contains__(self, name: str) -> bool:
        return name in self._engines

    def dispose(self):
        """Dispose of every pool."""
        for engine in self._engines.values():
            engine.dispose()
        self._engines.clear()
        self._prefixes.clear()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.dispose()
