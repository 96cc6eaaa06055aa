"""Exceptions raised by sqlcon."""


class ConfigurationError(RuntimeError):
    """The process is mis-deployed; not recoverable per request."""


class HandleNotInitialized(ConfigurationError):
    """A connection handle was used before init_db/register."""
    def __init__(self, name: str):
        super().__init__(f'mysql error: database {name} is not initialized')
        self.name = name


class UnknownOperationError(ValueError):
    """A transaction batch contains an operation tag that is not insert, batchInsert, update or delete."""
