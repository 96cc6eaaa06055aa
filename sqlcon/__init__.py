from .conn import SqlTable, log_failure
from .config import DbSettings, get_env_string, get_env_int, load_env
from .pool import Registry, DEFAULT_HANDLE
from .transaction import Operation, Insert, BatchInsert, Update, Delete
from .errors import ConfigurationError, HandleNotInitialized, UnknownOperationError
from .response import return_json

__all__ = [
    'SqlTable', 'log_failure', 'DbSettings', 'get_env_string', 'get_env_int', 'load_env',
    'Registry', 'DEFAULT_HANDLE', 'Operation', 'Insert', 'BatchInsert', 'Update', 'Delete',
    'ConfigurationError', 'HandleNotInitialized', 'UnknownOperationError', 'return_json'
]
