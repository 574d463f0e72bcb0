"""Shared storage and schema-migration infrastructure for lakeport plugins."""
from .config import configure_logger, load_config, resolve_database_url
from .database import LakeDatabase
from .errors import MigrationError, SchemaError, StorageConnectionError, StorageError

__all__ = [
    'LakeDatabase',
    'configure_logger',
    'load_config',
    'resolve_database_url',
    'StorageError',
    'StorageConnectionError',
    'MigrationError',
    'SchemaError',
]
