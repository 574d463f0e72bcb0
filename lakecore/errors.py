"""
Storage-specific exceptions.

This module defines the exception hierarchy for database and schema
migration operations, so callers can catch exactly the layer they care
about (a single failed DDL statement vs. any storage problem).
"""

from typing import Optional


class StorageError(Exception):
    """
    Base exception for storage errors.

    All storage-related exceptions inherit from this base class,
    allowing catch-all error handling when needed.
    """
    pass


class StorageConnectionError(StorageError):
    """
    Storage connection failed.

    Raised when:
    - Unable to establish database connection
    - Authentication fails
    """
    pass


class MigrationError(StorageError):
    """
    Schema migration failed.

    Raised when:
    - The migration history table cannot be created or read
    - A step applied but its history row could not be written

    Attributes:
        version: Version of the migration step involved (None if unknown)
    """

    def __init__(self, message: str, version: Optional[int] = None):
        super().__init__(message)
        self.version = version


class SchemaError(MigrationError):
    """
    Table creation or reconciliation failed.

    Raised when:
    - CREATE TABLE / ALTER TABLE cannot be executed (privileges,
      connectivity, malformed DDL)
    - An existing table conflicts with the declared shape
      (different primary key, incompatible column type)

    Attributes:
        table_name: Table whose DDL failed
    """

    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        version: Optional[int] = None
    ):
        super().__init__(message, version=version)
        self.table_name = table_name
