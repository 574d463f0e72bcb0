"""
Migration step contract and applied-migration record.

This module defines the core data structures for schema evolution:
- MigrationScript: A versioned step a plugin ships (version, name, apply)
- AppliedMigration: A step that has been applied to the database

Steps are registered with MigrationRegistry and executed in version
order by MigrationRunner.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from lakecore.database import LakeDatabase


class MigrationScript(ABC):
    """
    A single versioned, forward-only schema change.

    Subclasses return a fixed version and description and implement
    apply(). A released step never changes: later schema changes ship as
    new steps with higher versions.

    Versions are date coded (YYYYMMDD + 6-digit sequence) so they stay
    globally unique and sortable across every plugin.

    Example:
        >>> class AddItemsTable(MigrationScript):
        ...     def version(self):
        ...         return 20250101000001
        ...     def name(self):
        ...         return "add items table"
        ...     async def apply(self, db):
        ...         await auto_migrate_tables(db, ITEMS_SCHEMA)
    """

    @abstractmethod
    def version(self) -> int:
        """Fixed ordering key, unique across all steps ever shipped."""

    @abstractmethod
    def name(self) -> str:
        """Static description for operator-facing logs."""

    @abstractmethod
    async def apply(self, db: 'LakeDatabase') -> None:
        """
        Bring the database to this step's shape.

        Must be a no-op when the change is already present.

        Raises:
            SchemaError: If the DDL cannot be executed
        """

    def __lt__(self, other: 'MigrationScript') -> bool:
        """Allow sorting steps by version number."""
        if not isinstance(other, MigrationScript):
            return NotImplemented
        return self.version() < other.version()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(v{self.version()}, {self.name()})>"


@dataclass
class AppliedMigration:
    """
    Represents a migration step that has been applied to the database.

    This corresponds to a row in the _lake_migration_history table.

    Attributes:
        version: Step version
        name: Step description at the time it was applied
        plugin_name: Plugin that owns the step
        applied_at: When the step was applied
        applied_by: User/system that applied it
        execution_time_ms: Time taken to apply (optional)

    Example:
        >>> applied = AppliedMigration(
        ...     version=20251218000001,
        ...     name='add PR reviewers table',
        ...     plugin_name='bitbucket',
        ...     applied_at=datetime(2025, 12, 18, 10, 0, 0),
        ...     applied_by='system',
        ... )
        >>> print(applied)
        <AppliedMigration(bitbucket v20251218000001)>
    """

    version: int
    name: str
    plugin_name: str
    applied_at: datetime
    applied_by: str
    execution_time_ms: Optional[int] = None

    def __post_init__(self):
        if self.version < 1:
            raise ValueError(
                f"Migration version must be >= 1, got {self.version}"
            )

    def __repr__(self) -> str:
        return f"<AppliedMigration({self.plugin_name} v{self.version})>"
