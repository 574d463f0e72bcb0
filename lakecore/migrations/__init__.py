"""
Schema migrations package for plugin tool tables.

This package provides:
- MigrationScript: Contract for a versioned, forward-only step
- AppliedMigration: Data model for applied steps
- MigrationRegistry: Registration and ordering of steps
- MigrationRunner: Ordered execution with history tracking
- MigrationResult: Data model for execution results
- auto_migrate_tables: Create-if-absent / add-missing-columns helper
"""

from .auto_migrate import auto_migrate_tables
from .migration import AppliedMigration, MigrationScript
from .migration_executor import MigrationResult, MigrationRunner
from .migration_manager import MigrationRegistry

__all__ = [
    'MigrationScript',
    'AppliedMigration',
    'MigrationRegistry',
    'MigrationRunner',
    'MigrationResult',
    'auto_migrate_tables',
]
