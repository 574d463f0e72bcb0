"""
Global pytest configuration and fixtures for lakeport tests

Provides:
- Temporary SQLite database handle
- Table inspection helper
"""

import pytest
from sqlalchemy import inspect

from lakecore.database import LakeDatabase


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom settings"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
async def database(tmp_path):
    """Connected LakeDatabase backed by a temporary SQLite file."""
    db = LakeDatabase(str(tmp_path / 'lake.db'))
    await db.connect()
    yield db
    await db.close()


@pytest.fixture
def inspect_table():
    """
    Return an async helper: (db, table_name) -> shape dict or None.

    Shape dict keys: columns (ordered names), types ({name: type string}),
    nullable ({name: bool}), primary_key (ordered names).
    """

    async def _inspect(db, table_name):
        def _shape(sync_conn):
            inspector = inspect(sync_conn)
            if not inspector.has_table(table_name):
                return None
            columns = inspector.get_columns(table_name)
            return {
                'columns': [c['name'] for c in columns],
                'types': {c['name']: str(c['type']) for c in columns},
                'nullable': {c['name']: c['nullable'] for c in columns},
                'primary_key': inspector.get_pk_constraint(table_name)['constrained_columns'],
            }

        async with db.engine.connect() as conn:
            return await conn.run_sync(_shape)

    return _inspect
