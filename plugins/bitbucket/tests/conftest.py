"""Fixtures for Bitbucket plugin tests."""

import pytest

from lakecore.database import LakeDatabase
from plugins.bitbucket.models.migrationscripts import AddPrReviewersTable


@pytest.fixture
async def database(tmp_path):
    """Connected LakeDatabase backed by a temporary SQLite file."""
    db = LakeDatabase(str(tmp_path / 'bitbucket.db'))
    await db.connect()
    yield db
    await db.close()


@pytest.fixture
async def migrated_database(database):
    """Database with the reviewers table created by its migration."""
    await AddPrReviewersTable().apply(database)
    return database
