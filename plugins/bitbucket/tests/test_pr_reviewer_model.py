"""Row-level behaviour of the PR reviewers table."""
from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import IntegrityError

from plugins.bitbucket.models import BitbucketPrReviewer

KEY = dict(
    connection_id=1,
    repo_id='myorg/myrepo',
    pull_request_id=42,
    reviewer_account='abc123',
)

KEY_COLUMNS = ['connection_id', 'repo_id', 'pull_request_id', 'reviewer_account']

APPROVED_AT = datetime(2025, 12, 18, tzinfo=timezone.utc)


def _approved_row(**overrides):
    values = dict(
        KEY,
        reviewer_name='Alice',
        role='REVIEWER',
        approved=True,
        state='approved',
        participated_on=APPROVED_AT,
    )
    values.update(overrides)
    return values


async def _fetch_all(db):
    async with db.session_factory() as session:
        result = await session.execute(select(BitbucketPrReviewer))
        return result.scalars().all()


@pytest.mark.asyncio
class TestRows:

    async def test_insert_and_read_back(self, migrated_database):
        async with migrated_database._get_session() as session:
            session.add(BitbucketPrReviewer(**_approved_row()))

        rows = await _fetch_all(migrated_database)

        assert len(rows) == 1
        row = rows[0]
        assert row.repo_id == 'myorg/myrepo'
        assert row.role == 'REVIEWER'
        assert row.approved is True
        assert row.state == 'approved'
        assert row.participated_on.replace(tzinfo=None) == APPROVED_AT.replace(tzinfo=None)
        assert row.created_at is not None
        assert row.updated_at is not None

    async def test_duplicate_key_rejected(self, migrated_database):
        async with migrated_database._get_session() as session:
            session.add(BitbucketPrReviewer(**_approved_row()))

        with pytest.raises(IntegrityError):
            async with migrated_database._get_session() as session:
                session.add(BitbucketPrReviewer(**_approved_row(state='changes_requested')))

        rows = await _fetch_all(migrated_database)
        assert [r.state for r in rows] == ['approved']

    async def test_same_reviewer_on_other_pull_request(self, migrated_database):
        async with migrated_database._get_session() as session:
            session.add(BitbucketPrReviewer(**_approved_row()))
            session.add(BitbucketPrReviewer(**_approved_row(pull_request_id=43)))

        rows = await _fetch_all(migrated_database)
        assert sorted(r.pull_request_id for r in rows) == [42, 43]

    async def test_participated_on_null_then_set(self, migrated_database):
        async with migrated_database._get_session() as session:
            session.add(BitbucketPrReviewer(**_approved_row(
                approved=False, state=None, participated_on=None,
            )))

        rows = await _fetch_all(migrated_database)
        assert rows[0].participated_on is None

        async with migrated_database._get_session() as session:
            row = await session.get(BitbucketPrReviewer, tuple(KEY.values()))
            row.participated_on = APPROVED_AT
            row.approved = True
            row.state = 'approved'

        rows = await _fetch_all(migrated_database)
        assert rows[0].participated_on.replace(tzinfo=None) == APPROVED_AT.replace(tzinfo=None)
        assert rows[0].approved is True


@pytest.mark.asyncio
class TestUpsert:
    """Writers overwrite an existing reviewer row by conflict clause."""

    async def test_upsert_overwrites_state(self, migrated_database):
        async with migrated_database._get_session() as session:
            session.add(BitbucketPrReviewer(**_approved_row()))

        stmt = insert(BitbucketPrReviewer).values(**_approved_row(
            approved=False, state='changes_requested',
        ))
        stmt = stmt.on_conflict_do_update(
            index_elements=KEY_COLUMNS,
            set_={
                'approved': stmt.excluded.approved,
                'state': stmt.excluded.state,
                'participated_on': stmt.excluded.participated_on,
            },
        )
        async with migrated_database._get_session() as session:
            await session.execute(stmt)

        rows = await _fetch_all(migrated_database)
        assert len(rows) == 1
        assert rows[0].state == 'changes_requested'
        assert rows[0].approved is False
        assert rows[0].reviewer_name == 'Alice'
