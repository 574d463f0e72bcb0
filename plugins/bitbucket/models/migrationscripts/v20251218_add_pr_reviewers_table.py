"""Add the pull request reviewers table."""

from lakecore.migrations import MigrationScript, auto_migrate_tables
from lakecore.schema import ColumnSpec, TableSchema, audit_columns

# Frozen snapshot of the table as of this step. Later model changes ship
# as new steps and must not edit this one.
PR_REVIEWERS_20251218 = TableSchema(
    name='_tool_bitbucket_pull_request_reviewers',
    columns=[
        ColumnSpec('connection_id', 'unsigned_bigint', primary_key=True),
        ColumnSpec('repo_id', 'string', length=255, primary_key=True),
        ColumnSpec('pull_request_id', 'integer', primary_key=True),
        ColumnSpec('reviewer_account', 'string', length=255, primary_key=True),
        ColumnSpec('reviewer_name', 'string', length=255),
        ColumnSpec('role', 'string', length=100),
        ColumnSpec('approved', 'boolean'),
        ColumnSpec('state', 'string', length=100),
        ColumnSpec('participated_on', 'datetime'),
        *audit_columns(),
    ],
)


class AddPrReviewersTable(MigrationScript):

    def version(self) -> int:
        return 20251218000001

    def name(self) -> str:
        return "add PR reviewers table to track review status (approved/changes_requested)"

    async def apply(self, db) -> None:
        await auto_migrate_tables(db, PR_REVIEWERS_20251218)
