"""Bitbucket migration steps, oldest first."""

from .v20251218_add_pr_reviewers_table import AddPrReviewersTable


def migration_scripts():
    """Every Bitbucket migration step, in the order they were released."""
    return [
        AddPrReviewersTable(),
    ]


__all__ = ['AddPrReviewersTable', 'migration_scripts']
