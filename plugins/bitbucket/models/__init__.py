"""Bitbucket tool-layer models."""
from .pr_reviewer import BitbucketPrReviewer

__all__ = ['BitbucketPrReviewer']
