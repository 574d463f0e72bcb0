"""Bitbucket connector plugin package."""
from .models import BitbucketPrReviewer
from .models.migrationscripts import migration_scripts

PLUGIN_NAME = 'bitbucket'

__all__ = ['PLUGIN_NAME', 'BitbucketPrReviewer', 'migration_scripts']
