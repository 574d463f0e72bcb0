"""
Migration registry for plugin schema evolution.

This module provides the MigrationRegistry class which handles:
- Registration of migration steps shipped by plugins
- Version uniqueness checks across all plugins
- Ordering of steps by version
- Calculation of pending steps from the applied history

Steps are plain Python objects (see MigrationScript); each plugin
exposes its ordered list through migration_scripts().
"""

import logging
from typing import Iterable, List

from .migration import MigrationScript

logger = logging.getLogger(__name__)


class MigrationRegistry:
    """
    Tracks every migration step known to this process.

    Responsibilities:
    - Register steps per plugin
    - Reject duplicate or invalid versions
    - Return steps in version order
    - Calculate pending steps

    Does NOT execute migrations (see MigrationRunner).

    Example:
        >>> registry = MigrationRegistry()
        >>> registry.register('bitbucket', migrationscripts.all())
        >>> registry.all()
        [<AddPrReviewersTable(v20251218000001, add PR reviewers table ...)>]
    """

    def __init__(self):
        self._scripts = {}  # {version: script}
        self._owners = {}   # {version: plugin_name}

    def register(self, plugin_name: str, scripts: Iterable[MigrationScript]) -> None:
        """
        Register migration steps for a plugin.

        Args:
            plugin_name: Plugin identifier (e.g., 'bitbucket')
            scripts: Steps shipped by the plugin

        Raises:
            ValueError: If a version is non-positive, already registered,
                or a step has an empty name
        """
        for script in scripts:
            version = script.version()
            name = script.name()

            if not isinstance(version, int) or version < 1:
                raise ValueError(
                    f"Migration version must be a positive integer, got {version!r} "
                    f"in plugin '{plugin_name}'"
                )

            if not name or not name.strip():
                raise ValueError(
                    f"Migration {version} in plugin '{plugin_name}' has an empty name"
                )

            if version in self._scripts:
                raise ValueError(
                    f"Duplicate migration version {version} in plugin "
                    f"'{plugin_name}' (already registered by "
                    f"'{self._owners[version]}')"
                )

            self._scripts[version] = script
            self._owners[version] = plugin_name
            logger.debug(f"Registered migration: {plugin_name} {script!r}")

    def all(self) -> List[MigrationScript]:
        """Every registered step, sorted by version ascending."""
        return [self._scripts[v] for v in sorted(self._scripts)]

    def plugin_of(self, version: int) -> str:
        """
        Name of the plugin that registered a version.

        Raises:
            KeyError: If the version is not registered
        """
        return self._owners[version]

    @property
    def latest_version(self) -> int:
        """Highest registered version (0 if none)."""
        return max(self._scripts, default=0)

    def get_pending(self, applied_versions: Iterable[int]) -> List[MigrationScript]:
        """
        Calculate steps that still need to run.

        A step is pending when its version is not in the applied set.
        Steps below the current watermark (registered after a newer step
        already ran) are still returned, with a warning.

        Args:
            applied_versions: Versions already recorded in the history

        Returns:
            Pending steps sorted by version ascending

        Example:
            >>> # Applied: 20251101000001; registered: that + 20251218000001
            >>> [s.version() for s in registry.get_pending({20251101000001})]
            [20251218000001]
        """
        applied = set(applied_versions)
        watermark = max(applied, default=0)

        pending = [s for s in self.all() if s.version() not in applied]

        for script in pending:
            if script.version() < watermark:
                logger.warning(
                    f"Migration {script.version()} ({self._owners[script.version()]}) "
                    f"is older than applied watermark {watermark}; applying out of order"
                )

        return pending

    def __len__(self) -> int:
        return len(self._scripts)
