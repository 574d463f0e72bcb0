"""
Unit tests for MigrationRegistry.

Tests cover:
- Registration and version ordering
- Duplicate / invalid version detection
- Pending calculation from applied history
"""

import logging
from datetime import datetime

import pytest

from lakecore.migrations import AppliedMigration, MigrationRegistry, MigrationScript


class FakeScript(MigrationScript):
    """Migration step with a configurable version and name."""

    def __init__(self, version, name='fake step'):
        self._version = version
        self._name = name
        self.applied = 0

    def version(self):
        return self._version

    def name(self):
        return self._name

    async def apply(self, db):
        self.applied += 1


class TestRegistration:
    """Test step registration."""

    def test_all_sorted_by_version(self):
        registry = MigrationRegistry()
        registry.register('github', [FakeScript(20250301000001), FakeScript(20250101000001)])
        registry.register('bitbucket', [FakeScript(20250201000001)])

        assert [s.version() for s in registry.all()] == [
            20250101000001, 20250201000001, 20250301000001
        ]
        assert len(registry) == 3

    def test_plugin_of(self):
        registry = MigrationRegistry()
        registry.register('bitbucket', [FakeScript(20251218000001)])

        assert registry.plugin_of(20251218000001) == 'bitbucket'
        with pytest.raises(KeyError):
            registry.plugin_of(1)

    def test_duplicate_version_across_plugins(self):
        registry = MigrationRegistry()
        registry.register('github', [FakeScript(20251218000001)])

        with pytest.raises(ValueError, match="Duplicate migration version 20251218000001"):
            registry.register('bitbucket', [FakeScript(20251218000001)])

    @pytest.mark.parametrize('version', [0, -5, '20251218000001'])
    def test_invalid_version(self, version):
        with pytest.raises(ValueError, match="positive integer"):
            MigrationRegistry().register('bitbucket', [FakeScript(version)])

    def test_empty_name(self):
        with pytest.raises(ValueError, match="empty name"):
            MigrationRegistry().register('bitbucket', [FakeScript(1, name='  ')])

    def test_latest_version(self):
        registry = MigrationRegistry()
        assert registry.latest_version == 0

        registry.register('bitbucket', [FakeScript(5), FakeScript(9), FakeScript(7)])
        assert registry.latest_version == 9


class TestPending:
    """Test pending step calculation."""

    @pytest.fixture
    def registry(self):
        registry = MigrationRegistry()
        registry.register('bitbucket', [FakeScript(1), FakeScript(2), FakeScript(3)])
        return registry

    def test_nothing_applied(self, registry):
        assert [s.version() for s in registry.get_pending([])] == [1, 2, 3]

    def test_partially_applied(self, registry):
        assert [s.version() for s in registry.get_pending({1, 2})] == [3]

    def test_all_applied(self, registry):
        assert registry.get_pending([1, 2, 3]) == []

    def test_out_of_order_step_still_pending(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            pending = registry.get_pending({1, 3})

        assert [s.version() for s in pending] == [2]
        assert 'older than applied watermark 3' in caplog.text

    def test_unknown_applied_versions_ignored(self, registry):
        assert [s.version() for s in registry.get_pending({99})] == [1, 2, 3]


class TestScriptOrdering:
    """Test MigrationScript comparison helpers."""

    def test_sorted_scripts(self):
        scripts = sorted([FakeScript(3), FakeScript(1), FakeScript(2)])
        assert [s.version() for s in scripts] == [1, 2, 3]

    def test_repr(self):
        assert repr(FakeScript(7, 'add things')) == '<FakeScript(v7, add things)>'

    def test_applied_migration_rejects_bad_version(self):
        with pytest.raises(ValueError, match="must be >= 1"):
            AppliedMigration(
                version=0,
                name='x',
                plugin_name='bitbucket',
                applied_at=datetime(2025, 12, 18),
                applied_by='system',
            )
