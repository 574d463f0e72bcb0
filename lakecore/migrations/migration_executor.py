#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Migration runner with ordered execution and history tracking.

Applies pending migration steps in version order against a
LakeDatabase, recording each success in the _lake_migration_history
table. The first failing step halts the run: it is not recorded, later
steps are not attempted, and its exception propagates unchanged to the
caller.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from lakecore.errors import MigrationError
from lakecore.models import Base, MigrationHistory

from .migration import AppliedMigration, MigrationScript
from .migration_manager import MigrationRegistry


@dataclass
class MigrationResult:
    """
    Result of applying one migration step.

    Attributes:
        version: Step version that was applied
        name: Step description
        plugin_name: Plugin that owns the step
        execution_time_ms: Execution time in milliseconds
    """
    version: int
    name: str
    plugin_name: str
    execution_time_ms: int


class MigrationRunner:
    """
    Executes registered migration steps in version order.

    Runs are serialized with an asyncio.Lock, so two callers in the same
    process never apply steps concurrently. Steps perform no retries and
    neither does the runner.

    Attributes:
        database: LakeDatabase handle passed to each step
        registry: MigrationRegistry holding known steps
        applied_by: Recorded in the history for each applied step

    Example:
        registry = MigrationRegistry()
        registry.register('bitbucket', bitbucket.migration_scripts())

        runner = MigrationRunner(db, registry)
        results = await runner.run()
        for r in results:
            print(f"v{r.version} {r.name} ({r.execution_time_ms}ms)")
    """

    def __init__(
        self,
        database,
        registry: Optional[MigrationRegistry] = None,
        applied_by: str = 'system'
    ):
        """
        Initialize migration runner.

        Args:
            database: LakeDatabase instance
            registry: Registry of steps (empty registry if None)
            applied_by: User/system name recorded in the history
        """
        self.database = database
        self.registry = registry if registry is not None else MigrationRegistry()
        self.applied_by = applied_by
        self.logger = logging.getLogger(__name__)
        self._lock = asyncio.Lock()

    async def ensure_history_table(self) -> None:
        """
        Ensure _lake_migration_history exists.

        Safe to call multiple times.

        Raises:
            MigrationError: If the table cannot be created
        """
        try:
            async with self.database.engine.begin() as conn:
                await conn.run_sync(
                    Base.metadata.create_all,
                    tables=[MigrationHistory.__table__]
                )
        except SQLAlchemyError as e:
            raise MigrationError(
                f"Cannot create migration history table: {e}"
            ) from e

        self.logger.debug("Ensured %s table exists", MigrationHistory.__tablename__)

    async def get_applied_migrations(self) -> list[AppliedMigration]:
        """
        Read the applied history, sorted by version ascending.

        Raises:
            MigrationError: If the history cannot be read
        """
        await self.ensure_history_table()

        try:
            async with self.database.session_factory() as session:
                result = await session.execute(
                    select(MigrationHistory).order_by(MigrationHistory.version)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise MigrationError(f"Cannot read migration history: {e}") from e

        return [
            AppliedMigration(
                version=row.version,
                name=row.name,
                plugin_name=row.plugin_name,
                applied_at=row.applied_at,
                applied_by=row.applied_by,
                execution_time_ms=row.execution_time_ms,
            )
            for row in rows
        ]

    async def current_version(self) -> int:
        """Watermark: highest applied version (0 if nothing applied)."""
        applied = await self.get_applied_migrations()
        return max((a.version for a in applied), default=0)

    async def get_pending_migrations(self) -> list[MigrationScript]:
        """Registered steps not yet applied, sorted by version ascending."""
        applied = await self.get_applied_migrations()
        return self.registry.get_pending(a.version for a in applied)

    async def run(self) -> list[MigrationResult]:
        """
        Apply every pending step in version order.

        Returns:
            Results for the steps applied by this run (empty if up to date)

        Raises:
            SchemaError: Re-raised unchanged from the failing step
            MigrationError: If the history cannot be read or written
        """
        async with self._lock:
            applied = await self.get_applied_migrations()
            pending = self.registry.get_pending(a.version for a in applied)

            if not pending:
                self.logger.info(
                    'Database schema up to date (version %d)',
                    max((a.version for a in applied), default=0)
                )
                return []

            self.logger.info('Found %d pending migration(s)', len(pending))

            results = []
            for index, script in enumerate(pending):
                results.append(
                    await self._apply_one(script, remaining=len(pending) - index - 1)
                )

            self.logger.info('Applied %d migration(s)', len(results))
            return results

    async def _apply_one(self, script: MigrationScript, remaining: int) -> MigrationResult:
        version = script.version()
        plugin_name = self.registry.plugin_of(version)
        start_time = time.time()

        self.logger.info(
            'Applying migration v%d for plugin %s: %s',
            version,
            plugin_name,
            script.name()
        )

        try:
            await script.apply(self.database)
        except Exception as e:
            self.logger.error(
                'Migration v%d for plugin %s failed: %s '
                '(halting, %d later migration(s) not applied)',
                version,
                plugin_name,
                e,
                remaining
            )
            raise

        execution_time_ms = int((time.time() - start_time) * 1000)
        await self._record_migration(script, plugin_name, execution_time_ms)

        self.logger.info(
            'Applied migration v%d for plugin %s (%dms)',
            version,
            plugin_name,
            execution_time_ms
        )

        return MigrationResult(
            version=version,
            name=script.name(),
            plugin_name=plugin_name,
            execution_time_ms=execution_time_ms,
        )

    async def _record_migration(
        self,
        script: MigrationScript,
        plugin_name: str,
        execution_time_ms: int
    ) -> None:
        """
        Insert a history row for a successfully applied step.

        Raises:
            MigrationError: On database insert failure
        """
        try:
            async with self.database._get_session() as session:
                session.add(MigrationHistory(
                    version=script.version(),
                    name=script.name(),
                    plugin_name=plugin_name,
                    applied_at=datetime.now(timezone.utc),
                    applied_by=self.applied_by,
                    execution_time_ms=execution_time_ms,
                ))
        except SQLAlchemyError as e:
            self.logger.error(
                'Failed to record migration v%d: %s',
                script.version(),
                e
            )
            raise MigrationError(
                f"Migration v{script.version()} applied but could not be recorded: {e}",
                version=script.version()
            ) from e

    async def status(self) -> dict[str, Any]:
        """
        Summarize migration state.

        Returns:
            Dictionary with current_version, latest_version, applied_count,
            pending_count and pending (list of {version, name, plugin})
        """
        applied = await self.get_applied_migrations()
        pending = self.registry.get_pending(a.version for a in applied)

        return {
            'current_version': max((a.version for a in applied), default=0),
            'latest_version': self.registry.latest_version,
            'applied_count': len(applied),
            'pending_count': len(pending),
            'pending': [
                {
                    'version': s.version(),
                    'name': s.name(),
                    'plugin': self.registry.plugin_of(s.version()),
                }
                for s in pending
            ],
        }
