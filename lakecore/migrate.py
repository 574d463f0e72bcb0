#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Apply pending plugin schema migrations.

Usage:
    lakeport-migrate
    lakeport-migrate --config lake.yaml
    lakeport-migrate --database-url sqlite+aiosqlite:///lake.db --status
"""
import argparse
import asyncio
import importlib
import json
import logging
import sys

import yaml

from lakecore.config import (
    configure_logger,
    load_config,
    parse_log_level,
    resolve_database_url,
)
from lakecore.database import LakeDatabase
from lakecore.errors import StorageError
from lakecore.migrations import MigrationRegistry, MigrationRunner

logger = logging.getLogger(__name__)


def build_registry(plugin_modules) -> MigrationRegistry:
    """Import each plugin package and register its migration steps.

    Args:
        plugin_modules: Dotted module paths (e.g. ['plugins.bitbucket'])

    Returns:
        Registry holding every plugin's steps

    Raises:
        ImportError: If a plugin module cannot be imported
        ValueError: If a plugin lacks PLUGIN_NAME/migration_scripts or
            two steps share a version
    """
    registry = MigrationRegistry()

    for module_path in plugin_modules:
        module = importlib.import_module(module_path)
        plugin_name = getattr(module, 'PLUGIN_NAME', None)
        scripts_fn = getattr(module, 'migration_scripts', None)
        if not plugin_name or not callable(scripts_fn):
            raise ValueError(
                f"Plugin module {module_path} must define PLUGIN_NAME "
                f"and migration_scripts()"
            )
        registry.register(plugin_name, scripts_fn())

    return registry


async def run_migrations(database_url, registry, applied_by='system', status_only=False):
    """Run (or report) migrations against one database.

    Args:
        database_url: Database URL or SQLite file path
        registry: MigrationRegistry built by build_registry()

    Returns:
        Status dict when status_only, otherwise the list of applied
        MigrationResult objects
    """
    db = LakeDatabase(database_url)
    try:
        await db.connect()
        runner = MigrationRunner(db, registry, applied_by=applied_by)
        if status_only:
            return await runner.status()
        return await runner.run()
    finally:
        await db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Apply pending plugin schema migrations'
    )
    parser.add_argument('--config', help='Path to config file (JSON or YAML)')
    parser.add_argument('--database-url', help='Database URL or SQLite file path')
    parser.add_argument('--status', action='store_true',
                        help='Show migration status without applying anything')
    args = parser.parse_args(argv)

    try:
        conf = load_config(args.config)
        log_level = parse_log_level(conf.get('log_level', 'info'))
    except (ValueError, yaml.YAMLError) as e:
        print(f"✗ Invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logger(
        logging.getLogger(),
        log_file=conf.get('log_file'),
        log_level=log_level
    )

    try:
        registry = build_registry(conf.get('plugins') or [])
    except (ImportError, ValueError) as e:
        print(f"✗ Cannot load plugins: {e}", file=sys.stderr)
        return 1

    database_url = resolve_database_url(conf, args.database_url)

    try:
        result = asyncio.run(run_migrations(
            database_url,
            registry,
            applied_by=conf.get('applied_by', 'system'),
            status_only=args.status
        ))
    except StorageError as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        return 1

    if args.status:
        print(json.dumps(result, indent=2))
    elif result:
        print(f"✓ Applied {len(result)} migration(s):")
        for r in result:
            print(f"  - v{r.version} [{r.plugin_name}] {r.name} ({r.execution_time_ms}ms)")
    else:
        print("✓ No new migrations to apply (already up-to-date)")

    return 0


if __name__ == '__main__':
    sys.exit(main())
