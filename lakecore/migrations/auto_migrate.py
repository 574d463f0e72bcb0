#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Create-if-absent / add-missing-columns helper for tool tables.

auto_migrate_tables() reconciles live tables with TableSchema
descriptions:

- missing table      -> CREATE TABLE with the composite primary key
- missing columns    -> ALTER TABLE ... ADD COLUMN (via alembic operations)
- extra live columns -> left alone (never destructive)
- different primary key or incompatible column type -> SchemaError

Each table is reconciled in its own transaction, so a failure leaves
that table untouched.
"""
import logging

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import MetaData, inspect
from sqlalchemy.exc import SQLAlchemyError

from lakecore.errors import SchemaError
from lakecore.schema import TableSchema

logger = logging.getLogger(__name__)

# Booleans are stored as small integers on MySQL
_AFFINITY_ALIASES = {bool: int}


def _type_affinity(sql_type):
    """
    Coarse Python-level family of a SQLAlchemy type.

    Returns None when the type has no known Python equivalent (for
    example reflected types the dialect does not recognize), which
    disables the comparison for that column.
    """
    try:
        python_type = sql_type.python_type
    except NotImplementedError:
        return None
    return _AFFINITY_ALIASES.get(python_type, python_type)


def _check_compatible(schema: TableSchema, live_columns: dict, live_pk: tuple) -> None:
    """
    Raise SchemaError if the live table cannot be reconciled.

    Args:
        schema: Declared table shape
        live_columns: Reflected columns keyed by name
        live_pk: Reflected primary key column names
    """
    if set(live_pk) != set(schema.primary_key):
        raise SchemaError(
            f"Table {schema.name} has primary key ({', '.join(live_pk)}), "
            f"expected ({', '.join(schema.primary_key)})",
            table_name=schema.name
        )

    for spec in schema.columns:
        live = live_columns.get(spec.name)
        if live is None:
            continue

        declared = _type_affinity(spec.to_column().type)
        existing = _type_affinity(live['type'])
        if declared is not None and existing is not None and declared is not existing:
            raise SchemaError(
                f"Column {schema.name}.{spec.name} is {live['type']}, "
                f"declared as {spec.type}",
                table_name=schema.name
            )

    for spec in schema.columns:
        if spec.name in live_columns:
            continue
        if spec.primary_key:
            raise SchemaError(
                f"Cannot add primary key column {spec.name} to existing "
                f"table {schema.name}",
                table_name=schema.name
            )
        if not spec.nullable and spec.server_default is None:
            raise SchemaError(
                f"Cannot add NOT NULL column {spec.name} without a default "
                f"to existing table {schema.name}",
                table_name=schema.name
            )


def _reconcile_table(sync_conn, schema: TableSchema) -> bool:
    """
    Bring one table in line with its schema (runs inside run_sync).

    Returns:
        True if the table was created or altered, False if unchanged
    """
    inspector = inspect(sync_conn)

    if not inspector.has_table(schema.name):
        metadata = MetaData()
        table = schema.to_table(metadata)
        metadata.create_all(sync_conn, tables=[table])
        logger.info(
            f"Created table {schema.name} "
            f"(primary key: {', '.join(schema.primary_key)})"
        )
        return True

    live_columns = {c['name']: c for c in inspector.get_columns(schema.name)}
    live_pk = tuple(
        inspector.get_pk_constraint(schema.name).get('constrained_columns') or ()
    )

    _check_compatible(schema, live_columns, live_pk)

    missing = [name for name in schema.column_names if name not in live_columns]
    if not missing:
        logger.debug(f"Table {schema.name} already up to date")
        return False

    operations = Operations(MigrationContext.configure(sync_conn))
    for name in missing:
        operations.add_column(schema.name, schema.build_column(name))
        logger.info(f"Added column {schema.name}.{name}")

    return True


async def auto_migrate_tables(db, *schemas: TableSchema) -> list[str]:
    """
    Create or extend tables so they match their declared schemas.

    Safe to call repeatedly: tables already in the desired shape are
    left untouched.

    Args:
        db: LakeDatabase handle
        *schemas: Table descriptions to reconcile, in order

    Returns:
        Names of tables that were created or altered

    Raises:
        SchemaError: If DDL fails or a live table conflicts with its schema

    Example:
        changed = await auto_migrate_tables(db, REVIEWERS_SCHEMA)
    """
    changed = []

    for schema in schemas:
        try:
            async with db.engine.begin() as conn:
                if await conn.run_sync(_reconcile_table, schema):
                    changed.append(schema.name)
        except SchemaError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to migrate table {schema.name}: {e}")
            raise SchemaError(
                f"Failed to migrate table {schema.name}: {e}",
                table_name=schema.name
            ) from e

    return changed
