#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Declarative Table Descriptions
==============================

Explicit, reflection-free description of a tool table: name, ordered
column list and composite primary key. Migration steps hold a frozen
TableSchema and hand it to auto_migrate_tables(), which turns it into
CREATE TABLE / ALTER TABLE statements.

Usage:
    from lakecore.schema import ColumnSpec, TableSchema, audit_columns

    schema = TableSchema(
        name='_tool_example_items',
        columns=[
            ColumnSpec('connection_id', 'unsigned_bigint', primary_key=True),
            ColumnSpec('item_id', 'string', length=255, primary_key=True),
            ColumnSpec('title', 'string', length=255),
            *audit_columns(),
        ],
    )
    table = schema.to_table(MetaData())
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects import mysql

COLUMN_NAME_PATTERN = re.compile(r'^[a-z_][a-z0-9_]{0,63}$')
TABLE_NAME_PATTERN = re.compile(r'^[a-z_][a-z0-9_]{0,99}$')

VALID_TYPES = (
    'unsigned_bigint',
    'bigint',
    'integer',
    'string',
    'text',
    'boolean',
    'float',
    'datetime',
)


def _sql_type(type_name: str, length: Optional[int]):
    """Map a column type name to a SQLAlchemy type instance."""
    if type_name == 'unsigned_bigint':
        return BigInteger().with_variant(mysql.BIGINT(unsigned=True), 'mysql')
    if type_name == 'bigint':
        return BigInteger()
    if type_name == 'integer':
        return Integer()
    if type_name == 'string':
        return String(length)
    if type_name == 'text':
        return Text()
    if type_name == 'boolean':
        return Boolean()
    if type_name == 'float':
        return Float()
    if type_name == 'datetime':
        return DateTime(timezone=True)
    raise ValueError(f"Unknown column type '{type_name}'")


@dataclass(frozen=True)
class ColumnSpec:
    """
    One column of a declared table.

    Attributes:
        name: Column name (lowercase, digits, underscores)
        type: One of VALID_TYPES
        length: Maximum length, required for 'string'
        nullable: Whether NULL is allowed; defaults to False for key
            columns and True otherwise. Key columns may not be nullable.
        primary_key: Whether the column is part of the primary key
        server_default: Raw SQL default expression (e.g. 'CURRENT_TIMESTAMP')
        comment: Column comment

    Example:
        >>> ColumnSpec('repo_id', 'string', length=255, primary_key=True)
        ColumnSpec(name='repo_id', type='string', length=255, nullable=False, ...)
    """

    name: str
    type: str
    length: Optional[int] = None
    nullable: Optional[bool] = None
    primary_key: bool = False
    server_default: Optional[str] = None
    comment: Optional[str] = None

    def __post_init__(self):
        """Validate the column after initialization."""
        if not isinstance(self.name, str) or not COLUMN_NAME_PATTERN.match(self.name):
            raise ValueError(
                f"Column name '{self.name}' invalid. Must start with lowercase letter "
                f"or underscore, contain only lowercase letters, numbers, underscores, "
                f"max 64 chars"
            )

        if self.type not in VALID_TYPES:
            raise ValueError(
                f"Column '{self.name}' has invalid type '{self.type}'. "
                f"Valid types: {', '.join(VALID_TYPES)}"
            )

        if self.type == 'string' and (not self.length or self.length <= 0):
            raise ValueError(f"String column '{self.name}' needs a positive length")

        if self.nullable is None:
            object.__setattr__(self, 'nullable', not self.primary_key)
        elif self.primary_key and self.nullable:
            raise ValueError(
                f"Primary key column '{self.name}' cannot be nullable"
            )

    def to_column(self) -> Column:
        """
        Build a fresh SQLAlchemy Column for this spec.

        A new object is returned on every call since a Column can only be
        attached to one Table.
        """
        kwargs = {
            'nullable': self.nullable,
            'comment': self.comment,
        }
        if self.primary_key:
            kwargs['autoincrement'] = False
        if self.server_default is not None:
            kwargs['server_default'] = text(self.server_default)

        return Column(self.name, _sql_type(self.type, self.length), **kwargs)


def audit_columns() -> list[ColumnSpec]:
    """
    Shared created_at/updated_at pair carried by every tool table.

    Both are NOT NULL and default to the current timestamp on the server,
    so writers may omit them. Adding them to an existing table works on
    other backends; SQLite refuses a CURRENT_TIMESTAMP default in ALTER
    TABLE once the table holds rows (older releases refuse it always).
    """
    return [
        ColumnSpec(
            'created_at', 'datetime',
            nullable=False,
            server_default='CURRENT_TIMESTAMP',
            comment='Row creation time',
        ),
        ColumnSpec(
            'updated_at', 'datetime',
            nullable=False,
            server_default='CURRENT_TIMESTAMP',
            comment='Row last update time',
        ),
    ]


@dataclass(frozen=True)
class TableSchema:
    """
    Desired shape of one table.

    Attributes:
        name: Table name
        columns: Ordered column specs; the primary key is every column
            flagged primary_key, in declaration order
        comment: Table comment
    """

    name: str
    columns: list[ColumnSpec] = field(default_factory=list)
    comment: Optional[str] = None

    def __post_init__(self):
        """Validate table name, columns and primary key."""
        if not isinstance(self.name, str) or not TABLE_NAME_PATTERN.match(self.name):
            raise ValueError(
                f"Table name '{self.name}' invalid. Must start with lowercase letter "
                f"or underscore, contain only lowercase letters, numbers, underscores, "
                f"max 100 chars"
            )

        if not self.columns:
            raise ValueError(f"Table '{self.name}' must have at least one column")

        seen = set()
        for column in self.columns:
            if not isinstance(column, ColumnSpec):
                raise ValueError(
                    f"Table '{self.name}' columns must be ColumnSpec, "
                    f"got {type(column).__name__}"
                )
            if column.name in seen:
                raise ValueError(f"Duplicate column name: {column.name}")
            seen.add(column.name)

        if not self.primary_key:
            raise ValueError(f"Table '{self.name}' must declare a primary key")

        object.__setattr__(self, 'columns', list(self.columns))

    @property
    def primary_key(self) -> tuple[str, ...]:
        """Names of the primary key columns, in declaration order."""
        return tuple(c.name for c in self.columns if c.primary_key)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> ColumnSpec:
        """
        Look up a column spec by name.

        Raises:
            KeyError: If the table has no such column
        """
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(f"Table '{self.name}' has no column '{name}'")

    def build_column(self, name: str) -> Column:
        """Build a fresh SQLAlchemy Column for one declared column."""
        return self.get_column(name).to_column()

    def to_table(self, metadata: MetaData) -> Table:
        """
        Build a SQLAlchemy Table bound to the given metadata.

        The composite key is declared as a named PrimaryKeyConstraint so
        no surrogate id column is involved.
        """
        columns = [spec.to_column() for spec in self.columns]

        return Table(
            self.name,
            metadata,
            *columns,
            PrimaryKeyConstraint(*self.primary_key, name=f'pk_{self.name.strip("_")}'),
            comment=self.comment,
        )
