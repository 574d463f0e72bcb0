#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SQLAlchemy ORM Models for lakeport
===================================

Defines the shared declarative base and the framework-owned tables
using SQLAlchemy 2.0 ORM with type hints.

- Base: Declarative base shared by framework and plugin models
- MigrationHistory: One row per applied migration step

Plugin tool tables (e.g. Bitbucket reviewers) declare their own models
on the same Base, but are created by versioned migration steps rather
than Base.metadata.create_all().

Usage:
    from lakecore.models import Base, MigrationHistory

    async with AsyncSession(engine) as session:
        result = await session.execute(
            select(func.max(MigrationHistory.version))
        )
        watermark = result.scalar() or 0
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, func
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# ============================================================================
# Base Class
# ============================================================================

class Base(AsyncAttrs, DeclarativeBase):
    """
    Base class for all ORM models.

    Attributes:
        AsyncAttrs: Enables async attribute loading (SQLAlchemy 2.0)
        DeclarativeBase: Base for declarative model definitions

    Usage:
        class MyModel(Base):
            __tablename__ = 'my_table'
            id: Mapped[int] = mapped_column(Integer, primary_key=True)
    """
    pass


# ============================================================================
# Migration History
# ============================================================================

class MigrationHistory(Base):
    """
    Records every migration step applied to this database.

    The highest version in this table is the watermark: steps at or
    below it have already run. Versions are globally unique across
    plugins, so the version alone is the primary key.
    """
    __tablename__ = '_lake_migration_history'

    version: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
        comment="Migration step version (e.g., 20251218000001)"
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Human-readable description of the step"
    )

    plugin_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Plugin that owns the step (e.g., 'bitbucket')"
    )

    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="When the step was applied"
    )

    applied_by: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default='system',
        comment="User or system that ran the migration"
    )

    execution_time_ms: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="Time taken to apply the step in milliseconds"
    )

    __table_args__ = (
        Index('idx_lake_migration_history_plugin', 'plugin_name'),
        {'comment': 'Applied schema migration steps'}
    )

    def __repr__(self) -> str:
        return f"<MigrationHistory(v{self.version}, {self.plugin_name}: {self.name})>"


__all__ = [
    'Base',
    'MigrationHistory',
]
