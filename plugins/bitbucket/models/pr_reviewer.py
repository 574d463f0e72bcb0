#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bitbucket pull request reviewer model.

One row per reviewer per pull request per connection. Rows are written
by the reviewer collector each time it observes review state; the table
itself is created by migration v20251218000001.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, func
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column

from lakecore.models import Base


class BitbucketPrReviewer(Base):
    """
    Review status of one Bitbucket account on one pull request.

    Composite primary key: (connection_id, repo_id, pull_request_id,
    reviewer_account). There is no role in the key, so a reviewer who
    is both REVIEWER and PARTICIPANT keeps a single row holding the
    last role seen.
    """
    __tablename__ = '_tool_bitbucket_pull_request_reviewers'

    # Composite primary key
    connection_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(mysql.BIGINT(unsigned=True), 'mysql'),
        primary_key=True,
        autoincrement=False,
    )

    repo_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Repository full name (e.g., 'myorg/myrepo')"
    )

    pull_request_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
    )

    reviewer_account: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Bitbucket account id of the reviewer"
    )

    # Review details
    reviewer_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Display name at collection time"
    )

    role: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="REVIEWER or PARTICIPANT"
    )

    approved: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    state: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="approved, changes_requested, ..."
    )

    participated_on: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the reviewer last acted (NULL until then)"
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return (
            f"<BitbucketPrReviewer(repo='{self.repo_id}', pr={self.pull_request_id}, "
            f"account='{self.reviewer_account}', state='{self.state}')>"
        )
