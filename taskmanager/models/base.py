"""
Base configurations and mixins for database models.

Every model derives from ``Base`` and picks the mixins it needs so that
primary keys and timestamps behave the same across tables.
"""

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.functions import now as db_now

Base = declarative_base()


class TimestampMixin:
    """
    Adds ``created_at`` and ``updated_at`` columns maintained by the database.
    """

    created_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        nullable=False,
        comment="Timestamp when the record was created",
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=db_now(),
        onupdate=db_now(),
        nullable=False,
        comment="Timestamp when the record was last updated",
    )


class IntegerIdMixin:
    """
    Adds an auto-incrementing integer primary key assigned by the database.
    """

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        index=True,
        comment="Primary key assigned by the store",
    )


__all__ = ["Base", "TimestampMixin", "IntegerIdMixin"]
