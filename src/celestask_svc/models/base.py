"""Base SQLAlchemy model for the celestask_svc application.

This module defines the DeclarativeBase that all ORM models inherit from,
plus the timestamp columns shared by every table.
"""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models.

    The import/export engine never goes through the ORM classes; it reads
    table and column names from the live store. The classes exist so the
    schema can be created and so tests can seed rows.
    """
    pass


def created_at_column() -> Column:
    """Creation timestamp filled by the store."""
    return Column(DateTime, nullable=False, server_default=func.now())


def updated_at_column() -> Column:
    """Modification timestamp filled by the store and bumped on ORM updates."""
    return Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
