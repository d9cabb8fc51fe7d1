"""Saved view ORM model."""

import uuid

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from .base import Base, created_at_column, updated_at_column


class SavedView(Base):
    """A named combination of view type, filters and sort order."""
    __tablename__ = 'saved_views'

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=True)
    name = Column(String, nullable=False)
    view_type = Column(String, nullable=False)
    # JSON-encoded filter definition
    filters = Column(Text, nullable=True)
    sort_by = Column(String, nullable=True)
    sort_order = Column(String, nullable=True)
    is_default = Column(Integer, nullable=False, server_default='0')
    created_at = created_at_column()
    updated_at = updated_at_column()
