"""Custom field ORM models."""

import uuid

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from .base import Base, created_at_column, updated_at_column


class CustomField(Base):
    """User-defined field, global or scoped to a project."""
    __tablename__ = 'custom_fields'

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=True)
    name = Column(String, nullable=False)
    field_type = Column(String, nullable=False, server_default='text')
    # JSON-encoded option list for select fields
    options = Column(Text, nullable=True)
    is_required = Column(Integer, nullable=False, server_default='0')
    sort_order = Column(Integer, nullable=False, server_default='0')
    created_at = created_at_column()
    updated_at = updated_at_column()


class CustomFieldValue(Base):
    """Value of a custom field on one task."""
    __tablename__ = 'custom_field_values'

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(Integer, ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False)
    custom_field_id = Column(String, ForeignKey('custom_fields.id', ondelete='CASCADE'), nullable=False)
    value = Column(Text, nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()
