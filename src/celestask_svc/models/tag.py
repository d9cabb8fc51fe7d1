"""Tag ORM models."""

import uuid

from sqlalchemy import Column, ForeignKey, Index, Integer, String

from .base import Base, created_at_column


class Tag(Base):
    """A label that can be attached to tasks, global or scoped to a project."""
    __tablename__ = 'tags'

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, server_default='#6B7280')
    project_id = Column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=True)
    created_at = created_at_column()


class TaskTag(Base):
    """Link between a task and a tag."""
    __tablename__ = 'task_tags'

    __table_args__ = (
        Index('idx_task_tags_task', 'task_id'),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(Integer, ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False)
    tag_id = Column(String, ForeignKey('tags.id', ondelete='CASCADE'), nullable=False)
    created_at = created_at_column()
