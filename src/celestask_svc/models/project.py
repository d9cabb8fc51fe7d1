"""Project ORM models.

Projects are the root of the dependency graph: almost every other table
references them directly or through tasks.
"""

import uuid

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text

from .base import Base, created_at_column, updated_at_column


class Project(Base):
    """A project grouping tasks, optionally nested under a parent project."""
    __tablename__ = 'projects'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String, nullable=False, server_default='#3B82F6')
    parent_id = Column(Integer, ForeignKey('projects.id', ondelete='SET NULL'), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()


class ProjectAssignee(Base):
    """Membership of a person in a project."""
    __tablename__ = 'project_assignees'

    __table_args__ = (
        Index('idx_project_assignees_project', 'project_id'),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    person_id = Column(String, ForeignKey('people.id', ondelete='CASCADE'), nullable=False)
    role = Column(String, nullable=False, server_default='member')
    created_at = created_at_column()
