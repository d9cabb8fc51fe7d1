"""Task ORM models.

Tasks belong to exactly one project and may be nested under a parent task.
Assignment of people to tasks lives in ``task_assignees``.
"""

import uuid

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Text

from .base import Base, created_at_column, updated_at_column


class Task(Base):
    """A unit of work inside a project."""
    __tablename__ = 'tasks'

    __table_args__ = (
        Index('idx_tasks_project', 'project_id'),
        Index('idx_tasks_status', 'status'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=False)
    parent_task_id = Column(Integer, ForeignKey('tasks.id', ondelete='SET NULL'), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, server_default='todo')
    priority = Column(String, nullable=False, server_default='medium')
    due_date = Column(Date, nullable=True)
    start_date = Column(Date, nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()


class TaskAssignee(Base):
    """Assignment of a person to a task."""
    __tablename__ = 'task_assignees'

    __table_args__ = (
        Index('idx_task_assignees_task', 'task_id'),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(Integer, ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False)
    person_id = Column(String, ForeignKey('people.id', ondelete='CASCADE'), nullable=False)
    role = Column(String, nullable=False, server_default='collaborator')
    created_at = created_at_column()
