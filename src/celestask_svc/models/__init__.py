"""SQLAlchemy ORM models for the celestask_svc application.

This package contains all database models and the base declarative class.
"""

from .base import Base
from .project import Project, ProjectAssignee
from .person import Person
from .tag import Tag, TaskTag
from .task import Task, TaskAssignee
from .note import Note
from .custom_field import CustomField, CustomFieldValue
from .saved_view import SavedView

__all__ = [
    "Base",
    "Project",
    "ProjectAssignee",
    "Person",
    "Tag",
    "TaskTag",
    "Task",
    "TaskAssignee",
    "Note",
    "CustomField",
    "CustomFieldValue",
    "SavedView",
]
