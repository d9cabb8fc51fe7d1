"""Person ORM model."""

import uuid

from sqlalchemy import Column, ForeignKey, Integer, String

from .base import Base, created_at_column, updated_at_column


class Person(Base):
    """A person who can be assigned to projects and tasks."""
    __tablename__ = 'people'

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    company = Column(String, nullable=True)
    designation = Column(String, nullable=True)
    project_id = Column(Integer, ForeignKey('projects.id', ondelete='CASCADE'), nullable=True)
    created_at = created_at_column()
    updated_at = updated_at_column()
