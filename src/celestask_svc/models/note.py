"""Note ORM model."""

import uuid

from sqlalchemy import Column, Index, String, Text

from .base import Base, created_at_column, updated_at_column


class Note(Base):
    """Free-form note attached to a project, task or person.

    The target is polymorphic (``entity_type`` + ``entity_id``), so there is
    no foreign key and notes can be imported in any position.
    """
    __tablename__ = 'notes'

    __table_args__ = (
        Index('idx_notes_entity', 'entity_type', 'entity_id'),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    content = Column(Text, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=False)
    created_at = created_at_column()
    updated_at = updated_at_column()
