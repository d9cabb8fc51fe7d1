"""Pytest configuration and fixtures for testing.

This module provides shared fixtures for database testing using in-memory SQLite
for fast and isolated test execution. Engines are built with the service's own
factory so foreign keys and savepoints behave as they do in production.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from celestask_svc.models.base import Base
from celestask_svc.models import Project, Person, Tag, Task, TaskTag
from celestask_svc.api.app import app
from celestask_svc.database import create_engine_and_session_factory, get_db
import celestask_svc.database


@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite engine with every table created.

    Yields:
        SQLAlchemy Engine instance configured for in-memory SQLite.
    """
    engine, _ = create_engine_and_session_factory("sqlite:///:memory:")

    Base.metadata.create_all(bind=engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for testing.

    Yields:
        SQLAlchemy Session instance for database operations.
    """
    SessionLocal = sessionmaker(
        bind=db_engine,
        autoflush=False,
        expire_on_commit=False
    )

    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def seeded_session(db_session: Session):
    """Session over a small but complete project graph.

    Two projects, two tasks in the first project, one person, one tag and a
    tag link, all committed.
    """
    db_session.add_all([
        Project(id=1, name="Website"),
        Project(id=2, name="Mobile app", color="#10B981"),
    ])
    db_session.add(Person(id="person-1", name="Ada", email="ada@example.com"))
    db_session.add(Tag(id="tag-1", name="urgent"))
    db_session.flush()
    db_session.add_all([
        Task(id=10, project_id=1, title="Design landing page"),
        Task(id=11, project_id=1, title="Write copy", status="in_progress"),
    ])
    db_session.flush()
    db_session.add(TaskTag(id="task-tag-1", task_id=10, tag_id="tag-1"))
    db_session.commit()
    return db_session


@pytest.fixture(scope="function")
def client(db_session):
    """Create a FastAPI test client with database dependency override.

    Args:
        db_session: Database session fixture for dependency injection.

    Yields:
        TestClient instance configured with test database session.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def clean_db_state():
    """Reset the module-level database state before and after a test."""
    celestask_svc.database._reset_db_state()

    yield

    celestask_svc.database._reset_db_state()
