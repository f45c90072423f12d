"""Pytest configuration and shared fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from alchemist.domain.models import Base


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def clean_rows():
    """A small dataset that produces no findings."""
    clients = [
        {"ClientID": "C1", "ClientName": "Acme", "PriorityLevel": 3, "RequestedTaskIDs": "T1", "AttributesJSON": '{"tier": "gold"}'},
    ]
    workers = [
        {"WorkerID": "W1", "WorkerName": "Ana", "Skills": "python", "AvailableSlots": "[1,2]",
         "MaxLoadPerPhase": 2, "WorkerGroup": "core", "QualificationLevel": "senior"},
    ]
    tasks = [
        {"TaskID": "T1", "TaskName": "Build", "Duration": 1, "RequiredSkills": "python",
         "PreferredPhases": "[1]", "MaxConcurrent": 1},
    ]
    return clients, workers, tasks
