from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import DatasetEntry


@pytest.fixture
def db_session():
    """Mock database session."""
    return Mock()


@pytest.fixture
def mock_env(monkeypatch):
    """Set test environment variables."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("DATASET_ADMIN_TOKEN", "admin-token")


@pytest.fixture
def sqlite_session():
    """Real session on an in-memory SQLite database with the dataset schema."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def make_entry(sqlite_session):
    """Insert a dataset entry directly."""

    def _make(category, key, response, **fields):
        now = datetime.now(timezone.utc)
        entry = DatasetEntry(
            category=category,
            key=key,
            response=response,
            is_active=fields.pop("is_active", True),
            usage_count=fields.pop("usage_count", 0),
            confidence=fields.pop("confidence", 1.0),
            priority=fields.pop("priority", 0),
            tags=fields.pop("tags", []),
            created_at=now,
            updated_at=now,
            **fields,
        )
        sqlite_session.add(entry)
        sqlite_session.commit()
        return entry

    return _make
