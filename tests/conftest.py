"""
Test configuration: repo root on sys.path and an in-memory SQLite store.

DATABASE_URL must be set before hotel_ledger.database is imported.
"""

import os
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("LEDGER_EXPENSE_CURRENCY", None)

from fastapi.testclient import TestClient  # noqa: E402

from hotel_ledger.database import Base, SessionLocal, engine  # noqa: E402
from hotel_ledger.main import app  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_tables():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)
