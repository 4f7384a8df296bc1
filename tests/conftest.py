"""Shared pytest fixtures for the user API test suites."""

from collections.abc import Generator
import os
from pathlib import Path
import random
import sys

import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("USERAPI_DATABASE_URL", "sqlite://")
os.environ.setdefault("USERAPI_SEED_ON_STARTUP", "false")

SEEDED_USERS = 20


@pytest.fixture
def seeded_database() -> None:
    """Recreate the schema with the standard set of seeded users."""
    from app.db.base import engine
    from app.db.base import session_scope
    from app.db.models import Base
    from app.db.seed import seed_users

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        seed_users(session, SEEDED_USERS, rng=random.Random(20))


@pytest.fixture
def client(seeded_database: None) -> Generator[TestClient, None, None]:
    """Provide an API test client over a freshly seeded database."""
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
