import os

# Keep the app's own engine off disk; tests use test_engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from fixture_scheduler.database import get_session  # noqa: E402
from fixture_scheduler.main import app  # noqa: E402
from fixture_scheduler.services.fixture_schedule import initialize_schedule  # noqa: E402
from tests.schedule_factory import build_full_schedule, make_participants  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables are created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a freshly created schema"""
    # Import all models to ensure they're registered BEFORE create_all
    from fixture_scheduler.models.fixture import Fixture  # noqa: F401
    from fixture_scheduler.models.stadium import Stadium  # noqa: F401
    from fixture_scheduler.models.team import Team  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place
    for the entire duration. This ensures the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def participants():
    return make_participants()


@pytest.fixture
def empty_schedule(participants):
    return initialize_schedule(participants, season=2026)


@pytest.fixture
def full_schedule(participants):
    """Complete, valid 5-round schedule"""
    return build_full_schedule(participants, season=2026)
