"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database. Tables are created fresh for
every test and dropped afterwards, so nothing leaks between tests. The LLM
client is forced to the context-only mock and the background scheduler is
never started: jobs stay pending and can be inspected or run by hand.
"""
import os

# Must be set before anything imports insightdesk.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LLM_PROVIDER"] = "mock"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ.pop("DEMO_USER_ID", None)

import pytest
from fastapi.testclient import TestClient

import insightdesk.models  # noqa: F401
from insightdesk.api.deps import create_access_token
from insightdesk.database import Base, SessionLocal, engine
from insightdesk.services.llm_client import reset_llm_client
from insightdesk.services.scheduler import scheduler

USER_ID = "user-123"
OTHER_USER_ID = "user-456"


@pytest.fixture(autouse=True)
def _fresh_state():
    """Empty schema, no pending jobs and a fresh LLM client for every test."""
    Base.metadata.create_all(bind=engine)
    scheduler.remove_all_jobs()
    reset_llm_client()
    yield
    scheduler.remove_all_jobs()
    reset_llm_client()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # Not used as a context manager: lifespan (scheduler start, seeding) stays off
    from main import app

    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {create_access_token(USER_ID)}"}


@pytest.fixture
def other_auth_headers():
    return {"Authorization": f"Bearer {create_access_token(OTHER_USER_ID)}"}
