import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="wordcraft-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'wordcraft.db')}"
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["SUPABASE_URL"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from database import SessionLocal, create_tables, engine
from gemini_client import get_gemini_client
from helpers import FakeGemini


@pytest.fixture(autouse=True)
def clean_tables():
    create_tables()
    yield
    with engine.begin() as conn:
        for table in ("leaderboard", "leaderboard_state", "games", "users", "waitlist"):
            conn.execute(text(f"DELETE FROM {table}"))


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_gemini():
    return FakeGemini()


@pytest.fixture
def client(fake_gemini):
    from app import app

    app.dependency_overrides[get_gemini_client] = lambda: fake_gemini
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
