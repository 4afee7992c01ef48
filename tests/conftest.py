"""Shared fixtures: SQLite database, fake collaborators and signed-in HTTP clients."""

import os
import tempfile
from pathlib import Path

# Configuration is read at import time; set it before any app module loads.
_TMP_DIR = tempfile.mkdtemp(prefix="delight-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TMP_DIR) / 'test.db'}"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ.setdefault("OPENAI_API_KEY", "")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from db import Base, SessionLocal, engine  # noqa: E402
from helpers import FakeTextService, InMemoryPromptStore  # noqa: E402
from services.prompt_store import CHOICE_GENERATOR_ID, SqlPromptTemplateStore, seed_default_prompts  # noqa: E402
from services.wizard_service import WizardService, get_wizard_service  # noqa: E402
from services.wizard_sessions import WizardSessionStore  # noqa: E402
from session_auth import SESSION_COOKIE, _serializer  # noqa: E402

USER_EMAIL = "user@example.com"
ADMIN_EMAIL = "admin@example.com"


@pytest.fixture
def fake_text():
    return FakeTextService()


@pytest.fixture
def memory_store():
    return InMemoryPromptStore(
        {CHOICE_GENERATOR_ID: "選択履歴:\n{history}\n({step}/{max_steps})"}
    )


@pytest.fixture
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_default_prompts(db)
    finally:
        db.close()
    yield SessionLocal


@pytest.fixture
def sql_store(fresh_db):
    return SqlPromptTemplateStore(fresh_db)


@pytest.fixture
def wizard_service(sql_store, fake_text):
    return WizardService(
        prompt_store=sql_store,
        text_service=fake_text,
        sessions=WizardSessionStore(),
        model_name="test-model",
        max_steps=3,
    )


@pytest.fixture
def app(wizard_service):
    from main import app as fastapi_app

    fastapi_app.dependency_overrides[get_wizard_service] = lambda: wizard_service
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


def _client_for(app, email=None) -> TestClient:
    client = TestClient(app)
    if email:
        client.cookies.set(SESSION_COOKIE, _serializer().dumps({"email": email}))
    return client


@pytest.fixture
def anon_client(app):
    with _client_for(app) as client:
        yield client


@pytest.fixture
def user_client(app):
    with _client_for(app, USER_EMAIL) as client:
        yield client


@pytest.fixture
def admin_client(app):
    with _client_for(app, ADMIN_EMAIL) as client:
        yield client
