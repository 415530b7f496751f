"""
Shared pytest configuration and fixtures.
"""

import copy
import json

from fastapi.testclient import TestClient
import pytest

from flowgraph.api.main import create_app
from flowgraph.auth.service import AuthService
from flowgraph.config.app_config import Settings
from flowgraph.store.records import RecordStore

TEST_SECRET = "test-jwt-secret-key"

SAMPLE_RECORDS = {
    "node.json": [
        {
            "_id": "n1",
            "name": "Welcome",
            "root": True,
            "global": False,
            "colour": "red",
            "priority": 1,
            "compositeId": "n1",
            "triggerId": "t1",
            "responses": ["r2", "r1"],
            "actions": ["a1"],
            "parents": [],
            "children": ["n1/n2", "n1/n3"],
            "createdAt": 1704067200000,
        },
        {
            "_id": "n2",
            "name": "Goodbye",
            "root": False,
            "global": False,
            "colour": "blue",
            "compositeId": "n1/n2",
            "triggerId": "t-missing",
            "responses": [],
            "actions": ["a2", "a-missing"],
            "parents": ["n1/n2"],
            "children": [],
        },
        {
            "_id": "n3",
            "name": "Help",
            "root": False,
            "global": True,
            "compositeId": "n1/n3",
            "responses": ["r3"],
            "actions": [],
            "parents": ["n1/n3"],
            "children": [],
        },
    ],
    "trigger.json": [
        {"_id": "t1", "name": "Start", "functionString": "return true;", "resourceTemplateId": "rt1"},
        {"_id": "t2", "name": "Restart", "resourceTemplateId": "rt-missing"},
    ],
    "action.json": [
        {"_id": "a1", "name": "Log Session", "resourceTemplateId": "rt1"},
        {"_id": "a2", "name": "Save Name", "resourceTemplateId": "rt2"},
    ],
    "response.json": [
        {
            "_id": "r1",
            "name": "Hello",
            "platforms": [
                {
                    "integrationId": "web",
                    "build": 2,
                    "localeGroups": [
                        {
                            "localeGroupId": "en",
                            "variations": [{"name": "default", "responses": [{"text": "Hi"}]}],
                        }
                    ],
                }
            ],
        },
        {"_id": "r2", "name": "Bye", "platforms": []},
        {"_id": "r3", "name": "Help Text"},
    ],
    "resourceTemplate.json": [
        {"_id": "rt1", "name": "Webhook", "integrationId": "web", "key": "hook", "schema": {"type": "object"}},
        {"_id": "rt2", "name": "Intent", "integrationId": "nlu", "key": "intent"},
    ],
}


def write_data_dir(path, records):
    """Write collection files into a directory."""
    path.mkdir(parents=True, exist_ok=True)
    for filename, content in records.items():
        (path / filename).write_text(json.dumps(content), encoding="utf-8")
    return path


@pytest.fixture
def sample_records():
    """Fixture records keyed by file name."""
    return copy.deepcopy(SAMPLE_RECORDS)


@pytest.fixture
def data_dir(tmp_path, sample_records):
    """Temporary data directory holding the fixture records."""
    return write_data_dir(tmp_path / "data", sample_records)


@pytest.fixture
def record_store(data_dir) -> RecordStore:
    """Loaded record store over the fixture records."""
    store = RecordStore(data_dir)
    store.load_all()
    return store


@pytest.fixture
def settings(data_dir) -> Settings:
    """Application settings for testing."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATA_PATH=str(data_dir),
        JWT_SECRET_KEY=TEST_SECRET,
    )


@pytest.fixture
def auth_service(settings) -> AuthService:
    return AuthService.from_settings(settings)


@pytest.fixture
def app(settings, record_store, auth_service):
    """FastAPI application wired to the fixture store."""
    return create_app(settings=settings, store=record_store, auth_service=auth_service)


@pytest.fixture
def client(app) -> TestClient:
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def tokens(auth_service) -> dict[str, str]:
    """Signed tokens for each role."""
    return {
        role: auth_service.sign({"userId": f"{role}-1", "email": f"{role}@example.com", "role": role})
        for role in ("admin", "user", "guest")
    }


@pytest.fixture
def auth_headers(tokens) -> dict[str, dict[str, str]]:
    """Authorization headers for each role."""
    return {role: {"Authorization": f"Bearer {token}"} for role, token in tokens.items()}


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings after each test."""
    yield
    # Clear any cached settings
    from flowgraph.config import app_config

    app_config._settings = None
