import pytest
from fastapi.testclient import TestClient

from assessor.api import app, limiter, settings
from assessor.config import ConfigStore
from assessor.dependencies import get_config_store
from assessor.models import AssessmentRequest, Candidate

# Disable rate limiting for all tests
limiter.enabled = False


@pytest.fixture
def store():
    original_key = settings.OPENAI_API_KEY
    settings.OPENAI_API_KEY = ""
    store = ConfigStore(settings)
    app.dependency_overrides[get_config_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_config_store, None)
    settings.OPENAI_API_KEY = original_key


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def assessment():
    return AssessmentRequest(
        role_name="Backend Engineer",
        seniority_level="senior",
        description="Build a small REST API for a todo list.",
    )


@pytest.fixture
def candidates():
    return [
        Candidate(id="1", name="Ada", github_repo="https://github.com/ada/todo-api"),
        Candidate(id="2", name="Linus", github_repo="https://github.com/linus/todo-api"),
    ]


@pytest.fixture
def base_payload():
    return {
        "candidates": [
            {"id": "1", "name": "Ada", "github_repo": "https://github.com/ada/todo-api"},
            {"id": "2", "name": "Linus", "github_repo": "https://github.com/linus/todo-api"},
        ],
        "assessment": {
            "role_name": "Backend Engineer",
            "seniority_level": "senior",
            "description": "Build a small REST API for a todo list.",
        },
    }
