import json
from unittest.mock import Mock

import pytest

from api.generate import app as generate_app
from api.index import app as index_app


ENV_VARS = [
    "GEMINI_API_KEY",
    "GOOGLE_GENERATIVE_AI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_ENDPOINT",
    "UPSTREAM_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test from an environment with no upstream settings."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return "test-key"


@pytest.fixture
def client():
    generate_app.config["TESTING"] = True
    return generate_app.test_client()


@pytest.fixture
def page_client():
    index_app.config["TESTING"] = True
    return index_app.test_client()


def make_response(status_code=200, payload=None, text=None):
    """Build a requests.Response-like mock for a patched requests.post."""
    resp = Mock()
    resp.status_code = status_code
    if payload is not None:
        resp.json.return_value = payload
        resp.text = json.dumps(payload)
    else:
        resp.json.side_effect = ValueError("no json")
        resp.text = text or ""
    return resp


def model_reply(text):
    """An upstream reply carrying text in the first recognised shape."""
    return {"output": [{"content": text}]}
