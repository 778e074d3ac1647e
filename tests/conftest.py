from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ANALYZE_RATE_LIMIT", "1000/minute")

from app import analysis  # noqa: E402
from app.main import app, limiter  # noqa: E402

limiter.enabled = False

RECEIPT_JSON = '{"date":"2023-01-01","name":"Shop","currency":"$","amount":"10"}'


class FakeVisionModel:
    """Stands in for ChatGoogleGenerativeAI; records what it was sent."""

    def __init__(self, text: str = RECEIPT_JSON, exc: Exception | None = None):
        self.text = text
        self.exc = exc
        self.api_keys: list[str] = []
        self.messages: list = []

    def __call__(self, api_key: str) -> "FakeVisionModel":
        self.api_keys.append(api_key)
        return self

    async def ainvoke(self, messages):
        self.messages.append(messages)
        if self.exc is not None:
            raise self.exc
        return AIMessage(content=self.text)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "VISION_MODEL",
        "VISION_TIMEOUT",
        "MAX_IMAGE_BYTES",
        "STRICT_RECEIPT_SCHEMA",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_model(monkeypatch):
    model = FakeVisionModel()
    monkeypatch.setattr(analysis, "_get_model", model)
    return model


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c
