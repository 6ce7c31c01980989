"""Shared pytest fixtures.

Everything runs in-process: the language model is a mocked OpenAI client,
storage writes to ``tmp_path`` and audits go to an in-memory store.
"""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from pii_redaction.audit.memory_store import InMemoryAuditStore
from pii_redaction.detectors.llm_detector import LLMDetector
from pii_redaction.detectors.pattern_detector import PatternDetector
from pii_redaction.extractors.router import DocumentExtractor
from pii_redaction.pipeline import PIIRedactionService
from pii_redaction.redactors.text_redactor import TextRedactor
from pii_redaction.storage.file_storage import LocalFileStorage


def model_response(content) -> MagicMock:
    """Chat completion response whose first choice carries ``content``."""
    resp = MagicMock()
    resp.choices[0].message.content = content
    return resp


def entities_json(*entities: dict) -> str:
    return json.dumps({"entities": list(entities)})


def async_model_client(content=None, side_effect=None) -> MagicMock:
    """Async OpenAI-like client returning ``content`` or raising ``side_effect``."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=model_response(content if content is not None else entities_json()),
        side_effect=side_effect,
    )
    return client


def make_model_detector(content=None, side_effect=None) -> LLMDetector:
    return LLMDetector(
        client=MagicMock(),
        deployment_name="test-deployment",
        async_client=async_model_client(content, side_effect),
        timeout_seconds=5.0,
    )


@pytest.fixture
def audit_store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(base_dir=tmp_path / "storage", base_url="https://files.example.test")


@pytest.fixture
def make_service(audit_store, storage):
    """Factory building a service around an optional model detector."""

    def _make(model_detector=None, **overrides) -> PIIRedactionService:
        kwargs = dict(
            extractor=DocumentExtractor(),
            pattern_detector=PatternDetector(),
            redactor=TextRedactor(),
            storage=storage,
            audit_store=audit_store,
            model_detector=model_detector,
            max_file_size_bytes=1024 * 1024,
        )
        kwargs.update(overrides)
        return PIIRedactionService(**kwargs)

    return _make
