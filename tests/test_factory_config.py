"""Tests for settings, logging setup and service wiring."""

import json
import logging

import pytest
import structlog

from pii_redaction.audit.memory_store import InMemoryAuditStore
from pii_redaction.audit.sqlite_store import SQLiteAuditStore
from pii_redaction.config import Settings
from pii_redaction.detectors.llm_detector import LLMDetector
from pii_redaction.factory import (
    build_audit_store,
    build_model_detector,
    build_service,
    build_storage,
)
from pii_redaction.logging_config import setup_logging
from pii_redaction.pipeline import PIIRedactionService
from pii_redaction.storage import HttpStorage, LocalFileStorage


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.llm_provider == "openai"
        assert settings.model_timeout_seconds == 30.0
        assert settings.max_file_size_bytes == 50 * 1024 * 1024
        assert settings.pdf_ocr_fallback is False

    def test_prefixed_environment_variables(self, monkeypatch):
        monkeypatch.setenv("PII_LLM_PROVIDER", "none")
        monkeypatch.setenv("PII_MAX_FILE_SIZE_MB", "2")
        monkeypatch.setenv("PII_PDF_OCR_FALLBACK", "true")
        settings = Settings(_env_file=None)
        assert settings.llm_provider == "none"
        assert settings.max_file_size_bytes == 2 * 1024 * 1024
        assert settings.pdf_ocr_fallback is True


class TestModelDetectorWiring:
    def test_none_provider_has_no_model(self):
        assert build_model_detector(Settings(_env_file=None, llm_provider="none")) is None

    def test_openai_provider(self):
        settings = Settings(
            _env_file=None, llm_provider="openai", openai_api_key="sk-test", openai_model="gpt-4o-mini"
        )
        detector = build_model_detector(settings)
        assert isinstance(detector, LLMDetector)
        assert detector.deployment_name == "gpt-4o-mini"
        assert detector.temperature is None
        assert detector.async_client is not None

    def test_azure_provider_with_temperature(self):
        settings = Settings(
            _env_file=None,
            llm_provider="azure",
            azure_openai_endpoint="https://example.openai.azure.com",
            azure_openai_api_key="key",
            azure_openai_deployment_name="pii-deployment",
            openai_temperature=0.0,
        )
        detector = build_model_detector(settings)
        assert detector.deployment_name == "pii-deployment"
        assert detector.temperature == 0.0


class TestCollaboratorWiring:
    def test_local_storage(self, tmp_path):
        storage = build_storage(Settings(_env_file=None, storage_dir=tmp_path))
        assert isinstance(storage, LocalFileStorage)

    def test_http_storage(self):
        settings = Settings(
            _env_file=None, storage_backend="http", storage_base_url="https://objects.example.test"
        )
        assert isinstance(build_storage(settings), HttpStorage)

    def test_audit_backends(self, tmp_path):
        assert isinstance(
            build_audit_store(Settings(_env_file=None, audit_backend="memory")), InMemoryAuditStore
        )
        store = build_audit_store(Settings(_env_file=None, audit_db_path=tmp_path / "a.db"))
        assert isinstance(store, SQLiteAuditStore)
        store.close()

    async def test_build_service_end_to_end(self, tmp_path):
        settings = Settings(
            _env_file=None,
            llm_provider="none",
            storage_dir=tmp_path,
            audit_backend="memory",
        )
        service = build_service(settings)
        assert isinstance(service, PIIRedactionService)
        assert service.model_detector is None

        result = await service.process_document_for_pii(
            b"Reach me at jane@example.com", "note.txt", "text/plain", "CASE-9", 3
        )
        assert result.pii_types == ["EMAIL"]
        assert (tmp_path / result.storage_key).read_bytes() == b"Reach me at [EMAIL]"


class TestLogging:
    def test_json_lines_carry_bound_context(self, capsys, restore_logging):
        setup_logging(log_level="INFO", log_format="json")
        with structlog.contextvars.bound_contextvars(case_id="CASE-1", submission_id=7):
            logging.getLogger("pii_redaction.test").info("Processed %d documents", 2)

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "Processed 2 documents"
        assert payload["level"] == "info"
        assert payload["case_id"] == "CASE-1"
        assert payload["submission_id"] == 7

    def test_repeated_setup_keeps_one_handler(self, restore_logging):
        setup_logging()
        setup_logging(log_format="console")
        assert len(logging.getLogger().handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING
