"""Factory for constructing a fully wired PII redaction service."""

import logging
from typing import Optional

from openai import AsyncAzureOpenAI, AsyncOpenAI, AzureOpenAI, OpenAI

from .audit.base import BaseAuditStore
from .audit.memory_store import InMemoryAuditStore
from .audit.sqlite_store import SQLiteAuditStore
from .config import Settings, get_settings
from .detectors.llm_detector import LLMDetector
from .detectors.pattern_detector import PatternDetector
from .extractors.pdf_extractor import ImageExtractor, PDFExtractor
from .extractors.router import DocumentExtractor
from .logging_config import setup_logging
from .pipeline import PIIRedactionService
from .redactors.text_redactor import TextRedactor
from .storage.base import BaseStorage
from .storage.file_storage import LocalFileStorage
from .storage.http_storage import HttpStorage

logger = logging.getLogger(__name__)


def build_model_detector(settings: Settings) -> Optional[LLMDetector]:
    """Build the model detector for the configured provider, or None."""
    if settings.llm_provider == "none":
        return None

    timeout = settings.model_timeout_seconds
    if settings.llm_provider == "azure":
        client = AzureOpenAI(
            azure_endpoint=settings.azure_openai_endpoint,
            api_key=settings.azure_openai_api_key,
            api_version=settings.azure_openai_api_version,
            timeout=timeout,
            max_retries=0,
        )
        async_client = AsyncAzureOpenAI(
            azure_endpoint=settings.azure_openai_endpoint,
            api_key=settings.azure_openai_api_key,
            api_version=settings.azure_openai_api_version,
            timeout=timeout,
            max_retries=0,
        )
        model_name = settings.azure_openai_deployment_name
    else:
        # Default to OpenAI; retries are handled by the detector
        client = OpenAI(api_key=settings.openai_api_key, timeout=timeout, max_retries=0)
        async_client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=timeout, max_retries=0)
        model_name = settings.openai_model

    # Resolve temperature: -1 means "omit" (use model default)
    temperature = settings.openai_temperature if settings.openai_temperature >= 0 else None

    return LLMDetector(
        client=client,
        deployment_name=model_name,
        async_client=async_client,
        temperature=temperature,
        timeout_seconds=timeout,
    )


def build_storage(settings: Settings) -> BaseStorage:
    if settings.storage_backend == "http":
        return HttpStorage(base_url=settings.storage_base_url)
    return LocalFileStorage(base_dir=settings.storage_dir, base_url=settings.storage_base_url or None)


def build_audit_store(settings: Settings) -> BaseAuditStore:
    if settings.audit_backend == "memory":
        return InMemoryAuditStore()
    return SQLiteAuditStore(settings.audit_db_path)


def build_service(
    settings: Optional[Settings] = None, configure_logging: bool = False
) -> PIIRedactionService:
    """Build a PIIRedactionService from settings (environment by default).

    With ``configure_logging`` the root logger is set up from the same
    settings, as an application entry point would.
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(log_level=settings.log_level, log_format=settings.log_format)
    logger.info(
        "Building PII redaction service: provider=%s storage=%s audit=%s",
        settings.llm_provider, settings.storage_backend, settings.audit_backend,
    )

    extractor = DocumentExtractor(
        pdf_extractor=PDFExtractor(enable_ocr=settings.pdf_ocr_fallback),
        image_extractor=ImageExtractor(),
    )

    return PIIRedactionService(
        extractor=extractor,
        pattern_detector=PatternDetector(),
        model_detector=build_model_detector(settings),
        redactor=TextRedactor(),
        storage=build_storage(settings),
        audit_store=build_audit_store(settings),
        max_file_size_bytes=settings.max_file_size_bytes,
    )
