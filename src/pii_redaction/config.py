"""Configuration settings for the PII redaction pipeline."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings loaded from ``PII_``-prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PII_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # LLM Provider: "openai", "azure", or "none" (pattern rules only)
    llm_provider: str = "openai"

    # OpenAI settings (used when llm_provider == "openai")
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_temperature: float = -1.0  # -1 means "use model default" (omit param)

    # Azure OpenAI settings (used when llm_provider == "azure")
    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_deployment_name: str = ""
    azure_openai_api_version: str = "2024-08-01-preview"

    # Upper bound on a single model detection, retries included
    model_timeout_seconds: float = 30.0

    # OCR near-empty PDF pages instead of emitting page placeholders
    pdf_ocr_fallback: bool = False

    # Storage settings: "local" or "http"
    storage_backend: str = "local"
    storage_dir: Path = Path("/tmp/pii-redaction-storage")
    storage_base_url: str = ""

    # Case-record store: "memory" or "sqlite"
    audit_backend: str = "sqlite"
    audit_db_path: Path = Path("/tmp/pii-redaction-storage/audit.db")

    max_file_size_mb: int = 50

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def max_file_size_bytes(self) -> int:
        """Maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


# Global settings instance
settings: Optional[Settings] = None


def load_settings() -> Settings:
    """Load settings from environment variables and .env file."""
    global settings
    settings = Settings()
    return settings


def get_settings() -> Settings:
    """Get the global settings instance, loading if necessary."""
    global settings
    if settings is None:
        settings = load_settings()
    return settings
