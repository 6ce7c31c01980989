"""Storage backends for redacted artifacts."""

from .base import BaseStorage, case_storage_key, generate_secure_file_name
from .file_storage import LocalFileStorage
from .http_storage import HttpStorage

__all__ = [
    "BaseStorage",
    "HttpStorage",
    "LocalFileStorage",
    "case_storage_key",
    "generate_secure_file_name",
]
