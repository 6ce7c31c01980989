"""Storage collaborator interface and object naming."""

import asyncio
import secrets
import time
from abc import ABC, abstractmethod

from ..models.entities import StoredObject


def generate_secure_file_name(original_name: str, case_id: str) -> str:
    """Unguessable stored name: ``{case_id}-{epoch_ms}-{16 hex}.{ext}``."""
    extension = original_name.rsplit(".", 1)[-1].lower() if "." in original_name else "bin"
    timestamp = int(time.time() * 1000)
    return f"{case_id}-{timestamp}-{secrets.token_hex(8)}.{extension}"


def case_storage_key(case_id: str, file_name: str) -> str:
    return f"cases/{case_id}/{file_name}"


class BaseStorage(ABC):
    """Interface for the object store holding redacted artifacts."""

    @abstractmethod
    def put(self, key: str, data: bytes, mime_type: str) -> StoredObject:
        """
        Store ``data`` under ``key``.

        Returns:
            StoredObject with the final key and a URL for retrieval.

        Raises:
            PersistenceError: If the write fails.
        """

    async def put_async(self, key: str, data: bytes, mime_type: str) -> StoredObject:
        """Run ``put`` in a thread-pool executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.put, key, data, mime_type)
