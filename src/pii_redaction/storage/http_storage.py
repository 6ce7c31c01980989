"""HTTP PUT storage for redacted artifacts (S3 proxies, presigned endpoints)."""

import logging
from typing import Dict, Optional

import httpx

from .base import BaseStorage
from ..errors import PersistenceError
from ..models.entities import StoredObject

logger = logging.getLogger(__name__)


class HttpStorage(BaseStorage):
    """PUT objects to ``{base_url}/{key}``.

    The object URL is the PUT target with any query string removed.
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = timeout
        self.transport = transport

    def put(self, key: str, data: bytes, mime_type: str) -> StoredObject:
        url = f"{self.base_url}/{key.lstrip('/')}"
        headers = {**self.headers, "Content-Type": mime_type}
        if ".blob.core.windows.net" in url:
            headers["x-ms-blob-type"] = "BlockBlob"

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.put(url, content=data, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"Failed to upload {key} (HTTP {e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"Failed to upload {key}: {e}") from e

        logger.info("Uploaded %d bytes to %s", len(data), key)
        return StoredObject(key=key, url=url.split("?")[0])
