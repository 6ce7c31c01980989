"""Local filesystem storage for redacted artifacts."""

import logging
from pathlib import Path
from typing import Optional

from .base import BaseStorage
from ..errors import PersistenceError
from ..models.entities import StoredObject

logger = logging.getLogger(__name__)


class LocalFileStorage(BaseStorage):
    """Store objects as files below a base directory.

    Keys map to relative paths. URLs are ``{base_url}/{key}`` when a public
    base URL is configured, otherwise ``file://`` URIs.
    """

    def __init__(self, base_dir: Path, base_url: Optional[str] = None):
        self.base_dir = Path(base_dir)
        self.base_url = base_url.rstrip("/") if base_url else None

    def _resolve(self, key: str) -> Path:
        """Map a key to a path, refusing keys that escape the base directory."""
        root = self.base_dir.resolve()
        path = (root / key.lstrip("/")).resolve()
        if root not in path.parents:
            raise PersistenceError(f"Storage key escapes base directory: {key}")
        return path

    def put(self, key: str, data: bytes, mime_type: str) -> StoredObject:
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise PersistenceError(f"Failed to write {key}") from e

        logger.info("Stored %d bytes (%s) at %s", len(data), mime_type, key)
        url = f"{self.base_url}/{key}" if self.base_url else path.as_uri()
        return StoredObject(key=key, url=url)

    def get(self, key: str) -> bytes:
        """Read a stored object back."""
        return self._resolve(key).read_bytes()

    def delete(self, key: str) -> bool:
        """Delete an object. Returns True if deleted, False if not found."""
        path = self._resolve(key)
        if path.exists():
            path.unlink()
            return True
        return False
