"""Abstract base class for PII detectors."""

import asyncio
from abc import ABC, abstractmethod
from typing import List

from ..models.entities import PIIEntity


class BaseDetector(ABC):
    """Interface for PII detectors."""

    @abstractmethod
    def detect(self, text: str) -> List[PIIEntity]:
        """
        Detect PII in extracted document text (synchronous).

        Args:
            text: Extracted text. Read-only for every detector.

        Returns:
            List of PIIEntity objects. Entities may overlap each other;
            overlap resolution belongs to the merger.
        """

    async def detect_async(self, text: str) -> List[PIIEntity]:
        """
        Detect PII asynchronously.

        Default implementation runs ``detect`` in a thread-pool executor so
        the event loop is never blocked. Subclasses may override this with a
        fully async implementation.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.detect, text)
