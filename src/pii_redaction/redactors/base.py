"""Abstract base class for redactors."""

from abc import ABC, abstractmethod
from typing import List

from ..models.entities import PIIEntity, RedactionResult


class BaseRedactor(ABC):
    """Interface for text redactors."""

    @abstractmethod
    def redact(self, text: str, entities: List[PIIEntity]) -> RedactionResult:
        """
        Replace every entity span in ``text``.

        Args:
            text: Original extracted text.
            entities: Merged, non-overlapping entities with valid offsets.

        Returns:
            RedactionResult whose ``redaction_count`` equals ``len(entities)``.
        """
