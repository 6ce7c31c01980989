"""Token-based redaction of extracted text."""

import logging
import math
from typing import Dict, List, Optional

from .base import BaseRedactor
from ..models.entities import PIIEntity, RedactionResult

logger = logging.getLogger(__name__)

REPLACEMENT_TOKENS: Dict[str, str] = {
    "SSN": "[SSN]",
    "PHONE": "[PHONE]",
    "EMAIL": "[EMAIL]",
    "CREDIT_CARD": "[CC]",
    "DRIVERS_LICENSE": "[LICENSE]",
    "PASSPORT": "[PASSPORT]",
    "BANK_ACCOUNT": "[ACCOUNT]",
    "IP_ADDRESS": "[IP]",
    "DOB": "[DOB]",
    "MEDICAL_RECORD": "[MRN]",
    "CASE_NUMBER": "[CASE#]",
    "NAME": "[NAME]",
    "ADDRESS": "[ADDRESS]",
    "MEDICAL": "[MEDICAL]",
    "FINANCIAL": "[FINANCIAL]",
}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (not banker's rounding)."""
    return int(math.floor(value + 0.5))


class TextRedactor(BaseRedactor):
    """Splice a type token over each entity span.

    Entities are applied from the highest start offset down, so replacing
    one span never shifts the offsets of spans not yet processed.
    """

    def __init__(self, tokens: Optional[Dict[str, str]] = None):
        self.tokens = tokens if tokens is not None else REPLACEMENT_TOKENS

    def redact(self, text: str, entities: List[PIIEntity]) -> RedactionResult:
        redacted = text
        for entity in sorted(entities, key=lambda e: e.start, reverse=True):
            token = self.tokens.get(entity.type, f"[{entity.type}]")
            redacted = redacted[: entity.start] + token + redacted[entity.end :]

        return RedactionResult(
            original_text=text,
            redacted_text=redacted,
            entities=list(entities),
            redaction_count=len(entities),
            redaction_percentage=self._coverage(text, entities),
        )

    @staticmethod
    def _coverage(text: str, entities: List[PIIEntity]) -> int:
        if not text:
            return 0
        covered = sum(e.length for e in entities)
        return round_half_up(covered / len(text) * 100)


def redact_pii(text: str, entities: List[PIIEntity]) -> RedactionResult:
    """Redact with the default token table."""
    return TextRedactor().redact(text, entities)
