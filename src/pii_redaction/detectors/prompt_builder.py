"""Prompt building strategy for model-assisted PII detection."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

# Bounded-cost contract: only this prefix of a document is sent to the model
MAX_MODEL_CHARS = 4000

ENTITY_RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "pii_detection",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "entities": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "type": {"type": "string"},
                            "value": {"type": "string"},
                            "start": {"type": "integer"},
                            "end": {"type": "integer"},
                            "confidence": {"type": "number"},
                        },
                        "required": ["type", "value", "start", "end", "confidence"],
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["entities"],
            "additionalProperties": False,
        },
    },
}

SYSTEM_PROMPT = (
    "You are a PII (Personally Identifiable Information) detection expert. "
    "Analyze the provided text from a legal case document and identify all PII entities. "
    "Each entity must have: type (SSN, PHONE, EMAIL, CREDIT_CARD, NAME, ADDRESS, DOB, "
    "MEDICAL, FINANCIAL, etc.), value (the exact text as it appears), start (character "
    "position of the first character), end (position just past the last character), "
    "confidence (0-1). Pay particular attention to names and addresses, which pattern "
    "rules cannot find. "
    'Respond with a JSON object of the form {"entities": [...]}; if no PII is found, '
    'respond with {"entities": []}.'
)


@dataclass
class PromptContext:
    """Everything needed for one model API call."""

    messages: List[dict]
    response_format: dict


class BasePromptBuilder(ABC):
    """Interface for prompt construction strategies."""

    @abstractmethod
    def build(self, text: str) -> PromptContext:
        """Build API messages for a document text."""


class DefaultPromptBuilder(BasePromptBuilder):
    """Fixed instruction plus the truncated document text."""

    def __init__(self, max_chars: int = MAX_MODEL_CHARS):
        self.max_chars = max_chars

    def build(self, text: str) -> PromptContext:
        limited_text = text[: self.max_chars]
        return PromptContext(
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": "Detect PII in this text:\n\n" + limited_text},
            ],
            response_format=ENTITY_RESPONSE_FORMAT,
        )
