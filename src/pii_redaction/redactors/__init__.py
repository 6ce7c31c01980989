"""Text redaction module."""

from .base import BaseRedactor
from .text_redactor import REPLACEMENT_TOKENS, TextRedactor, redact_pii

__all__ = ["BaseRedactor", "REPLACEMENT_TOKENS", "TextRedactor", "redact_pii"]
