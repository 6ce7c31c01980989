"""PII detection modules."""

from .base import BaseDetector
from .llm_detector import Err, LLMDetector, ModelOutcome, Ok
from .pattern_detector import DEFAULT_RULES, PatternDetector, PatternRule, detect_pii_with_regex
from .prompt_builder import BasePromptBuilder, DefaultPromptBuilder, PromptContext

__all__ = [
    "BaseDetector",
    "BasePromptBuilder",
    "DEFAULT_RULES",
    "DefaultPromptBuilder",
    "Err",
    "LLMDetector",
    "ModelOutcome",
    "Ok",
    "PatternDetector",
    "PatternRule",
    "PromptContext",
    "detect_pii_with_regex",
]
