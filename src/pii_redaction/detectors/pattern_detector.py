"""Deterministic regex detection of structured PII."""

import re
from dataclasses import dataclass
from typing import List, Sequence

from .base import BaseDetector
from ..models.entities import PIIEntity, PIIType, RegexOrigin

# Structural patterns are trusted uniformly
PATTERN_CONFIDENCE = 0.95


@dataclass(frozen=True)
class PatternRule:
    """A named regex rule producing entities of one PII type."""

    rule_id: str
    pii_type: PIIType
    pattern: "re.Pattern[str]"


# Order matters: on equal start and confidence the merger keeps the entity
# from the earlier rule. Rules are ASCII-only: \d and \b never match
# digits of other scripts.
DEFAULT_RULES: Sequence[PatternRule] = (
    # XXX-XX-XXXX or nine consecutive digits
    PatternRule("ssn", PIIType.SSN, re.compile(r"\b(?:\d{3}-\d{2}-\d{4}|\d{9})\b", re.ASCII)),
    PatternRule(
        "phone",
        PIIType.PHONE,
        re.compile(r"\b(?:\+?1[-.\s]?)?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})\b", re.ASCII),
    ),
    PatternRule(
        "email",
        PIIType.EMAIL,
        re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b", re.ASCII),
    ),
    # 16 digits with optional space/dash separators
    PatternRule("credit_card", PIIType.CREDIT_CARD, re.compile(r"\b(?:\d{4}[-\s]?){3}\d{4}\b", re.ASCII)),
    # Simplified; formats vary by state
    PatternRule("drivers_license", PIIType.DRIVERS_LICENSE, re.compile(r"\b[A-Z]{1,2}\d{5,8}\b", re.ASCII)),
    PatternRule("passport", PIIType.PASSPORT, re.compile(r"\b[A-Z]{1,2}\d{6,9}\b", re.ASCII)),
    PatternRule("bank_account", PIIType.BANK_ACCOUNT, re.compile(r"\b\d{8,17}\b", re.ASCII)),
    PatternRule(
        "ip_address",
        PIIType.IP_ADDRESS,
        re.compile(
            r"\b(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
            r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b",
            re.ASCII,
        ),
    ),
    # MM/DD/YYYY or MM-DD-YYYY
    PatternRule(
        "dob",
        PIIType.DOB,
        re.compile(r"\b(?:0[1-9]|1[0-2])[-/](?:0[1-9]|[12][0-9]|3[01])[-/](?:19|20)\d{2}\b", re.ASCII),
    ),
    PatternRule(
        "medical_record",
        PIIType.MEDICAL_RECORD,
        re.compile(r"\bMRN\s*[:#]?\s*\d{6,10}\b", re.IGNORECASE | re.ASCII),
    ),
    PatternRule("case_number", PIIType.CASE_NUMBER, re.compile(r"\b\d{2}-\d{4,6}-\d{2,4}\b", re.ASCII)),
)


class PatternDetector(BaseDetector):
    """Scan text with a fixed set of named regex rules.

    Every match is reported with its exact span and a fixed confidence of
    0.95. Matches from different rules may overlap.
    """

    def __init__(self, rules: Sequence[PatternRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def detect(self, text: str) -> List[PIIEntity]:
        entities: List[PIIEntity] = []
        for rule in self.rules:
            for match in rule.pattern.finditer(text):
                entities.append(
                    PIIEntity(
                        type=rule.pii_type.value,
                        value=match.group(0),
                        start=match.start(),
                        end=match.end(),
                        confidence=PATTERN_CONFIDENCE,
                        origin=RegexOrigin(rule_id=rule.rule_id),
                    )
                )

        # Stable: equal starts keep rule order
        entities.sort(key=lambda e: e.start)
        return entities


def detect_pii_with_regex(text: str) -> List[PIIEntity]:
    """Run the default rule set over ``text``."""
    return PatternDetector().detect(text)
