"""Composite 0-100 risk score for a merged entity list."""

from typing import Dict, List

from .models.entities import PIIEntity
from .redactors.text_redactor import round_half_up

# Government-ID and financial types weigh most, contact details least
RISK_WEIGHTS: Dict[str, int] = {
    "SSN": 25,
    "CREDIT_CARD": 25,
    "BANK_ACCOUNT": 20,
    "PASSPORT": 20,
    "DRIVERS_LICENSE": 15,
    "MEDICAL_RECORD": 15,
    "FINANCIAL": 15,
    "ADDRESS": 12,
    "PHONE": 10,
    "DOB": 10,
    "EMAIL": 8,
    "NAME": 5,
}
DEFAULT_WEIGHT = 5

MAX_RISK_SCORE = 100


def risk_weight(pii_type: str) -> int:
    return RISK_WEIGHTS.get(pii_type, DEFAULT_WEIGHT)


def calculate_risk_score(entities: List[PIIEntity]) -> int:
    """Mean of weight x confidence, doubled and capped at 100.

    The mean (not the sum) is used, so a document with many low-weight
    entities can score below one with a few high-weight ones.
    """
    if not entities:
        return 0
    total = sum(risk_weight(e.type) * e.confidence for e in entities)
    return min(MAX_RISK_SCORE, round_half_up(total / len(entities) * 2))
