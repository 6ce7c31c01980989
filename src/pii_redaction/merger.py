"""Combine detector outputs into one non-overlapping entity list."""

import logging
from typing import Iterable, List

from .models.entities import PIIEntity

logger = logging.getLogger(__name__)


def prefer_candidate(candidate: PIIEntity, incumbent: PIIEntity) -> bool:
    """Return True when ``candidate`` should replace an overlapping ``incumbent``.

    Only strictly higher confidence wins; ties keep the incumbent. The
    comparison is the same whatever the origin of either entity, so a
    pattern match at 0.95 beats any model entity below that.
    """
    return candidate.confidence > incumbent.confidence


def merge_entities(entities: Iterable[PIIEntity]) -> List[PIIEntity]:
    """Deduplicate overlapping entities, keeping the higher confidence one.

    Entities are stable-sorted by start and walked once. A candidate that
    overlaps nothing accepted so far is accepted; otherwise it is compared
    with the first accepted entity it overlaps, in accumulator order, and
    takes that entity's slot only if ``prefer_candidate`` says so. Because
    candidates arrive in start order, the winner of a slot never breaks the
    ordering of the accumulator. A chain of three or more mutually
    overlapping entities is resolved greedily, not optimally.

    Returns:
        Entities sorted by start and pairwise non-overlapping.
    """
    ordered = sorted(entities, key=lambda e: e.start)
    accepted: List[PIIEntity] = []

    for candidate in ordered:
        index = next((i for i, a in enumerate(accepted) if candidate.overlaps(a)), None)
        if index is None:
            accepted.append(candidate)
        elif prefer_candidate(candidate, accepted[index]):
            accepted[index] = candidate

    return accepted


def sanitize_spans(entities: Iterable[PIIEntity], text_length: int) -> List[PIIEntity]:
    """Drop entities whose offsets fall outside ``0 <= start < end <= text_length``.

    Model offsets are hints; a span outside the text cannot be spliced.
    """
    valid: List[PIIEntity] = []
    dropped = 0
    for entity in entities:
        if 0 <= entity.start < entity.end <= text_length:
            valid.append(entity)
        else:
            dropped += 1
    if dropped:
        logger.info("Dropped %d entities with out-of-range offsets", dropped)
    return valid
