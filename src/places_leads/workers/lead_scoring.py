from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Optional

from ..models import NormalizedRecord

logger = logging.getLogger(__name__)

WEBSITE_POINTS = 2.0
PHONE_POINTS = 1.0
# (exclusive lower bound on rating count, points), highest tier first
RATING_COUNT_TIERS = ((100, 2.0), (50, 1.0))


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable rating %r", value)
        return None


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def compute_score(record: NormalizedRecord) -> float:
    """Additive lead heuristic. Unbounded, only meaningful for ranking within a run."""
    score = 0.0

    if record.website:
        score += WEBSITE_POINTS

    if record.phone:
        score += PHONE_POINTS

    rating = _to_float(record.rating)
    if rating is not None:
        score += rating

    rating_count = _to_int(record.user_ratings_total)
    if rating_count is not None:
        for threshold, points in RATING_COUNT_TIERS:
            if rating_count > threshold:
                score += points
                break

    return score


def score_record(record: NormalizedRecord) -> NormalizedRecord:
    return replace(record, score=compute_score(record))


def rank_records(records: Iterable[NormalizedRecord]) -> list[NormalizedRecord]:
    """Score every record and sort best first. Ties keep their input order."""
    scored = [score_record(record) for record in records]
    scored.sort(key=lambda record: record.score, reverse=True)
    return scored
