"""Collapse a PR's review submissions into one latest state per reviewer."""

from __future__ import annotations

import logging
from typing import Iterable

from prdash_core.errors import ValidationError
from prdash_core.models import NormalizedReview, Review, parse_timestamp

logger = logging.getLogger(__name__)


def _timed(reviews: Iterable[Review]) -> list[tuple[Review, NormalizedReview]]:
    """Pair each review with its parsed form, dropping records with malformed timestamps."""
    timed = []
    for review in reviews:
        try:
            submitted_at = parse_timestamp(review.submitted_at, "submitted_at")
        except ValidationError as e:
            logger.warning(
                "Ignoring review by %s on PR #%s: %s",
                review.reviewer_username,
                review.pr_id,
                e,
            )
            continue
        timed.append((review, NormalizedReview(review.reviewer_username, review.review_state, submitted_at)))
    return timed


def normalize_reviews(reviews: Iterable[Review]) -> dict[str, NormalizedReview]:
    """Return the latest review of each reviewer, keyed by username.

    "Latest" is decided by ``submitted_at`` alone. When two records of the
    same reviewer carry the same timestamp, the one that occurs later in
    ``reviews`` wins. ``is_latest_review`` is ignored: upstream may set it on
    several records of the same reviewer.
    """
    latest: dict[str, NormalizedReview] = {}
    for _, normalized in _timed(reviews):
        current = latest.get(normalized.reviewer)
        # >= makes the later record win ties.
        if current is None or normalized.submitted_at >= current.submitted_at:
            latest[normalized.reviewer] = normalized
    return latest


def review_timeline(reviews: Iterable[Review]) -> list[Review]:
    """Return the valid reviews in submission order (input order for equal timestamps)."""
    timed = _timed(reviews)
    timed.sort(key=lambda pair: pair[1].submitted_at)
    return [review for review, _ in timed]
