"""Dashboard summary counters and the analytics breakdowns."""

from __future__ import annotations

import warnings
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Mapping

from prdash_core.errors import EmptyCollectionWarning
from prdash_core.models import LifecycleStatus, PullRequest, Review
from prdash_core.query import classify_all
from prdash_core.status import READY_TO_MERGE


@dataclass(frozen=True)
class DashboardStats:
    total: int = 0
    by_status: dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in LifecycleStatus})
    needing_review: int = 0
    ready_to_merge: int = 0
    changes_requested: int = 0

    @property
    def open(self) -> int:
        return self.by_status.get(LifecycleStatus.OPEN.value, 0)

    @property
    def merged(self) -> int:
        return self.by_status.get(LifecycleStatus.MERGED.value, 0)

    @property
    def closed(self) -> int:
        return self.by_status.get(LifecycleStatus.CLOSED.value, 0)


def summarize(prs: Iterable[PullRequest], reviews_by_pr: Mapping[int, Iterable[Review]]) -> DashboardStats:
    """Reduce a PR collection to the dashboard counters in a single pass.

    ``needing_review`` only counts open PRs with no approvals;
    ``changes_requested`` counts any PR whose latest reviews include a
    changes-requested verdict.
    """
    by_status: Counter[str] = Counter({s.value: 0 for s in LifecycleStatus})
    total = needing_review = ready = changes = 0

    for pr, classification in classify_all(prs, reviews_by_pr):
        total += 1
        by_status[pr.status] += 1
        if pr.status == LifecycleStatus.OPEN.value and classification.approvals == 0:
            needing_review += 1
        if classification.label == READY_TO_MERGE:
            ready += 1
        if classification.changes_requested_by:
            changes += 1

    if total == 0:
        warnings.warn("Summarizing an empty pull request collection", EmptyCollectionWarning, stacklevel=2)

    return DashboardStats(
        total=total,
        by_status=dict(by_status),
        needing_review=needing_review,
        ready_to_merge=ready,
        changes_requested=changes,
    )


APPROVAL_BUCKETS = ("0 approvals", "1-2 approvals", "3-4 approvals", "5+ approvals")
AGE_BUCKETS = ("< 1 day", "1-3 days", "4-7 days", "> 1 week")


def _approval_bucket(approvals: int) -> str:
    if approvals == 0:
        return APPROVAL_BUCKETS[0]
    if approvals <= 2:
        return APPROVAL_BUCKETS[1]
    if approvals <= 4:
        return APPROVAL_BUCKETS[2]
    return APPROVAL_BUCKETS[3]


def _age_bucket(age_days: int) -> str:
    if age_days < 1:
        return AGE_BUCKETS[0]
    if age_days <= 3:
        return AGE_BUCKETS[1]
    if age_days <= 7:
        return AGE_BUCKETS[2]
    return AGE_BUCKETS[3]


def approval_distribution(
    prs: Iterable[PullRequest], reviews_by_pr: Mapping[int, Iterable[Review]]
) -> dict[str, int]:
    """Count PRs per approval bucket, using the approvals derived from reviews.

    Every bucket is present in ``APPROVAL_BUCKETS`` order, empty ones as 0.
    """
    counts: Counter[str] = Counter({bucket: 0 for bucket in APPROVAL_BUCKETS})
    for _, classification in classify_all(prs, reviews_by_pr):
        counts[_approval_bucket(classification.approvals)] += 1
    return {bucket: counts[bucket] for bucket in APPROVAL_BUCKETS}


def age_distribution(prs: Iterable[PullRequest], now: datetime | None = None) -> dict[str, int]:
    """Count PRs by whole days since ``created_at``."""
    now = now or datetime.now(timezone.utc)
    counts: Counter[str] = Counter({bucket: 0 for bucket in AGE_BUCKETS})
    for pr in prs:
        age_days = (now - pr.created_at).days
        counts[_age_bucket(age_days)] += 1
    return {bucket: counts[bucket] for bucket in AGE_BUCKETS}


def reviewer_activity(reviews_by_pr: Mapping[int, Iterable[Review]], limit: int = 10) -> list[tuple[str, int]]:
    """Most active reviewers by number of submitted reviews.

    Every review record counts, not just the latest per PR. Ties are ordered
    by username.
    """
    counts: Counter[str] = Counter()
    for reviews in reviews_by_pr.values():
        for review in reviews:
            counts[review.reviewer_username] += 1
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit]
