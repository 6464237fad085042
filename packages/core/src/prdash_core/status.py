"""Status classification: the single source of every PR badge.

Every view derives a PR's label and severity from ``classify``. Rules are
evaluated in strict precedence order and the first match wins:

  1. merged or closed            -> "Merged"                 (success)
  2. nobody pending, >=1 approval -> "Ready to merge"         (success)
  3. no approvals, nobody to ask  -> "No reviewers assigned"  (primary)
  4. no approvals                 -> "Needs review"           (danger)
  5. changes requested            -> "Changes requested"      (warning)
  6. otherwise                    -> "{n}/{total} approvals"  (primary)

The approval threshold is always ``|approved| + |pending|``. Closed PRs
that were never merged are shown as "Merged" too; the two terminal states
are not distinguished.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from prdash_core.errors import DomainError
from prdash_core.models import (
    LifecycleStatus,
    PullRequest,
    Review,
    ReviewerSets,
    Severity,
    StatusClassification,
)
from prdash_core.normalize import normalize_reviews
from prdash_core.reviewers import build_reviewer_sets

logger = logging.getLogger(__name__)

MERGED = "Merged"
READY_TO_MERGE = "Ready to merge"
NO_REVIEWERS = "No reviewers assigned"
NEEDS_REVIEW = "Needs review"
CHANGES_REQUESTED = "Changes requested"
UNKNOWN = "Unknown"

_TERMINAL = {LifecycleStatus.MERGED, LifecycleStatus.CLOSED}


def _lifecycle(value: str) -> LifecycleStatus:
    try:
        return LifecycleStatus(value)
    except ValueError:
        raise DomainError(f"Unrecognized pull request status: {value!r}") from None


def _progress(approvals: int, total_required: int) -> float:
    if total_required <= 0:
        return 0.0
    return min(max(approvals / total_required, 0.0), 1.0)


def _label_and_severity(lifecycle: LifecycleStatus, sets: ReviewerSets) -> tuple[str, Severity]:
    approvals = len(sets.approved)
    if lifecycle in _TERMINAL:
        return MERGED, Severity.SUCCESS
    if not sets.pending and approvals > 0:
        return READY_TO_MERGE, Severity.SUCCESS
    if approvals == 0 and sets.total_required == 0:
        return NO_REVIEWERS, Severity.PRIMARY
    if approvals == 0:
        return NEEDS_REVIEW, Severity.DANGER
    if sets.changes_requested:
        return CHANGES_REQUESTED, Severity.WARNING
    return f"{approvals}/{sets.total_required} approvals", Severity.PRIMARY


def _classification(label: str, severity: Severity, sets: ReviewerSets) -> StatusClassification:
    approvals = len(sets.approved)
    return StatusClassification(
        label=label,
        severity=severity,
        approvals=approvals,
        total_required=sets.total_required,
        progress_ratio=_progress(approvals, sets.total_required),
        approved_by=tuple(sorted(sets.approved)),
        changes_requested_by=tuple(sorted(sets.changes_requested)),
        waiting_for=tuple(sorted(sets.pending)),
    )


def classify_status(
    lifecycle_status: str,
    merged_at: datetime | None,
    sets: ReviewerSets,
) -> StatusClassification:
    """Classify one PR from its lifecycle status and reviewer sets.

    ``merged_at`` does not influence the result: a closed PR is labelled
    "Merged" whether or not it carries a merge time.

    Raises DomainError when ``lifecycle_status`` is not open/merged/closed.
    """
    lifecycle = _lifecycle(lifecycle_status)
    label, severity = _label_and_severity(lifecycle, sets)
    return _classification(label, severity, sets)


def reviewer_sets_for(pr: PullRequest, reviews: Iterable[Review]) -> ReviewerSets:
    """Run the normalizer and set builder for one PR."""
    return build_reviewer_sets(normalize_reviews(reviews), pr.requested_reviewers)


def classify(pr: PullRequest, reviews: Iterable[Review]) -> StatusClassification:
    """Classify a PR from its raw reviews. Never raises for a parsed PullRequest.

    A PR in an impossible state gets the "Unknown" label instead of taking
    the whole dashboard down with it.
    """
    reviews = tuple(reviews)
    sets = reviewer_sets_for(pr, reviews)

    if reviews and pr.current_approvals_count != len(sets.approved):
        logger.debug(
            "PR #%s: backend reports %d approvals, reviews show %d",
            pr.github_pr_number,
            pr.current_approvals_count,
            len(sets.approved),
        )

    try:
        return classify_status(pr.status, pr.merged_at, sets)
    except DomainError as e:
        logger.error("Cannot classify PR #%s: %s", pr.github_pr_number, e)
        return _classification(UNKNOWN, Severity.PRIMARY, sets)
