"""Derive the approved / changes-requested / pending reviewer sets."""

from __future__ import annotations

from typing import Iterable, Mapping

from prdash_core.models import NormalizedReview, ReviewerSets, ReviewState


def build_reviewer_sets(
    normalized: Mapping[str, NormalizedReview],
    requested_reviewers: Iterable[str],
) -> ReviewerSets:
    """Split reviewers into approved, changes-requested and pending.

    A requested reviewer is pending only while they have no review at all;
    a comment-only review takes them out of pending without approving.
    Unsolicited reviewers still count as approvers or blockers but are
    never pending.
    """
    approved = frozenset(r for r, review in normalized.items() if review.state is ReviewState.APPROVED)
    changes_requested = frozenset(
        r for r, review in normalized.items() if review.state is ReviewState.CHANGES_REQUESTED
    )
    pending = frozenset(r for r in requested_reviewers if r not in normalized)
    return ReviewerSets(approved=approved, changes_requested=changes_requested, pending=pending)
