"""Tests for status classification."""

import logging
from datetime import datetime, timezone

import pytest

from prdash_core.errors import DomainError
from prdash_core.models import PullRequest, Review, ReviewerSets, ReviewState, Severity
from prdash_core.status import (
    CHANGES_REQUESTED,
    MERGED,
    NEEDS_REVIEW,
    NO_REVIEWERS,
    READY_TO_MERGE,
    UNKNOWN,
    classify,
    classify_status,
)

NOW = datetime(2024, 5, 1, 10, tzinfo=timezone.utc)


def _make_pr(status="open", requested=(), pending=(), approvals=0, pr_id=1, number=101):
    return PullRequest(
        id=pr_id,
        github_pr_number=number,
        title="Add Adyen connector",
        author="alice",
        created_at=NOW,
        updated_at=NOW,
        status=status,
        requested_reviewers=tuple(requested),
        pending_reviewers=tuple(pending),
        current_approvals_count=approvals,
    )


def _review(reviewer, state, minute=0):
    return Review(
        pr_id=101,
        reviewer_username=reviewer,
        review_state=ReviewState(state),
        submitted_at=f"2024-05-01T11:{minute:02d}:00Z",
    )


def _sets(approved=(), changes=(), pending=()):
    return ReviewerSets(frozenset(approved), frozenset(changes), frozenset(pending))


class TestScenarios:
    def test_scenario_a_partial_approval(self):
        pr = _make_pr(requested=["x", "y"], pending=["y"], approvals=1)
        result = classify(pr, [_review("x", "approved")])

        assert result.total_required == 2
        assert result.approvals == 1
        assert result.label == "1/2 approvals"
        assert result.severity is Severity.PRIMARY
        assert result.progress_ratio == pytest.approx(0.5)

    def test_scenario_b_everyone_approved(self):
        pr = _make_pr(requested=["x", "y"], pending=["y"], approvals=1)
        result = classify(pr, [_review("x", "approved"), _review("y", "approved", minute=5)])

        assert result.waiting_for == ()
        assert result.label == READY_TO_MERGE
        assert result.severity is Severity.SUCCESS
        assert result.progress_ratio == 1.0

    def test_scenario_c_no_reviewers(self):
        result = classify(_make_pr(), [])

        assert result.total_required == 0
        assert result.label == NO_REVIEWERS
        assert result.severity is Severity.PRIMARY
        assert result.progress_ratio == 0.0

    def test_scenario_d_needs_review_beats_changes_requested(self):
        pr = _make_pr(requested=["x", "y"], pending=["y"])
        result = classify(pr, [_review("x", "changes_requested")])

        assert result.changes_requested_by == ("x",)
        assert result.label == NEEDS_REVIEW
        assert result.severity is Severity.DANGER


class TestPrecedence:
    @pytest.mark.parametrize("status", ["merged", "closed"])
    @pytest.mark.parametrize(
        "sets",
        [
            _sets(),
            _sets(pending=["y"]),
            _sets(approved=["x"], changes=["z"], pending=["y"]),
            _sets(changes=["z"]),
        ],
    )
    def test_terminal_states_always_merged(self, status, sets):
        result = classify_status(status, None, sets)
        assert result.label == MERGED
        assert result.severity is Severity.SUCCESS

    def test_ready_to_merge_ignores_changes_requested_by_others(self):
        result = classify_status("open", None, _sets(approved=["x"], changes=["z"]))
        assert result.label == READY_TO_MERGE

    def test_changes_requested_with_some_approvals(self):
        result = classify_status("open", None, _sets(approved=["x"], changes=["z"], pending=["y"]))
        assert result.label == CHANGES_REQUESTED
        assert result.severity is Severity.WARNING

    def test_needs_review_when_only_pending(self):
        result = classify_status("open", None, _sets(pending=["x", "y"]))
        assert result.label == NEEDS_REVIEW
        assert result.total_required == 2

    def test_approval_fraction_label(self):
        result = classify_status("open", None, _sets(approved=["a", "b"], pending=["c", "d", "e"]))
        assert result.label == "2/5 approvals"
        assert result.progress_ratio == pytest.approx(0.4)

    def test_no_fixed_threshold(self):
        # Six approvals with nobody left to ask is ready, not "6/5".
        result = classify_status("open", None, _sets(approved=list("abcdef")))
        assert result.label == READY_TO_MERGE
        assert result.total_required == 6


class TestUnknownStatus:
    def test_classify_status_raises_domain_error(self):
        with pytest.raises(DomainError, match="draft"):
            classify_status("draft", None, _sets())

    def test_classify_substitutes_unknown(self, caplog):
        pr = _make_pr(status="draft", requested=["x"])
        with caplog.at_level(logging.ERROR):
            result = classify(pr, [_review("x", "approved")])

        assert result.label == UNKNOWN
        assert result.severity is Severity.PRIMARY
        assert result.approvals == 1
        assert "draft" in caplog.text


class TestProperties:
    def test_idempotent(self):
        pr = _make_pr(requested=["x", "y", "z"], pending=["z"])
        reviews = [_review("x", "approved"), _review("y", "changes_requested", 3), _review("x", "commented", 9)]
        assert classify(pr, reviews) == classify(pr, reviews)

    def test_adding_an_approval_never_lowers_progress(self):
        pending = ["p"]
        approved = []
        previous = classify_status("open", None, _sets(approved=approved, pending=pending)).progress_ratio
        for reviewer in "abcde":
            approved.append(reviewer)
            current = classify_status("open", None, _sets(approved=approved, pending=pending)).progress_ratio
            assert current >= previous
            previous = current

    def test_progress_ratio_within_bounds(self):
        for sets in (_sets(), _sets(approved=["a"]), _sets(pending=["a"]), _sets(approved=["a"], pending=["b"])):
            ratio = classify_status("open", None, sets).progress_ratio
            assert 0.0 <= ratio <= 1.0

    def test_reviewer_lists_are_sorted(self):
        pr = _make_pr(requested=["zed", "amy"], pending=["zed", "amy"])
        result = classify(pr, [_review("mike", "approved"), _review("bob", "approved")])
        assert result.approved_by == ("bob", "mike")
        assert result.waiting_for == ("amy", "zed")

    def test_backend_approval_count_does_not_override_reviews(self):
        # Reviews not loaded yet: degrade to "needs review" rather than trusting the counter.
        pr = _make_pr(requested=["x"], pending=["x"], approvals=3)
        assert classify(pr, []).label == NEEDS_REVIEW
