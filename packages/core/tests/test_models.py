"""Tests for parsing backend payloads into models."""

from datetime import datetime, timezone

import pytest

from prdash_core.errors import ValidationError
from prdash_core.models import (
    PullRequest,
    Review,
    ReviewState,
    Snapshot,
    parse_pull_requests,
    parse_reviews,
    parse_timestamp,
)
from prdash_core.status import NEEDS_REVIEW, classify


def _pr_payload(**overrides):
    payload = {
        "id": 1,
        "github_pr_number": 101,
        "title": "Add Stripe connector",
        "author": "alice",
        "url": "https://github.com/acme/hyperswitch/pull/101",
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-02T10:00:00Z",
        "merged_at": None,
        "status": "open",
        "is_connector_integration": True,
        "current_approvals_count": 1,
        "labels": ["connector"],
        "requested_reviewers": ["bob", "carol"],
        "pending_reviewers": ["carol"],
    }
    payload.update(overrides)
    return payload


def _review_payload(**overrides):
    payload = {
        "id": 7,
        "pr_id": 101,
        "reviewer_username": "bob",
        "review_state": "approved",
        "submitted_at": "2024-05-01T12:00:00Z",
        "is_latest_review": True,
    }
    payload.update(overrides)
    return payload


class TestParseTimestamp:
    def test_zulu_suffix(self):
        assert parse_timestamp("2024-05-01T10:00:00Z") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    def test_offset_converted_to_utc(self):
        assert parse_timestamp("2024-05-01T12:00:00+02:00") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)

    def test_naive_taken_as_utc(self):
        assert parse_timestamp("2024-05-01T10:00:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["", "yesterday", None, 12345, "2024-13-45T00:00:00Z"])
    def test_malformed_raises(self, value):
        with pytest.raises(ValidationError):
            parse_timestamp(value)


class TestPullRequestFromDict:
    def test_parses_full_payload(self):
        pr = PullRequest.from_dict(_pr_payload())
        assert pr.github_pr_number == 101
        assert pr.requested_reviewers == ("bob", "carol")
        assert pr.pending_reviewers == ("carol",)
        assert pr.labels == ("connector",)
        assert pr.merged_at is None
        assert pr.is_connector_integration is True

    def test_optional_fields_default(self):
        payload = _pr_payload()
        for key in ("labels", "requested_reviewers", "pending_reviewers", "current_approvals_count", "url"):
            del payload[key]
        pr = PullRequest.from_dict(payload)
        assert pr.labels == ()
        assert pr.requested_reviewers == ()
        assert pr.current_approvals_count == 0

    def test_unknown_status_is_kept_for_the_classifier(self):
        pr = PullRequest.from_dict(_pr_payload(status="draft"))
        assert pr.status == "draft"

    def test_missing_number_raises(self):
        payload = _pr_payload()
        del payload["github_pr_number"]
        with pytest.raises(ValidationError):
            PullRequest.from_dict(payload)

    def test_stray_pending_reviewer_is_dropped_not_the_pr(self, caplog):
        pr = PullRequest.from_dict(_pr_payload(pending_reviewers=["carol", "mallory"]))
        assert pr.pending_reviewers == ("carol",)
        assert "never requested" in caplog.text

    @pytest.mark.parametrize("key", ["title", "author", "url"])
    def test_non_string_text_field_raises(self, key):
        with pytest.raises(ValidationError, match=key):
            PullRequest.from_dict(_pr_payload(**{key: 42}))

    def test_negative_approval_count_raises(self):
        with pytest.raises(ValidationError):
            PullRequest.from_dict(_pr_payload(current_approvals_count=-1))

    def test_malformed_created_at_raises(self):
        with pytest.raises(ValidationError):
            PullRequest.from_dict(_pr_payload(created_at="not a date"))

    def test_non_mapping_raises(self):
        with pytest.raises(ValidationError):
            PullRequest.from_dict(["not", "a", "dict"])


class TestReviewFromDict:
    def test_parses_state(self):
        review = Review.from_dict(_review_payload(review_state="changes_requested"))
        assert review.review_state is ReviewState.CHANGES_REQUESTED
        assert review.reviewer_username == "bob"

    def test_unknown_state_raises(self):
        with pytest.raises(ValidationError, match="unknown state"):
            Review.from_dict(_review_payload(review_state="dismissed"))

    def test_timestamp_not_validated_at_parse_time(self):
        review = Review.from_dict(_review_payload(submitted_at="garbage"))
        assert review.submitted_at == "garbage"


class TestParseCollections:
    def test_invalid_pull_requests_are_skipped(self):
        prs = parse_pull_requests([_pr_payload(), {"id": 2}, _pr_payload(id=3, github_pr_number=103)])
        assert [pr.id for pr in prs] == [1, 3]

    def test_pr_with_stray_pending_reviewer_is_still_classified(self):
        prs = parse_pull_requests([_pr_payload(requested_reviewers=["bob"], pending_reviewers=["carol"])])

        assert len(prs) == 1
        assert prs[0].pending_reviewers == ()
        classification = classify(prs[0], [])
        assert classification.label == NEEDS_REVIEW
        assert classification.waiting_for == ("bob",)

    def test_non_string_title_is_skipped(self):
        prs = parse_pull_requests([_pr_payload(title=123), _pr_payload(id=3, github_pr_number=103)])
        assert [pr.id for pr in prs] == [3]

    def test_invalid_reviews_are_skipped(self):
        reviews = parse_reviews([_review_payload(), _review_payload(review_state="??")])
        assert len(reviews) == 1

    def test_empty_inputs(self):
        assert parse_pull_requests([]) == []
        assert parse_reviews([]) == []


class TestSnapshot:
    def test_missing_reviews_read_as_empty(self):
        pr = PullRequest.from_dict(_pr_payload())
        snapshot = Snapshot.build([pr])
        assert snapshot.reviews_for(pr) == ()

    def test_contents_are_frozen(self):
        pr = PullRequest.from_dict(_pr_payload())
        source = {101: [Review.from_dict(_review_payload())]}
        snapshot = Snapshot.build([pr], source)
        source[101].append(Review.from_dict(_review_payload(reviewer_username="carol")))

        assert len(snapshot.reviews_for(pr)) == 1
        with pytest.raises(TypeError):
            snapshot.reviews_by_pr[102] = ()
