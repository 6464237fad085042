"""Pull request and review data models.

PullRequest and Review mirror the JSON served by the dashboard backend and
are never mutated after parsing. Everything else in this module is derived
state that is recomputed from those two on every render.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from prdash_core.errors import ValidationError

logger = logging.getLogger(__name__)


class LifecycleStatus(str, Enum):
    OPEN = "open"
    MERGED = "merged"
    CLOSED = "closed"


class ReviewState(str, Enum):
    COMMENTED = "commented"
    APPROVED = "approved"
    CHANGES_REQUESTED = "changes_requested"


class Severity(str, Enum):
    """Badge colour of a classification, shared by every view."""

    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    PRIMARY = "primary"


def parse_timestamp(value: Any, field_name: str = "timestamp") -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts a trailing ``Z``. Naive values are taken as UTC.
    Raises ValidationError for anything else.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Malformed {field_name}: {value!r}") from None
    else:
        raise ValidationError(f"Malformed {field_name}: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require(data: Mapping[str, Any], key: str, kind: str) -> Any:
    if not isinstance(data, Mapping):
        raise ValidationError(f"Expected a {kind} object, got {type(data).__name__}")
    if data.get(key) is None:
        raise ValidationError(f"{kind} record is missing {key!r}")
    return data[key]


def _int_field(data: Mapping[str, Any], key: str, kind: str) -> int:
    value = _require(data, key, kind)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{kind} field {key!r} must be an integer, got {value!r}")
    return value


def _str_field(data: Mapping[str, Any], key: str, kind: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{kind} field {key!r} must be a string, got {value!r}")
    return value


def _str_list(data: Mapping[str, Any], key: str, kind: str) -> tuple[str, ...]:
    value = data.get(key) or []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"{kind} field {key!r} must be a list of strings")
    return tuple(value)


@dataclass(frozen=True)
class PullRequest:
    id: int
    github_pr_number: int
    title: str
    author: str
    created_at: datetime
    updated_at: datetime
    status: str  # "open" | "merged" | "closed"; checked by the classifier
    url: str = ""
    merged_at: datetime | None = None
    labels: tuple[str, ...] = ()
    requested_reviewers: tuple[str, ...] = ()
    pending_reviewers: tuple[str, ...] = ()
    current_approvals_count: int = 0
    is_connector_integration: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PullRequest:
        """Build a PullRequest from a backend payload, raising ValidationError when malformed."""
        kind = "PullRequest"
        pr_id = _int_field(data, "id", kind)
        number = _int_field(data, "github_pr_number", kind)
        status = _require(data, "status", kind)
        if not isinstance(status, str):
            raise ValidationError(f"PullRequest #{number} has a non-string status: {status!r}")

        approvals = data.get("current_approvals_count") or 0
        if isinstance(approvals, bool) or not isinstance(approvals, int) or approvals < 0:
            raise ValidationError(f"PullRequest #{number} has an invalid approval count: {approvals!r}")

        requested = _str_list(data, "requested_reviewers", kind)
        pending = _str_list(data, "pending_reviewers", kind)
        strays = set(pending) - set(requested)
        if strays:
            logger.warning(
                "PullRequest #%s lists pending reviewers that were never requested: %s",
                number,
                sorted(strays),
            )
            pending = tuple(name for name in pending if name not in strays)

        merged_at = data.get("merged_at")
        return cls(
            id=pr_id,
            github_pr_number=number,
            title=_str_field(data, "title", kind),
            author=_str_field(data, "author", kind),
            url=_str_field(data, "url", kind),
            created_at=parse_timestamp(_require(data, "created_at", kind), "created_at"),
            updated_at=parse_timestamp(_require(data, "updated_at", kind), "updated_at"),
            merged_at=parse_timestamp(merged_at, "merged_at") if merged_at else None,
            status=status,
            labels=_str_list(data, "labels", kind),
            requested_reviewers=requested,
            pending_reviewers=pending,
            current_approvals_count=approvals,
            is_connector_integration=bool(data.get("is_connector_integration", False)),
        )


@dataclass(frozen=True)
class Review:
    """One review submission. A reviewer may own many of these per PR.

    ``submitted_at`` is kept as received; the normalizer validates it so a
    single corrupt record only drops itself.
    """

    pr_id: int
    reviewer_username: str
    review_state: ReviewState
    submitted_at: str
    is_latest_review: bool = False  # upstream hint only, never trusted for ordering
    id: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Review:
        kind = "Review"
        pr_id = _int_field(data, "pr_id", kind)
        reviewer = _require(data, "reviewer_username", kind)
        raw_state = _require(data, "review_state", kind)
        try:
            state = ReviewState(raw_state)
        except ValueError:
            raise ValidationError(f"Review by {reviewer!r} has an unknown state: {raw_state!r}") from None
        submitted_at = _require(data, "submitted_at", kind)
        return cls(
            pr_id=pr_id,
            reviewer_username=str(reviewer),
            review_state=state,
            submitted_at=str(submitted_at),
            is_latest_review=bool(data.get("is_latest_review", False)),
            id=data.get("id"),
        )


@dataclass(frozen=True)
class NormalizedReview:
    """The authoritative (latest) review state of one reviewer."""

    reviewer: str
    state: ReviewState
    submitted_at: datetime


@dataclass(frozen=True)
class ReviewerSets:
    """Disjoint reviewer sets derived from normalized reviews and the roster."""

    approved: frozenset[str] = frozenset()
    changes_requested: frozenset[str] = frozenset()
    pending: frozenset[str] = frozenset()

    @property
    def total_required(self) -> int:
        return len(self.approved) + len(self.pending)


@dataclass(frozen=True)
class StatusClassification:
    label: str
    severity: Severity
    approvals: int
    total_required: int
    progress_ratio: float
    approved_by: tuple[str, ...] = ()
    changes_requested_by: tuple[str, ...] = ()
    waiting_for: tuple[str, ...] = ()


@dataclass(frozen=True)
class Snapshot:
    """A consistent view of the PR list and the reviews known for each PR.

    PRs missing from ``reviews_by_pr`` are treated as having no reviews yet.
    Build instances with :meth:`build` so the contents are frozen.
    """

    prs: tuple[PullRequest, ...] = ()
    reviews_by_pr: Mapping[int, tuple[Review, ...]] = field(default_factory=lambda: MappingProxyType({}))
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(
        cls,
        prs: Iterable[PullRequest],
        reviews_by_pr: Mapping[int, Iterable[Review]] | None = None,
        fetched_at: datetime | None = None,
    ) -> Snapshot:
        frozen = MappingProxyType({number: tuple(reviews) for number, reviews in (reviews_by_pr or {}).items()})
        return cls(
            prs=tuple(prs),
            reviews_by_pr=frozen,
            fetched_at=fetched_at or datetime.now(timezone.utc),
        )

    def reviews_for(self, pr: PullRequest) -> tuple[Review, ...]:
        return self.reviews_by_pr.get(pr.github_pr_number, ())


def parse_pull_requests(items: Iterable[Mapping[str, Any]]) -> list[PullRequest]:
    """Parse backend PR payloads, dropping (and logging) malformed ones."""
    prs = []
    for item in items:
        try:
            prs.append(PullRequest.from_dict(item))
        except ValidationError as e:
            logger.warning("Skipping malformed pull request: %s", e)
    return prs


def parse_reviews(items: Iterable[Mapping[str, Any]]) -> list[Review]:
    """Parse backend review payloads, dropping (and logging) malformed ones."""
    reviews = []
    for item in items:
        try:
            reviews.append(Review.from_dict(item))
        except ValidationError as e:
            logger.warning("Skipping malformed review: %s", e)
    return reviews
