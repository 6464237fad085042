"""Filtering and sorting of classified PR collections."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Mapping

from prdash_core.models import LifecycleStatus, PullRequest, Review, StatusClassification
from prdash_core.status import classify

Classified = tuple[PullRequest, StatusClassification]
Predicate = Callable[[PullRequest, StatusClassification], bool]

_STATUS_CHOICES = ("all",) + tuple(s.value for s in LifecycleStatus)
SORT_KEYS = ("created", "updated", "approvals")
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class FilterSpec:
    """Active filters. All active predicates must hold (AND)."""

    status: str = "all"
    needs_review: bool = False
    has_changes_requested: bool = False

    def __post_init__(self):
        if self.status not in _STATUS_CHOICES:
            raise ValueError(f"Unknown status filter: {self.status!r}. Choose one of {', '.join(_STATUS_CHOICES)}.")

    @property
    def is_active(self) -> bool:
        return self.status != "all" or self.needs_review or self.has_changes_requested

    def predicates(self) -> Iterator[Predicate]:
        if self.status != "all":
            status = self.status
            yield lambda pr, _: pr.status == status
        if self.needs_review:
            yield lambda _, c: c.approvals == 0
        if self.has_changes_requested:
            yield lambda _, c: bool(c.changes_requested_by)

    def matches(self, pr: PullRequest, classification: StatusClassification) -> bool:
        return all(predicate(pr, classification) for predicate in self.predicates())


@dataclass(frozen=True)
class SortSpec:
    sort_by: str = "updated"
    order: str = "desc"

    def __post_init__(self):
        if self.sort_by not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {self.sort_by!r}. Choose one of {', '.join(SORT_KEYS)}.")
        if self.order not in SORT_ORDERS:
            raise ValueError(f"Unknown sort order: {self.order!r}. Choose 'asc' or 'desc'.")

    def key(self, item: Classified):
        pr, classification = item
        if self.sort_by == "created":
            return pr.created_at
        if self.sort_by == "updated":
            return pr.updated_at
        return classification.approvals


def sort_classified(items: Iterable[Classified], sort_spec: SortSpec) -> list[Classified]:
    """Sort by the requested key; equal keys are ordered by PR id ascending in both directions."""
    # Two stable passes: id first, then the primary key. reverse=True keeps
    # equal elements in their existing (id) order.
    ordered = sorted(items, key=lambda item: item[0].id)
    ordered.sort(key=sort_spec.key, reverse=sort_spec.order == "desc")
    return ordered


def classify_all(prs: Iterable[PullRequest], reviews_by_pr: Mapping[int, Iterable[Review]]) -> list[Classified]:
    """Pair every PR with its classification; PRs without known reviews get none."""
    return [(pr, classify(pr, reviews_by_pr.get(pr.github_pr_number, ()))) for pr in prs]


def query_collection(
    prs: Iterable[PullRequest],
    reviews_by_pr: Mapping[int, Iterable[Review]],
    filter_spec: FilterSpec | None = None,
    sort_spec: SortSpec | None = None,
) -> list[Classified]:
    """Classify, filter and sort a PR collection for display."""
    filter_spec = filter_spec or FilterSpec()
    sort_spec = sort_spec or SortSpec()
    matching = [(pr, c) for pr, c in classify_all(prs, reviews_by_pr) if filter_spec.matches(pr, c)]
    return sort_classified(matching, sort_spec)


def recent_open(prs: Iterable[PullRequest], limit: int = 5) -> list[PullRequest]:
    """Most recently updated open PRs, for the overview's quick-access list."""
    open_prs = sorted((pr for pr in prs if pr.status == LifecycleStatus.OPEN.value), key=lambda pr: pr.id)
    open_prs.sort(key=lambda pr: pr.updated_at, reverse=True)
    return open_prs[:limit]
