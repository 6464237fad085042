"""HTTP client for the dashboard backend.

Only the PR list is critical: if it cannot be fetched there is nothing to
show and ApiError is raised. Review lists are fetched per PR and a failure
there degrades that PR to "no reviews known" instead of failing the whole
snapshot.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from prdash_core.errors import ApiError
from prdash_core.models import PullRequest, Review, Snapshot, parse_pull_requests, parse_reviews

logger = logging.getLogger(__name__)


class DashboardClient:
    def __init__(self, base_url: str, timeout: float = 10, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_json(self, path: str) -> Any:
        """GET ``path`` relative to the backend root and decode the JSON body."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise ApiError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise ApiError(f"GET {url} returned invalid JSON: {e}") from e

    def _get_list(self, path: str) -> list:
        payload = self.get_json(path)
        if not isinstance(payload, list):
            raise ApiError(f"GET {path} returned {type(payload).__name__}, expected a list")
        return payload

    def list_pull_requests(self) -> list[PullRequest]:
        return parse_pull_requests(self._get_list("/api/prs"))

    def list_reviews(self, pr_number: int) -> list[Review]:
        return parse_reviews(self._get_list(f"/api/prs/{pr_number}/reviews"))

    def fetch_snapshot(self) -> Snapshot:
        """Fetch the PR list and every PR's reviews as one consistent snapshot."""
        prs = self.list_pull_requests()
        reviews_by_pr: dict[int, list[Review]] = {}
        for pr in prs:
            try:
                reviews_by_pr[pr.github_pr_number] = self.list_reviews(pr.github_pr_number)
            except ApiError as e:
                logger.warning("Reviews for PR #%s unavailable, treating as none: %s", pr.github_pr_number, e)
                reviews_by_pr[pr.github_pr_number] = []
        logger.debug("Fetched %d pull requests from %s", len(prs), self.base_url)
        return Snapshot.build(prs, reviews_by_pr)

    def close(self) -> None:
        self._session.close()
