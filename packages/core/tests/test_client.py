"""Tests for the dashboard backend HTTP client."""

from unittest.mock import MagicMock

import pytest
import requests

from prdash_core.api.client import DashboardClient
from prdash_core.errors import ApiError

PR = {
    "id": 1,
    "github_pr_number": 42,
    "title": "Add Worldpay connector",
    "author": "alice",
    "created_at": "2024-05-01T10:00:00Z",
    "updated_at": "2024-05-02T10:00:00Z",
    "status": "open",
    "requested_reviewers": ["bob"],
    "pending_reviewers": [],
}
REVIEW = {
    "pr_id": 42,
    "reviewer_username": "bob",
    "review_state": "approved",
    "submitted_at": "2024-05-01T12:00:00Z",
    "is_latest_review": True,
}


def _response(payload=None, status_code=200, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def _make_client(routes):
    """Return a client whose session answers GETs from ``routes`` (path -> response or exception)."""
    session = MagicMock(spec=requests.Session)

    def get(url, timeout=None):
        path = url.replace("http://dash.test", "")
        outcome = routes[path]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    session.get.side_effect = get
    return DashboardClient("http://dash.test/", timeout=3, session=session), session


class TestGetJson:
    def test_joins_base_url_and_passes_timeout(self):
        client, session = _make_client({"/api/prs": _response([])})
        assert client.get_json("api/prs") == []
        session.get.assert_called_once_with("http://dash.test/api/prs", timeout=3)

    def test_http_error_raises_api_error(self):
        client, _ = _make_client({"/api/prs": _response(status_code=500)})
        with pytest.raises(ApiError, match="500"):
            client.get_json("/api/prs")

    def test_connection_error_raises_api_error(self):
        client, _ = _make_client({"/api/prs": requests.ConnectionError("refused")})
        with pytest.raises(ApiError, match="refused"):
            client.get_json("/api/prs")

    def test_invalid_json_raises_api_error(self):
        client, _ = _make_client({"/api/prs": _response(json_error=ValueError("Expecting value"))})
        with pytest.raises(ApiError, match="invalid JSON"):
            client.get_json("/api/prs")


class TestListing:
    def test_list_pull_requests_skips_malformed(self):
        client, _ = _make_client({"/api/prs": _response([PR, {"id": 2}])})
        prs = client.list_pull_requests()
        assert [pr.github_pr_number for pr in prs] == [42]

    def test_non_list_payload_rejected(self):
        client, _ = _make_client({"/api/prs": _response({"error": "nope"})})
        with pytest.raises(ApiError, match="expected a list"):
            client.list_pull_requests()

    def test_list_reviews(self):
        client, _ = _make_client({"/api/prs/42/reviews": _response([REVIEW])})
        reviews = client.list_reviews(42)
        assert reviews[0].reviewer_username == "bob"


class TestFetchSnapshot:
    def test_snapshot_includes_reviews(self):
        client, _ = _make_client(
            {
                "/api/prs": _response([PR]),
                "/api/prs/42/reviews": _response([REVIEW]),
            }
        )
        snapshot = client.fetch_snapshot()
        assert len(snapshot.prs) == 1
        assert len(snapshot.reviews_for(snapshot.prs[0])) == 1

    def test_review_failure_degrades_to_empty(self, caplog):
        client, _ = _make_client(
            {
                "/api/prs": _response([PR]),
                "/api/prs/42/reviews": _response(status_code=503),
            }
        )
        snapshot = client.fetch_snapshot()
        assert snapshot.reviews_for(snapshot.prs[0]) == ()
        assert "#42" in caplog.text

    def test_pr_list_failure_raises(self):
        client, _ = _make_client({"/api/prs": requests.Timeout("timed out")})
        with pytest.raises(ApiError):
            client.fetch_snapshot()
