"""Tests for the GitHub REST client."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from orbit_bot.github.client import GitHubClient, get_github_client, reset_client


@pytest.fixture(autouse=True)
def _reset_singleton():
    reset_client()
    yield
    reset_client()


def _client(handler) -> GitHubClient:
    http = httpx.AsyncClient(
        base_url="https://api.github.test", transport=httpx.MockTransport(handler)
    )
    return GitHubClient(http)


async def test_get_latest_release():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/acme/site/releases/latest"
        return httpx.Response(200, json={"tag_name": "v1.0"})

    assert await _client(handler).get_latest_release("acme", "site") == {"tag_name": "v1.0"}


async def test_get_latest_release_404_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        await _client(handler).get_latest_release("acme", "site")
    assert exc_info.value.response.status_code == 404


async def test_get_pull_request_diff_uses_diff_media_type():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Accept"] == "application/vnd.github.diff"
        return httpx.Response(200, text="diff --git a/x b/x")

    assert await _client(handler).get_pull_request_diff("a", "b", 3) == "diff --git a/x b/x"


async def test_get_issue_comments_limits_page_size():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/a/b/issues/7/comments"
        assert request.url.params["per_page"] == "10"
        return httpx.Response(200, json=[{"body": "hi"}])

    assert await _client(handler).get_issue_comments("a", "b", 7, limit=10) == [{"body": "hi"}]


async def test_get_json_passes_params():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/search/issues"
        assert request.url.params["q"] == "is:open"
        return httpx.Response(200, json={"total_count": 2})

    assert await _client(handler).get_json("/search/issues", {"q": "is:open"}) == {"total_count": 2}


async def test_get_json_rejects_relative_path():
    def handler(request: httpx.Request) -> httpx.Response:
        pytest.fail("no request expected")

    with pytest.raises(ValueError):
        await _client(handler).get_json("repos/a/b")


@patch("orbit_bot.github.client.get_settings")
def test_get_github_client_none_without_token(mock_get_settings: MagicMock):
    settings = MagicMock()
    settings.github_token = ""
    mock_get_settings.return_value = settings

    assert get_github_client() is None


@patch("orbit_bot.github.client.get_settings")
def test_get_github_client_cached(mock_get_settings: MagicMock):
    settings = MagicMock()
    settings.github_token = "ghp_test"
    settings.github_api_url = "https://api.github.com"
    mock_get_settings.return_value = settings

    first = get_github_client()

    assert isinstance(first, GitHubClient)
    assert get_github_client() is first
