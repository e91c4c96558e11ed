"""
Unit tests for the GitHub REST client.

Requests are served by ``httpx.MockTransport``; nothing leaves the process.
"""

from datetime import datetime, timezone

import httpx
import pytest

from builders import NOW, pr_json, review_json
from prqueue.models.error import AuthError, ProviderError
from prqueue.models.pull_request import ReviewState
from prqueue.models.repository import RepositoryRef
from prqueue.services.github_client import (
    GitHubClient,
    get_rate_limit_info,
    search_repositories,
    validate_token,
)
from prqueue.utils.metrics import SyncMetrics

REPO = RepositoryRef(owner="acme", name="widgets")


class TestRateLimitInfo:
    """Test suite for rate limit header parsing."""

    def test_both_headers(self):
        info = get_rate_limit_info({"X-RateLimit-Remaining": "42", "X-RateLimit-Reset": "1700000000"})
        assert info.remaining == 42
        assert info.reset == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_missing_reset(self):
        assert get_rate_limit_info({"X-RateLimit-Remaining": "42"}) is None

    def test_non_numeric(self):
        assert get_rate_limit_info({"X-RateLimit-Remaining": "many", "X-RateLimit-Reset": "soon"}) is None


class TestGitHubClient:
    """Test suite for GitHubClient."""

    def test_empty_token_rejected(self, github_settings):
        with pytest.raises(AuthError):
            GitHubClient("  ", settings=github_settings)

    @pytest.mark.asyncio
    async def test_request_headers(self, github_settings, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(200, json={"login": "octocat"}))

        async with GitHubClient("secret-token", settings=github_settings, transport=transport) as client:
            viewer = await client.get_viewer()

        assert viewer.login == "octocat"
        request = transport.requests[0]
        assert request.url == "https://github.test/user"
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"

    @pytest.mark.asyncio
    async def test_viewer_unauthorized(self, github_settings):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(401, json={"message": "Bad credentials"})
        )

        async with GitHubClient("bad", settings=github_settings, transport=transport) as client:
            with pytest.raises(AuthError) as exc_info:
                await client.get_viewer()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Bad credentials"

    @pytest.mark.asyncio
    async def test_viewer_server_error(self, github_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="<html>bad gateway</html>"))

        async with GitHubClient("token", settings=github_settings, transport=transport) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.get_viewer()

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Failed to fetch user information"

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_provider_error(self, github_settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with GitHubClient("token", settings=github_settings, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.get_viewer()

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_owned_client_closed_on_exit(self, github_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"login": "octocat"}))

        async with GitHubClient("token", settings=github_settings, transport=transport) as client:
            await client.get_viewer()

        assert client._client.is_closed

    @pytest.mark.asyncio
    async def test_borrowed_client_left_open(self, github_settings, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(200, json={"login": "octocat"}))

        async with httpx.AsyncClient(transport=transport) as shared:
            async with GitHubClient("secret-token", settings=github_settings, http_client=shared) as client:
                viewer = await client.get_viewer()

            assert viewer.login == "octocat"
            assert not shared.is_closed
            request = transport.requests[0]
            assert request.url == "https://github.test/user"
            assert request.headers["Authorization"] == "Bearer secret-token"

    @pytest.mark.asyncio
    async def test_list_open_pulls_query(self, github_settings, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(200, json=[pr_json(1), pr_json(2)]))
        metrics = SyncMetrics("sync-1")

        async with GitHubClient("token", settings=github_settings, metrics=metrics, transport=transport) as client:
            pulls = await client.list_open_pulls(REPO)

        assert [pr.number for pr in pulls] == [1, 2]
        request = transport.requests[0]
        assert request.url.path == "/repos/acme/widgets/pulls"
        assert dict(request.url.params) == {
            "state": "open",
            "sort": "updated",
            "direction": "desc",
            "per_page": "100",
        }
        assert metrics.api_calls == {"pulls": 1}

    @pytest.mark.asyncio
    async def test_list_open_pulls_failure_carries_context(self, github_settings):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(
                403,
                json={"message": "API rate limit exceeded"},
                headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"},
            )
        )

        async with GitHubClient("token", settings=github_settings, transport=transport) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.list_open_pulls(REPO)

        error = exc_info.value
        assert error.repository == "acme/widgets"
        assert error.status_code == 403
        assert error.rate_limit_remaining == 0
        assert error.rate_limit.reset == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert error.is_rate_limited

    @pytest.mark.asyncio
    async def test_list_open_pulls_default_message(self, github_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(404, json={}))

        async with GitHubClient("token", settings=github_settings, transport=transport) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.list_open_pulls(REPO)

        assert exc_info.value.message == "Failed to fetch PRs for acme/widgets"
        assert exc_info.value.rate_limit_remaining is None

    @pytest.mark.asyncio
    async def test_malformed_pull_payload(self, github_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[{"number": 1}]))

        async with GitHubClient("token", settings=github_settings, transport=transport) as client:
            with pytest.raises(ProviderError) as exc_info:
                await client.list_open_pulls(REPO)

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_fetch_reviews_success(self, github_settings):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json=[review_json("octocat", "APPROVED", NOW)])
        )

        async with GitHubClient("token", settings=github_settings, transport=transport) as client:
            result = await client.fetch_reviews(REPO, 5)

        assert result.ok
        assert result.reviews[0].state == ReviewState.APPROVED

    @pytest.mark.asyncio
    async def test_fetch_reviews_failure_is_captured(self, github_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"message": "boom"}))

        async with GitHubClient("token", settings=github_settings, transport=transport) as client:
            result = await client.fetch_reviews(REPO, 5)

        assert not result.ok
        assert result.reviews == []
        assert result.failure.pr_number == 5
        assert result.failure.status_code == 500
        assert result.failure.message == "boom"


class TestTokenValidation:
    """Test suite for validate_token."""

    @pytest.mark.asyncio
    async def test_empty_token(self, github_settings, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(200, json={"login": "x"}))

        assert await validate_token("", settings=github_settings, transport=transport) is False
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_valid_token(self, github_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"login": "octocat"}))
        assert await validate_token("token", settings=github_settings, transport=transport) is True

    @pytest.mark.asyncio
    async def test_rejected_token(self, github_settings):
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"message": "Bad credentials"}))
        assert await validate_token("token", settings=github_settings, transport=transport) is False


class TestRepositorySearch:
    """Test suite for repository search."""

    @pytest.mark.asyncio
    async def test_blank_query_makes_no_request(self, github_settings, recording_transport):
        transport = recording_transport(lambda request: httpx.Response(200, json={"items": []}))

        assert await search_repositories("   ", "token", settings=github_settings, transport=transport) == []
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_empty_token(self, github_settings):
        with pytest.raises(AuthError):
            await search_repositories("widgets", "", settings=github_settings)

    @pytest.mark.asyncio
    async def test_search(self, github_settings, recording_transport):
        item = {
            "id": 9,
            "name": "widgets",
            "full_name": "acme/widgets",
            "description": None,
            "private": False,
            "owner": {"login": "acme", "avatar_url": "https://avatars.example/acme"},
            "stargazers_count": 12,
            "language": "Python",
        }
        transport = recording_transport(
            lambda request: httpx.Response(200, json={"total_count": 1, "incomplete_results": False, "items": [item]})
        )

        results = await search_repositories("widgets", "token", limit=5, settings=github_settings, transport=transport)

        assert [repo.full_name for repo in results] == ["acme/widgets"]
        params = transport.requests[0].url.params
        assert params["q"] == "widgets"
        assert params["sort"] == "stars"
        assert params["per_page"] == "5"
