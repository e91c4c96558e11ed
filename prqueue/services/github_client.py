"""
GitHub REST client for the review queue.

This module wraps the handful of read-only GitHub endpoints the queue needs:
- the authenticated viewer (``GET /user``)
- one page of open pull requests per repository
- the review list of a pull request
- repository search for the settings screen

Responses are validated into pydantic models at this boundary. Non-2xx
responses become AuthError (401) or ProviderError carrying the status code,
the provider's message and the rate-limit quota from the response headers.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from prqueue.config import Settings, settings as default_settings
from prqueue.models.error import (
    AuthError,
    FetchFailure,
    GitHubAPIError,
    ProviderError,
    RateLimitInfo,
)
from prqueue.models.processed import ReviewFetchResult
from prqueue.models.pull_request import GitHubUser, RawPullRequest, ReviewEvent
from prqueue.models.repository import RepositoryRef, RepositorySummary
from prqueue.utils.logging import get_logger
from prqueue.utils.metrics import SyncMetrics, track_api_call

logger = get_logger(__name__)

_PULLS_ADAPTER = TypeAdapter(List[RawPullRequest])
_REVIEWS_ADAPTER = TypeAdapter(List[ReviewEvent])


def get_rate_limit_info(headers: Mapping[str, str]) -> Optional[RateLimitInfo]:
    """
    Read the rate-limit quota from GitHub response headers.

    Returns:
        RateLimitInfo when both ``X-RateLimit-Remaining`` and
        ``X-RateLimit-Reset`` are present and numeric, otherwise None
    """
    remaining = headers.get("X-RateLimit-Remaining")
    reset = headers.get("X-RateLimit-Reset")
    if not remaining or not reset:
        return None
    try:
        return RateLimitInfo(
            remaining=int(remaining),
            reset=datetime.fromtimestamp(int(reset), tz=timezone.utc),
        )
    except ValueError:
        return None


def _remaining_quota(headers: Mapping[str, str]) -> Optional[int]:
    value = headers.get("X-RateLimit-Remaining")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return default


class GitHubClient:
    """
    Async GitHub REST client bound to one bearer token.

    Use as an async context manager so the underlying ``httpx.AsyncClient``
    is closed when the pass ends:

        async with GitHubClient(token) as client:
            viewer = await client.get_viewer()

    A caller-supplied ``http_client`` is borrowed, not owned, and stays open.
    """

    def __init__(
        self,
        token: str,
        settings: Optional[Settings] = None,
        metrics: Optional[SyncMetrics] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            token: Bearer token; never logged
            settings: Settings for base URL, API version, page size and timeout
            metrics: Optional per-pass metrics collector
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
            http_client: Optional shared ``httpx.AsyncClient``; never closed here

        Raises:
            AuthError: If the token is empty
        """
        if not token or not token.strip():
            raise AuthError("GitHub token is required")

        self.settings = settings or default_settings
        self.metrics = metrics
        self._base_url = self.settings.github_api_base.rstrip("/")
        self._headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token.strip()}",
            "X-GitHub-Api-Version": self.settings.github_api_version,
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(
        self,
        path: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        repository: Optional[str] = None,
    ) -> httpx.Response:
        """
        Issue a GET request.

        Transport failures (DNS, connection reset, timeout) become a
        ProviderError with status 500 since no response was received.
        """
        async with track_api_call(self.metrics, endpoint, logger, path=path) as call:
            try:
                response = await self._client.get(
                    f"{self._base_url}{path}", params=params, headers=self._headers
                )
            except httpx.HTTPError as e:
                raise ProviderError(
                    f"Request to GitHub failed: {e}",
                    status_code=500,
                    repository=repository,
                ) from e

            call["status_code"] = response.status_code
            if not response.is_success:
                call["error"] = response.reason_phrase

        return response

    def _raise_for_status(
        self,
        response: httpx.Response,
        default_message: str,
        repository: Optional[str] = None,
    ) -> None:
        if response.is_success:
            return

        message = _error_message(response, default_message)
        rate_limit = get_rate_limit_info(response.headers)
        error_cls = AuthError if response.status_code == 401 else ProviderError
        raise error_cls(
            message,
            status_code=response.status_code,
            repository=repository,
            rate_limit=rate_limit,
            rate_limit_remaining=_remaining_quota(response.headers),
        )

    async def get_viewer(self) -> GitHubUser:
        """
        Fetch the authenticated user.

        Raises:
            AuthError: If GitHub rejects the token
            ProviderError: On any other failure
        """
        response = await self._get("/user", endpoint="user")
        self._raise_for_status(response, "Failed to fetch user information")
        try:
            return GitHubUser.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ProviderError(
                f"Malformed user response: {e}", status_code=502
            ) from e

    async def list_open_pulls(self, repo: RepositoryRef) -> List[RawPullRequest]:
        """
        Fetch one page of open pull requests, most recently updated first.

        Only the first page (``settings.per_page``, at most 100) is read.

        Raises:
            AuthError: If GitHub rejects the token
            ProviderError: On non-2xx, transport failure or malformed payload
        """
        response = await self._get(
            f"/repos/{repo.owner}/{repo.name}/pulls",
            endpoint="pulls",
            params={
                "state": "open",
                "sort": "updated",
                "direction": "desc",
                "per_page": self.settings.per_page,
            },
            repository=repo.full_name,
        )
        self._raise_for_status(
            response, f"Failed to fetch PRs for {repo.full_name}", repository=repo.full_name
        )
        try:
            return _PULLS_ADAPTER.validate_python(response.json())
        except (ValueError, ValidationError) as e:
            raise ProviderError(
                f"Malformed pull request list for {repo.full_name}: {e}",
                status_code=502,
                repository=repo.full_name,
            ) from e

    async def list_reviews(self, repo: RepositoryRef, number: int) -> List[ReviewEvent]:
        """Fetch the reviews of one pull request; raises on failure."""
        response = await self._get(
            f"/repos/{repo.owner}/{repo.name}/pulls/{number}/reviews",
            endpoint="reviews",
            repository=repo.full_name,
        )
        self._raise_for_status(
            response,
            f"Failed to fetch reviews for {repo.full_name}#{number}",
            repository=repo.full_name,
        )
        try:
            return _REVIEWS_ADAPTER.validate_python(response.json())
        except (ValueError, ValidationError) as e:
            raise ProviderError(
                f"Malformed review list for {repo.full_name}#{number}: {e}",
                status_code=502,
                repository=repo.full_name,
            ) from e

    async def fetch_reviews(self, repo: RepositoryRef, number: int) -> ReviewFetchResult:
        """
        Fetch the reviews of one pull request without raising.

        Returns:
            ReviewFetchResult holding either the reviews or the failure
        """
        try:
            reviews = await self.list_reviews(repo, number)
        except GitHubAPIError as e:
            return ReviewFetchResult(
                failure=FetchFailure(
                    repository=repo.full_name,
                    pr_number=number,
                    status_code=e.status_code,
                    message=e.message,
                )
            )
        return ReviewFetchResult(reviews=reviews)

    async def search_repositories(self, query: str, limit: int = 10) -> List[RepositorySummary]:
        """
        Search repositories by stars.

        Args:
            query: Search text; blank queries return an empty list without a request
            limit: Maximum number of results (1..100)
        """
        if not query.strip():
            return []

        response = await self._get(
            "/search/repositories",
            endpoint="search",
            params={
                "q": query,
                "sort": "stars",
                "order": "desc",
                "per_page": max(1, min(limit, 100)),
            },
        )
        self._raise_for_status(response, "Failed to search repositories")
        try:
            items = response.json().get("items", [])
            return [RepositorySummary.model_validate(item) for item in items]
        except (ValueError, AttributeError, ValidationError) as e:
            raise ProviderError(
                f"Malformed search response: {e}", status_code=502
            ) from e


async def validate_token(
    token: str,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> bool:
    """
    Check whether GitHub accepts a token.

    Returns:
        True if ``GET /user`` succeeds, False otherwise; never raises
    """
    if not token or not token.strip():
        return False

    try:
        async with GitHubClient(token, settings=settings, transport=transport) as client:
            await client.get_viewer()
    except GitHubAPIError as e:
        logger.info(f"Token validation failed with status {e.status_code}")
        return False
    return True


async def search_repositories(
    query: str,
    token: str,
    limit: int = 10,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[RepositorySummary]:
    """
    Search repositories with a one-off client.

    Raises:
        AuthError: If the token is empty or rejected
        ProviderError: On any other failure
    """
    if not token or not token.strip():
        raise AuthError("GitHub token is required")
    if not query.strip():
        return []

    async with GitHubClient(token, settings=settings, transport=transport) as client:
        return await client.search_repositories(query, limit=limit)
