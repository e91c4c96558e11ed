"""Error types and failure records for GitHub synchronization."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class RateLimitInfo(BaseModel):
    """Rate limit quota read from GitHub response headers."""

    remaining: int
    reset: datetime


class FetchFailure(BaseModel):
    """Record of a non-fatal fetch failure (per-PR review list)."""

    repository: str
    pr_number: Optional[int] = None
    status_code: Optional[int] = None
    message: str


class MalformedInputError(ValueError):
    """Raised when a repository reference is not ``owner/name``."""
    pass


class GitHubAPIError(Exception):
    """Base exception for GitHub API failures."""

    def __init__(
        self,
        message: str,
        status_code: int,
        repository: Optional[str] = None,
        rate_limit: Optional[RateLimitInfo] = None,
        rate_limit_remaining: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.repository = repository
        self.rate_limit = rate_limit
        if rate_limit_remaining is None and rate_limit is not None:
            rate_limit_remaining = rate_limit.remaining
        self.rate_limit_remaining = rate_limit_remaining

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code in (403, 429) and self.rate_limit_remaining == 0

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "status_code": self.status_code,
            "repository": self.repository,
            "rate_limit_remaining": self.rate_limit_remaining,
        }


class AuthError(GitHubAPIError):
    """Missing, empty or rejected credential."""

    def __init__(self, message: str = "GitHub token is required", **kwargs):
        kwargs.setdefault("status_code", 401)
        super().__init__(message, **kwargs)


class ProviderError(GitHubAPIError):
    """Non-2xx response or transport failure from a call the pass depends on."""
    pass
