"""Data models for the PR review queue."""

from .error import (
    AuthError,
    FetchFailure,
    GitHubAPIError,
    MalformedInputError,
    ProviderError,
    RateLimitInfo,
)
from .processed import PRStatus, ProcessedPR, ReviewFetchResult, SyncResult
from .pull_request import (
    BranchRef,
    GitHubUser,
    Label,
    RawPullRequest,
    ReviewEvent,
    ReviewState,
)
from .repository import RepositoryRef, RepositorySummary

__all__ = [
    # Repository models
    "RepositoryRef",
    "RepositorySummary",
    # Pull request models
    "GitHubUser",
    "Label",
    "BranchRef",
    "ReviewState",
    "ReviewEvent",
    "RawPullRequest",
    # Output models
    "PRStatus",
    "ProcessedPR",
    "ReviewFetchResult",
    "SyncResult",
    # Errors
    "GitHubAPIError",
    "AuthError",
    "ProviderError",
    "MalformedInputError",
    "FetchFailure",
    "RateLimitInfo",
]
