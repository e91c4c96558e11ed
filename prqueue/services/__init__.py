"""Business logic services package."""

from prqueue.services.github_client import (
    GitHubClient,
    get_rate_limit_info,
    search_repositories,
    validate_token,
)
from prqueue.services.normalizer import normalize_pull_request
from prqueue.services.pr_sync import (
    PRSyncService,
    SyncPhase,
    get_pr_sync_service,
    parse_repositories,
)
from prqueue.services.review_status import classify, last_review
from prqueue.services.time_format import format_relative_time

__all__ = [
    'GitHubClient',
    'get_rate_limit_info',
    'search_repositories',
    'validate_token',
    'normalize_pull_request',
    'PRSyncService',
    'SyncPhase',
    'get_pr_sync_service',
    'parse_repositories',
    'classify',
    'last_review',
    'format_relative_time',
]
