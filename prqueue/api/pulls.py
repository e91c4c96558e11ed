"""
Review queue REST API endpoints.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from prqueue.api.deps import get_github_token, github_error_response
from prqueue.config import settings
from prqueue.models.error import GitHubAPIError, MalformedInputError
from prqueue.services.pr_sync import get_pr_sync_service
from prqueue.utils.resilience import run_with_timeout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pulls", tags=["pulls"])

pr_sync_service = get_pr_sync_service()


@router.get("")
async def list_pull_requests(
    repo: Optional[List[str]] = Query(None),
    token: str = Depends(get_github_token),
):
    """
    Build the review queue for the authenticated user.

    Args:
        repo: Repositories as ``owner/name``; defaults to the configured
            watched repositories
        token: GitHub token from the Authorization header or settings

    Returns:
        Pull requests with their review status, most recently updated first
    """
    repos = repo if repo else settings.watched_repositories

    try:
        pulls = await run_with_timeout(
            pr_sync_service.sync(repos, token),
            settings.sync_timeout_seconds,
        )
    except MalformedInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GitHubAPIError as e:
        logger.warning(f"Review queue sync failed: {e.message} (status {e.status_code})")
        return github_error_response(e)

    logger.info(f"Returning {len(pulls)} pull requests for {len(repos)} repositories")
    return [pr.model_dump(mode="json", by_alias=True) for pr in pulls]
