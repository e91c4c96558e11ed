"""
Token validation and repository search endpoints used by the settings screen.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from prqueue.api.deps import get_github_token, get_optional_github_token, github_error_response
from prqueue.models.error import GitHubAPIError
from prqueue.models.repository import RepositorySummary
from prqueue.services import github_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["user"])


@router.get("/user/validate")
async def validate_user_token(token: Optional[str] = Depends(get_optional_github_token)) -> dict:
    """Report whether GitHub accepts the token; no token at all is simply invalid."""
    if not token:
        return {"valid": False}
    return {"valid": await github_client.validate_token(token)}


@router.get("/repositories/search", response_model=List[RepositorySummary])
async def search_repositories(
    q: str = Query(""),
    limit: int = Query(10, ge=1, le=100),
    token: str = Depends(get_github_token),
):
    """
    Search GitHub repositories to add to the watch list.

    Args:
        q: Search text; blank returns an empty list
        limit: Maximum number of results
    """
    try:
        return await github_client.search_repositories(q, token, limit=limit)
    except GitHubAPIError as e:
        logger.warning(f"Repository search failed: {e.message} (status {e.status_code})")
        return github_error_response(e)
