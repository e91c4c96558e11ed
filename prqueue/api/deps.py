"""
Shared request dependencies for the REST API.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException
from fastapi.responses import JSONResponse

from prqueue.config import settings
from prqueue.models.error import GitHubAPIError


async def get_optional_github_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """
    Resolve the GitHub token for a request, if any.

    Accepts ``Authorization: Bearer <token>`` (or ``token <token>``) and falls
    back to the configured ``GITHUB_TOKEN``.

    Returns:
        The token, or None when neither the header nor the setting provides one

    Raises:
        HTTPException: 401 if the Authorization header uses another scheme
    """
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() in ("bearer", "token") and value.strip():
            return value.strip()
        raise HTTPException(status_code=401, detail="Malformed Authorization header")

    return settings.github_token or None


async def get_github_token(token: Optional[str] = Depends(get_optional_github_token)) -> str:
    """
    Resolve the GitHub token for a request, requiring one.

    Raises:
        HTTPException: 401 if no token is available
    """
    if not token:
        raise HTTPException(status_code=401, detail="GitHub token is required")
    return token


def github_error_response(error: GitHubAPIError) -> JSONResponse:
    """
    Map a GitHub failure to an HTTP response the frontend can act on.

    401 means a bad token, 429 means the quota is exhausted, 504 means the
    pass timed out; everything else is reported as a bad gateway.
    """
    if error.status_code == 401:
        status_code = 401
    elif error.is_rate_limited:
        status_code = 429
    elif error.status_code == 504:
        status_code = 504
    else:
        status_code = 502

    return JSONResponse(status_code=status_code, content=error.to_dict())
