"""
Builders for GitHub payloads and models used across unit tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from prqueue.models.pull_request import RawPullRequest, ReviewEvent

NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)
VIEWER = "octocat"


def iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def review_json(login: Optional[str], state: str, submitted_at: Optional[datetime]) -> Dict[str, Any]:
    return {
        "id": 1,
        "user": {"login": login, "avatar_url": f"https://avatars.example/{login}"} if login else None,
        "state": state,
        "submitted_at": iso(submitted_at) if submitted_at else None,
        "body": "",
    }


def pr_json(
    number: int = 1,
    updated_at: Optional[datetime] = None,
    created_at: Optional[datetime] = None,
    author: str = "hubot",
    labels: Optional[List[str]] = None,
    draft: bool = False,
    repo: str = "acme/widgets",
) -> Dict[str, Any]:
    updated_at = updated_at or NOW - timedelta(hours=1)
    created_at = created_at or updated_at - timedelta(days=1)
    return {
        "id": 1000 + number,
        "number": number,
        "title": f"Change #{number}",
        "body": None,
        "state": "open",
        "draft": draft,
        "created_at": iso(created_at),
        "updated_at": iso(updated_at),
        "closed_at": None,
        "merged_at": None,
        "user": {"login": author, "avatar_url": f"https://avatars.example/{author}"},
        "labels": [{"name": name, "color": "ededed"} for name in (labels or [])],
        "html_url": f"https://github.com/{repo}/pull/{number}",
        "head": {"ref": f"feature-{number}"},
        "base": {"ref": "main"},
        "requested_reviewers": [],
    }


def make_review(login: Optional[str], state: str, submitted_at: Optional[datetime]) -> ReviewEvent:
    return ReviewEvent.model_validate(review_json(login, state, submitted_at))


def make_pr(reviews: Optional[List[ReviewEvent]] = None, **kwargs: Any) -> RawPullRequest:
    pr = RawPullRequest.model_validate(pr_json(**kwargs))
    return pr.model_copy(update={"reviews": reviews or []})


