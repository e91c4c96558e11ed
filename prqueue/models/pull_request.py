"""Pull request and review data models as returned by the GitHub REST API."""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class ReviewState(str, Enum):
    """State of a submitted (or pending) pull request review."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"  # draft review, never submitted


class GitHubUser(BaseModel):
    """GitHub account (PR author, reviewer or the authenticated viewer)."""

    login: str
    id: Optional[int] = None
    avatar_url: str = ""
    name: Optional[str] = None
    email: Optional[str] = None


class Label(BaseModel):
    """Issue label attached to a pull request."""

    name: str
    color: Optional[str] = None


class BranchRef(BaseModel):
    """Head or base branch of a pull request."""

    ref: str


class ReviewEvent(BaseModel):
    """A single review left on a pull request."""

    model_config = ConfigDict(frozen=True)

    user: Optional[GitHubUser] = None  # null for deleted accounts
    state: ReviewState
    submitted_at: Optional[datetime] = None


class RawPullRequest(BaseModel):
    """Open pull request from ``GET /repos/{owner}/{name}/pulls``."""

    id: int
    number: int
    title: str
    body: Optional[str] = None
    state: Literal["open", "closed"] = "open"
    draft: bool = False
    created_at: datetime
    updated_at: datetime
    closed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    user: GitHubUser
    labels: List[Label] = []
    html_url: str
    head: Optional[BranchRef] = None
    base: Optional[BranchRef] = None
    requested_reviewers: List[GitHubUser] = []
    reviews: List[ReviewEvent] = []
