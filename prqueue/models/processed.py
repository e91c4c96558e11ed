"""Display-ready pull request records produced by a synchronization pass."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .error import FetchFailure
from .pull_request import GitHubUser, ReviewEvent


class PRStatus(str, Enum):
    """Review obligation of the viewer for a pull request."""

    PENDING = "pending"
    RE_REVIEW = "re-review"
    STAGNANT = "stagnant"
    REVIEWED = "reviewed"


class ProcessedPR(BaseModel):
    """Normalized pull request as shown in the review queue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    repo: str
    number: int
    author: str
    author_avatar: str = Field(alias="authorAvatar")
    status: PRStatus
    updated_at: str = Field(alias="updatedAt")
    updated_at_timestamp: datetime = Field(alias="updatedAtTimestamp")
    created_at: str = Field(alias="createdAt")
    created_at_timestamp: datetime = Field(alias="createdAtTimestamp")
    labels: List[str] = []
    url: str
    last_reviewed_by_current_user: Optional[datetime] = Field(
        default=None, alias="lastReviewedByCurrentUser"
    )


class ReviewFetchResult(BaseModel):
    """Outcome of fetching one PR's reviews: the list, or the failure."""

    reviews: List[ReviewEvent] = []
    failure: Optional[FetchFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class SyncResult(BaseModel):
    """Full outcome of a synchronization pass."""

    pulls: List[ProcessedPR] = []
    viewer: Optional[GitHubUser] = None
    repositories: List[str] = []
    review_failures: List[FetchFailure] = []
