"""Mapping of raw GitHub pull requests onto queue records."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from prqueue.models.processed import ProcessedPR
from prqueue.models.pull_request import RawPullRequest
from prqueue.models.repository import RepositoryRef
from prqueue.services.review_status import STAGNANT_AFTER, classify, last_review
from prqueue.services.time_format import format_relative_time


def normalize_pull_request(
    pr: RawPullRequest,
    repo: RepositoryRef,
    viewer_login: str,
    now: Optional[datetime] = None,
    stagnant_after: timedelta = STAGNANT_AFTER,
) -> ProcessedPR:
    """
    Build the display record for one pull request.

    ``last_reviewed_by_current_user`` is filled whenever the viewer has a
    qualifying review, even if the status is pending or stagnant.
    """
    now = now or datetime.now(timezone.utc)
    review = last_review(pr.reviews, viewer_login)

    return ProcessedPR(
        id=pr.id,
        title=pr.title,
        repo=repo.full_name,
        number=pr.number,
        author=pr.user.login,
        author_avatar=pr.user.avatar_url,
        status=classify(pr, viewer_login, now=now, stagnant_after=stagnant_after),
        updated_at=format_relative_time(pr.updated_at, now=now),
        updated_at_timestamp=pr.updated_at,
        created_at=format_relative_time(pr.created_at, now=now),
        created_at_timestamp=pr.created_at,
        labels=[label.name for label in pr.labels],
        url=pr.html_url,
        last_reviewed_by_current_user=review.submitted_at if review else None,
    )
