"""
Review correlation and status classification.

A pull request's status answers one question for a single viewer: does this
PR need my attention (again)? Staleness is checked first and is independent
of who reviewed.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from prqueue.models.processed import PRStatus
from prqueue.models.pull_request import RawPullRequest, ReviewEvent, ReviewState
from prqueue.services.time_format import as_utc

STAGNANT_AFTER = timedelta(days=5)


def is_qualifying_review(review: ReviewEvent, viewer_login: str) -> bool:
    """True for a submitted, non-dismissed review authored by the viewer."""
    return (
        review.state != ReviewState.DISMISSED
        and review.submitted_at is not None
        and review.user is not None
        and review.user.login == viewer_login
    )


def last_review(reviews: Iterable[ReviewEvent], viewer_login: str) -> Optional[ReviewEvent]:
    """
    Find the viewer's most recent qualifying review.

    Args:
        reviews: Review events of one pull request, in provider order
        viewer_login: Login of the authenticated viewer

    Returns:
        The latest qualifying review, or None if the viewer never left one.
        Reviews with identical ``submitted_at`` resolve to the first one in
        input order.
    """
    latest: Optional[ReviewEvent] = None
    for review in reviews:
        if not is_qualifying_review(review, viewer_login):
            continue
        if latest is None or as_utc(review.submitted_at) > as_utc(latest.submitted_at):
            latest = review
    return latest


def classify(
    pr: RawPullRequest,
    viewer_login: str,
    now: Optional[datetime] = None,
    stagnant_after: timedelta = STAGNANT_AFTER,
) -> PRStatus:
    """
    Classify a pull request for the viewer.

    Rules, first match wins:
        1. stagnant   - no update for ``stagnant_after`` (overrides approvals)
        2. pending    - viewer has no qualifying review
        3. re-review  - PR updated after the viewer's last review
        4. reviewed   - viewer's last review approved it
        5. pending    - viewer commented or requested changes, nothing since

    The draft flag does not change the outcome.
    """
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    updated_at = as_utc(pr.updated_at)

    if now - updated_at >= stagnant_after:
        return PRStatus.STAGNANT

    review = last_review(pr.reviews, viewer_login)
    if review is None:
        return PRStatus.PENDING

    if updated_at > as_utc(review.submitted_at):
        return PRStatus.RE_REVIEW

    if review.state == ReviewState.APPROVED:
        return PRStatus.REVIEWED

    return PRStatus.PENDING
