"""
PR synchronization service.

Runs one synchronization pass: resolves the viewer, fetches open pull
requests and their reviews for every watched repository concurrently,
classifies each pull request for the viewer and returns the records sorted
by most recent update.

Failure semantics:
- empty credential, rejected credential, a malformed repository reference
  or a failed pull request list abort the whole pass
- a failed review list is absorbed; that PR is kept with no reviews
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, TypeVar, Union

import httpx

from prqueue.config import Settings, settings as default_settings
from prqueue.models.error import AuthError, FetchFailure, GitHubAPIError
from prqueue.models.processed import ProcessedPR, SyncResult
from prqueue.models.pull_request import GitHubUser, RawPullRequest
from prqueue.models.repository import RepositoryRef
from prqueue.services.github_client import GitHubClient
from prqueue.services.normalizer import normalize_pull_request
from prqueue.utils.logging import get_logger, log_error_with_context, log_phase_transition
from prqueue.utils.metrics import SyncMetrics, emit_metric

logger = get_logger(__name__)

T = TypeVar('T')

RepositoryInput = Union[RepositoryRef, str]


class SyncPhase(str, Enum):
    """Phases of a synchronization pass."""

    IDLE = "idle"
    FETCHING_VIEWER = "fetching_viewer"
    FETCHING_REPOS = "fetching_repos"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


PhaseListener = Callable[[SyncPhase], None]


def parse_repositories(repos: Iterable[RepositoryInput]) -> List[RepositoryRef]:
    """
    Parse and de-duplicate repository references, keeping input order.

    Duplicates are matched case-insensitively; the first spelling is kept.

    Raises:
        MalformedInputError: On the first entry that is not ``owner/name``
    """
    parsed: List[RepositoryRef] = []
    seen = set()
    for repo in repos:
        ref = repo if isinstance(repo, RepositoryRef) else RepositoryRef.parse(repo)
        if ref.key not in seen:
            seen.add(ref.key)
            parsed.append(ref)
    return parsed


async def gather_or_cancel(aws: Sequence[Awaitable[T]]) -> List[T]:
    """
    Await all awaitables concurrently, in input order.

    If any of them raises, the others are cancelled and awaited before the
    first error is re-raised.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class _RepositoryBatch:
    """Pull requests of one repository with their review fetch outcomes."""

    def __init__(self, repo: RepositoryRef, pulls: List[RawPullRequest], failures: List[FetchFailure]):
        self.repo = repo
        self.pulls = pulls
        self.failures = failures


class PRSyncService:
    """Builds the review queue for a viewer across many repositories."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        phase_listener: Optional[PhaseListener] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the service.

        Args:
            settings: Settings for the GitHub client and staleness threshold
            transport: Optional httpx transport handed to each pass's client
            phase_listener: Called with every phase the pass enters
            http_client: Optional shared client; borrowed by each pass, never closed
        """
        self.settings = settings or default_settings
        self.transport = transport
        self.phase_listener = phase_listener
        self.http_client = http_client

    @property
    def stagnant_after(self) -> timedelta:
        return timedelta(days=self.settings.stagnant_after_days)

    async def sync(self, repos: Iterable[RepositoryInput], credential: str) -> List[ProcessedPR]:
        """
        Run a synchronization pass and return the sorted records.

        Args:
            repos: ``owner/name`` strings or RepositoryRef values
            credential: GitHub bearer token

        Returns:
            ProcessedPR records, most recently updated first

        Raises:
            AuthError: Empty or rejected credential
            MalformedInputError: A repository reference is not ``owner/name``
            ProviderError: Viewer or pull request list fetch failed
        """
        result = await self.sync_detailed(repos, credential)
        return result.pulls

    async def sync_detailed(
        self,
        repos: Iterable[RepositoryInput],
        credential: str,
        now: Optional[datetime] = None,
    ) -> SyncResult:
        """
        Run a synchronization pass and return records plus pass details.

        Args:
            repos: ``owner/name`` strings or RepositoryRef values
            credential: GitHub bearer token
            now: Reference time for classification, defaults to the wall clock
        """
        if not credential or not credential.strip():
            raise AuthError("GitHub token is required")

        refs = parse_repositories(repos)
        if not refs:
            return SyncResult()

        sync_id = uuid.uuid4().hex[:12]
        pass_logger = logger.with_context(sync_id=sync_id)
        metrics = SyncMetrics(sync_id)
        metrics.repositories_count = len(refs)
        metrics.start()
        self._enter(SyncPhase.IDLE, sync_id, pass_logger)

        try:
            async with GitHubClient(
                credential,
                settings=self.settings,
                metrics=metrics,
                transport=self.transport,
                http_client=self.http_client,
            ) as client:
                self._enter(SyncPhase.FETCHING_VIEWER, sync_id, pass_logger)
                viewer = await client.get_viewer()
                pass_logger.info(f"Resolved viewer {viewer.login}")

                self._enter(SyncPhase.FETCHING_REPOS, sync_id, pass_logger)
                batches = await gather_or_cancel(
                    [self._fetch_repository(client, ref, pass_logger) for ref in refs]
                )

            self._enter(SyncPhase.AGGREGATING, sync_id, pass_logger)
            result = self._aggregate(batches, viewer, now or datetime.now(timezone.utc))
        except GitHubAPIError as e:
            self._enter(SyncPhase.FAILED, sync_id, pass_logger)
            metrics.complete(status="failed", error_message=e.message)
            pass_logger.error(
                f"Sync failed: {e.message}",
                extra={"status_code": e.status_code, "repository": e.repository},
            )
            raise
        except asyncio.CancelledError:
            self._enter(SyncPhase.FAILED, sync_id, pass_logger)
            metrics.complete(status="failed", error_message="cancelled")
            pass_logger.warning("Sync cancelled before completion")
            raise
        except Exception as e:
            self._enter(SyncPhase.FAILED, sync_id, pass_logger)
            metrics.complete(status="failed", error_message=str(e))
            log_error_with_context(pass_logger, "Sync failed unexpectedly", e, sync_id=sync_id)
            raise

        metrics.pull_requests_count = len(result.pulls)
        metrics.review_failures_count = len(result.review_failures)
        self._enter(SyncPhase.DONE, sync_id, pass_logger)
        metrics.complete(status="completed")
        emit_metric("sync.pull_requests", len(result.pulls), sync_id=sync_id)
        return result

    async def _fetch_repository(
        self,
        client: GitHubClient,
        repo: RepositoryRef,
        pass_logger,
    ) -> _RepositoryBatch:
        """Fetch one repository's open PRs, then all their reviews concurrently."""
        repo_logger = pass_logger.with_context(repository=repo.full_name)
        pulls = _unique_by_number(await client.list_open_pulls(repo))
        repo_logger.info(f"Fetched {len(pulls)} open pull requests")

        outcomes = await asyncio.gather(
            *(client.fetch_reviews(repo, pr.number) for pr in pulls)
        )

        enriched: List[RawPullRequest] = []
        failures: List[FetchFailure] = []
        for pr, outcome in zip(pulls, outcomes):
            if outcome.ok:
                enriched.append(pr.model_copy(update={"reviews": outcome.reviews}))
            else:
                repo_logger.warning(
                    f"Review fetch failed for #{pr.number}, continuing without reviews",
                    extra={"pr_number": pr.number, "status_code": outcome.failure.status_code},
                )
                failures.append(outcome.failure)
                enriched.append(pr.model_copy(update={"reviews": []}))

        return _RepositoryBatch(repo, enriched, failures)

    def _aggregate(
        self,
        batches: List[_RepositoryBatch],
        viewer: GitHubUser,
        now: datetime,
    ) -> SyncResult:
        records: List[ProcessedPR] = []
        failures: List[FetchFailure] = []
        for batch in batches:
            failures.extend(batch.failures)
            records.extend(
                normalize_pull_request(
                    pr,
                    batch.repo,
                    viewer.login,
                    now=now,
                    stagnant_after=self.stagnant_after,
                )
                for pr in batch.pulls
            )

        # sorted() is stable with reverse=True, ties keep provider order
        records = sorted(records, key=lambda record: record.updated_at_timestamp, reverse=True)

        return SyncResult(
            pulls=records,
            viewer=viewer,
            repositories=[batch.repo.full_name for batch in batches],
            review_failures=failures,
        )

    def _enter(self, phase: SyncPhase, sync_id: str, pass_logger) -> None:
        log_phase_transition(pass_logger, sync_id=sync_id, phase=phase.value)
        if self.phase_listener:
            self.phase_listener(phase)


def _unique_by_number(pulls: List[RawPullRequest]) -> List[RawPullRequest]:
    seen = set()
    unique = []
    for pr in pulls:
        if pr.number not in seen:
            seen.add(pr.number)
            unique.append(pr)
    return unique


def get_pr_sync_service() -> PRSyncService:
    """
    Factory function to create PRSyncService with settings from config.

    Returns:
        PRSyncService instance configured with application settings
    """
    return PRSyncService(settings=default_settings)
