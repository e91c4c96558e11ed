"""
Metrics collection and emission for synchronization passes.

This module tracks:
- Pass execution time and final status
- Repositories and pull requests processed
- Non-fatal review fetch failures
- GitHub API call latency per endpoint
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional

from prqueue.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class SyncMetrics:
    """
    Collects metrics during one synchronization pass.

    Tracks:
    - Start/end time and duration
    - Repository and pull request counts
    - Review fetch failures
    - API call counts and latency
    """

    def __init__(self, sync_id: str):
        self.sync_id = sync_id

        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        self.repositories_count: int = 0
        self.pull_requests_count: int = 0
        self.review_failures_count: int = 0

        self.api_calls: Dict[str, int] = {}
        self.api_latencies: Dict[str, list[float]] = {}

        self.status: str = "running"
        self.error_message: Optional[str] = None

    def start(self) -> None:
        """Mark pass start."""
        self.start_time = datetime.now(timezone.utc)
        self.status = "running"

    def complete(self, status: str = "completed", error_message: Optional[str] = None) -> None:
        """
        Mark pass completion.

        Args:
            status: Final status ('completed' or 'failed')
            error_message: Error message if failed
        """
        self.end_time = datetime.now(timezone.utc)
        self.status = status
        self.error_message = error_message

        if self.start_time:
            duration = (self.end_time - self.start_time).total_seconds()
            self.duration_ms = int(duration * 1000)

        logger.info(
            f"Sync {self.sync_id} {status}",
            extra={
                "sync_id": self.sync_id,
                "status": self.status,
                "duration_ms": self.duration_ms,
                "repositories_count": self.repositories_count,
                "pull_requests_count": self.pull_requests_count,
                "review_failures_count": self.review_failures_count,
            }
        )

    def record_api_call(self, endpoint: str, duration_ms: float) -> None:
        """Record one API call and its latency under an endpoint name."""
        self.api_calls[endpoint] = self.api_calls.get(endpoint, 0) + 1
        self.api_latencies.setdefault(endpoint, []).append(duration_ms)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary = {
            "sync_id": self.sync_id,
            "status": self.status,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.duration_ms,
            "repositories_count": self.repositories_count,
            "pull_requests_count": self.pull_requests_count,
            "review_failures_count": self.review_failures_count,
            "api_calls": self.api_calls,
        }

        if self.api_latencies:
            latency_stats = {}
            for endpoint, latencies in self.api_latencies.items():
                if latencies:
                    latency_stats[endpoint] = {
                        "count": len(latencies),
                        "min_ms": round(min(latencies), 2),
                        "max_ms": round(max(latencies), 2),
                        "avg_ms": round(sum(latencies) / len(latencies), 2),
                    }
            summary["api_latencies"] = latency_stats

        if self.error_message:
            summary["error_message"] = self.error_message

        return summary


@asynccontextmanager
async def track_api_call(
    metrics: Optional[SyncMetrics],
    endpoint: str,
    logger_adapter,
    path: Optional[str] = None,
    method: str = "GET",
) -> AsyncIterator[Dict[str, Any]]:
    """
    Context manager to time a GitHub API call.

    The yielded dict lets the caller attach ``status_code`` and, for non-2xx
    responses, an ``error`` before the call is logged.

    Usage:
        async with track_api_call(metrics, "pulls", logger, path=url) as call:
            response = await client.get(url)
            call["status_code"] = response.status_code
    """
    call: Dict[str, Any] = {"status_code": None, "error": None}
    start_time = time.perf_counter()
    error = None

    try:
        yield call
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000

        if metrics:
            metrics.record_api_call(endpoint, duration_ms)

        log_api_call(
            logger_adapter,
            endpoint=path or endpoint,
            method=method,
            status_code=call["status_code"],
            duration_ms=duration_ms,
            error=str(error) if error else call["error"],
        )


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric.

    Metrics are written to the structured log; a log shipper turns them
    into time series.
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )
