"""
Utility modules for the PR review queue.
"""

from prqueue.utils.logging import (
    get_logger,
    setup_logging,
    log_phase_transition,
    log_api_call,
    log_error_with_context,
)
from prqueue.utils.metrics import (
    SyncMetrics,
    track_api_call,
    emit_metric,
)
from prqueue.utils.resilience import run_with_timeout

__all__ = [
    "get_logger",
    "setup_logging",
    "log_phase_transition",
    "log_api_call",
    "log_error_with_context",
    "SyncMetrics",
    "track_api_call",
    "emit_metric",
    "run_with_timeout",
]
