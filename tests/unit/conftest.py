"""
Shared fixtures for unit tests.
"""

from typing import Callable, List

import httpx
import pytest

from prqueue.config import Settings


@pytest.fixture
def github_settings() -> Settings:
    """Settings with a fake API base so no real host is ever contacted."""
    return Settings(
        github_api_base="https://github.test",
        github_token=None,
        watched_repositories=[],
        request_timeout_seconds=5.0,
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def recording_transport():
    """Factory for transports that record requests: ``recording_transport(handler)``."""
    return RecordingTransport
