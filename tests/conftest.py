"""Test configuration and fixtures."""

import os
from datetime import datetime, timedelta, timezone

# Must be set before mailpool.interface.api.app is imported
os.environ.setdefault("CRYPTO__SECRET", "test-sealing-secret-0123456789")
os.environ.setdefault("ENVIRONMENT", "test")

import logfire  # noqa: E402
import pytest  # noqa: E402

from mailpool.domain.service import TokenCodec  # noqa: E402

logfire.configure(send_to_logfire=False, console=False)

TEST_SECRET = os.environ["CRYPTO__SECRET"]


class FakeClock:
    """Controllable clock for expiry tests."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(secret=TEST_SECRET)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
