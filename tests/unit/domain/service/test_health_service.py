"""Unit tests for HealthService and bounded store calls."""

import asyncio

import pytest

from mailpool.domain.error import UnavailableError
from mailpool.domain.service import HealthService
from mailpool.persistence.repository.inmemory import InMemoryStoreHealthRepository
from mailpool.util.timeout import bounded


class HangingHealthRepository(InMemoryStoreHealthRepository):
    async def ping(self) -> None:
        await asyncio.Event().wait()


class TestHealthService:
    """Tests for readiness checks."""

    @pytest.mark.asyncio
    async def test_ready_when_store_answers(self):
        service = HealthService(InMemoryStoreHealthRepository())

        assert await service.is_ready() is True

    @pytest.mark.asyncio
    async def test_not_ready_when_store_fails(self):
        repository = InMemoryStoreHealthRepository()
        repository.available = False

        assert await HealthService(repository).is_ready() is False

    @pytest.mark.asyncio
    async def test_not_ready_when_store_hangs(self):
        service = HealthService(HangingHealthRepository(), store_timeout_seconds=0.01)

        assert await service.is_ready() is False


class TestBounded:
    """Tests for the store call timeout."""

    @pytest.mark.asyncio
    async def test_result_is_passed_through(self):
        async def answer():
            return 42

        assert await bounded(answer(), 1.0, "answer") == 42

    @pytest.mark.asyncio
    async def test_timeout_becomes_unavailable(self):
        with pytest.raises(UnavailableError) as exc_info:
            await bounded(asyncio.Event().wait(), 0.01, "wait")

        assert exc_info.value.retryable is True
