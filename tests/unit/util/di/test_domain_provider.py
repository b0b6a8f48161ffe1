"""Unit tests for the domain service providers."""

import pytest

from mailpool.domain.service import (
    BatchRedemptionOrchestrator,
    CardKeyVerifier,
    HealthService,
    InviteRegistry,
    ResourcePool,
)
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestDomainProvider:
    """Tests for how services are built from settings."""

    @pytest.mark.asyncio
    async def test_services_use_configured_store_timeout(self, unit_env, monkeypatch):
        # Settings are read on first resolution
        monkeypatch.setenv("REDEMPTION__STORE_TIMEOUT_SECONDS", "1.5")
        monkeypatch.setenv("REDEMPTION__BATCH_LIMIT", "7")

        services = [
            await unit_env.get(service_type)
            for service_type in (
                InviteRegistry,
                CardKeyVerifier,
                ResourcePool,
                BatchRedemptionOrchestrator,
                HealthService,
            )
        ]

        assert [service.store_timeout_seconds for service in services] == [1.5] * 5
        assert services[3].batch_limit == 7
