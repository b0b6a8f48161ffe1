"""Unit tests for pooled identity use cases."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from mailpool.application.usecase.pool import (
    AddIdentitiesRequest,
    AddIdentitiesUseCase,
    GetPoolStatsUseCase,
    IdentityInput,
    RefreshPoolUseCase,
    UpdateIdentityStatusRequest,
    UpdateIdentityStatusUseCase,
)
from mailpool.domain.error import NotFoundError
from mailpool.domain.repository import PooledIdentityRepository
from mailpool.domain.value import PoolTier
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


def add_request(*emails: str) -> AddIdentitiesRequest:
    return AddIdentitiesRequest(
        identities=[
            IdentityInput(email=email, tier=PoolTier.SHORT_TERM) for email in emails
        ]
    )


class TestAddIdentities:
    """Tests for AddIdentitiesUseCase."""

    @pytest.mark.asyncio
    async def test_add_and_dedup(self, unit_env):
        use_case = await unit_env.get(AddIdentitiesUseCase)

        first = await use_case.execute(add_request("a@example.com", "b@example.com"))
        second = await use_case.execute(add_request("A@Example.com", "c@example.com"))

        assert (first.added, first.skipped) == (2, 0)
        assert (second.added, second.skipped) == (1, 1)

    def test_email_must_contain_at_sign(self):
        with pytest.raises(PydanticValidationError):
            IdentityInput(email="not-an-email", tier=PoolTier.LONG_TERM)

    def test_empty_request_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            AddIdentitiesRequest(identities=[])


class TestUpdateIdentityStatus:
    """Tests for UpdateIdentityStatusUseCase."""

    @pytest.mark.asyncio
    async def test_ban_known_identity(self, unit_env):
        # Arrange
        add = await unit_env.get(AddIdentitiesUseCase)
        update = await unit_env.get(UpdateIdentityStatusUseCase)
        stats = await unit_env.get(GetPoolStatsUseCase)
        await add.execute(add_request("a@example.com", "b@example.com"))

        # Act
        response = await update.execute(
            UpdateIdentityStatusRequest(email=" A@example.com ", banned=True)
        )

        # Assert
        assert response.email == "a@example.com"
        counts = await stats.execute()
        assert (counts.total, counts.banned, counts.active) == (2, 1, 1)

    @pytest.mark.asyncio
    async def test_unknown_identity_is_not_found(self, unit_env):
        update = await unit_env.get(UpdateIdentityStatusUseCase)

        with pytest.raises(NotFoundError):
            await update.execute(
                UpdateIdentityStatusRequest(email="ghost@example.com", banned=True)
            )


class TestRefreshPool:
    """Tests for RefreshPoolUseCase."""

    @pytest.mark.asyncio
    async def test_refresh_sees_store_changes(self, unit_env):
        add = await unit_env.get(AddIdentitiesUseCase)
        refresh = await unit_env.get(RefreshPoolUseCase)
        repository = await unit_env.get(PooledIdentityRepository)
        await add.execute(add_request("a@example.com"))
        await repository.set_banned("a@example.com", True)

        counts = await refresh.execute()

        assert counts.banned == 1
        assert counts.active == 0
