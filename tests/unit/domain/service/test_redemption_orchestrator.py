"""Unit tests for BatchRedemptionOrchestrator."""

import asyncio

import pytest
from sqlalchemy.exc import DataError

from mailpool.config import InvitationSettings
from mailpool.domain.error import UnavailableError, ValidationError
from mailpool.domain.model import PooledIdentity
from mailpool.domain.service import (
    BatchRedemptionOrchestrator,
    CardKeyVerifier,
    IdentityStatusCache,
    InviteConfig,
    InviteRegistry,
    MintCardKeyRequest,
    ResourcePool,
)
from mailpool.domain.value import (
    CardDuration,
    CardSource,
    ErrorKind,
    IdentityProtocol,
    InviteType,
    PoolTier,
    UserId,
)
from mailpool.persistence.repository.inmemory import (
    InMemoryAuditLogRepository,
    InMemoryCardKeyRepository,
    InMemoryInviteRedemptionRepository,
    InMemoryPooledIdentityRepository,
)


class FailingAuditLogRepository(InMemoryAuditLogRepository):
    async def append(self, entries) -> None:
        raise UnavailableError()


class RejectingAuditLogRepository(InMemoryAuditLogRepository):
    def __init__(self, error: BaseException) -> None:
        super().__init__()
        self.error = error

    async def append(self, entries) -> None:
        raise self.error


@pytest.fixture
def identities() -> InMemoryPooledIdentityRepository:
    return InMemoryPooledIdentityRepository()


@pytest.fixture
def audit() -> InMemoryAuditLogRepository:
    return InMemoryAuditLogRepository()


@pytest.fixture
def verifier(codec, clock) -> CardKeyVerifier:
    return CardKeyVerifier(codec, InMemoryCardKeyRepository(), clock=clock)


@pytest.fixture
def registry(codec, clock) -> InviteRegistry:
    return InviteRegistry(
        codec,
        InMemoryInviteRedemptionRepository(),
        InvitationSettings(),
        "http://localhost:3000",
        clock=clock,
    )


def build_orchestrator(verifier, registry, identities, audit, clock):
    return BatchRedemptionOrchestrator(
        card_key_verifier=verifier,
        invite_registry=registry,
        resource_pool=ResourcePool(identities, IdentityStatusCache()),
        audit_repository=audit,
        clock=clock,
    )


@pytest.fixture
def orchestrator(verifier, registry, identities, audit, clock):
    return build_orchestrator(verifier, registry, identities, audit, clock)


async def stock(
    identities: InMemoryPooledIdentityRepository,
    count: int,
    tier: PoolTier = PoolTier.SHORT_TERM,
    protocol: IdentityProtocol = IdentityProtocol.IMAP,
) -> None:
    prefix = f"{tier.value}-{protocol.value}"
    await identities.add(
        [
            PooledIdentity(
                email=f"{prefix}-{i}@example.com", tier=tier, protocol=protocol
            )
            for i in range(count)
        ]
    )


def mint(verifier, email_count=1, duration=CardDuration.SHORT, **kwargs) -> str:
    request = MintCardKeyRequest(
        source=CardSource.TAOBAO,
        email_count=email_count,
        duration=duration,
        **kwargs,
    )
    return verifier.mint(request).token


class TestRedeemCardKeys:
    """Tests for batch card-key redemption."""

    @pytest.mark.asyncio
    async def test_bad_keys_do_not_spoil_the_batch(
        self, orchestrator, verifier, identities, clock
    ):
        """A valid, a malformed and an expired key in one batch."""
        # Arrange
        await stock(identities, 10)
        valid = mint(verifier, email_count=3)
        expired = mint(verifier, email_count=4, valid_days=1)
        clock.advance(days=2)

        # Act
        result = await orchestrator.redeem_card_keys(
            [valid, "sk-v1.garbage", expired], UserId("u1")
        )

        # Assert
        kinds = [r.error.kind if r.error else None for r in result.results]
        assert kinds == [None, ErrorKind.INVALID, ErrorKind.EXPIRED]
        assert [r.key for r in result.results] == [valid, "sk-v1.garbage", expired]
        assert len(result.allocation.short_term) == 3
        assert result.summary.valid_count == 1
        assert result.summary.invalid_count == 2
        assert result.summary.total_emails_requested == 3
        assert result.summary.total_emails_provided == 3
        assert result.summary.partial_grant is False

    @pytest.mark.asyncio
    async def test_demand_is_summed_per_tier(self, orchestrator, verifier, identities):
        await stock(identities, 10, tier=PoolTier.SHORT_TERM)
        await stock(identities, 10, tier=PoolTier.LONG_TERM)
        keys = [
            mint(verifier, email_count=2),
            mint(verifier, email_count=3),
            mint(verifier, email_count=4, duration=CardDuration.LONG),
        ]

        result = await orchestrator.redeem_card_keys(keys, UserId("u1"))

        assert len(result.allocation.short_term) == 5
        assert len(result.allocation.long_term) == 4
        assert result.summary.short_term_requested == 5
        assert result.summary.long_term_requested == 4

    @pytest.mark.asyncio
    async def test_partial_long_term_grant(self, orchestrator, verifier, identities):
        # Arrange
        await stock(identities, 6, tier=PoolTier.LONG_TERM)
        key = mint(verifier, email_count=10, duration=CardDuration.LONG)

        # Act
        result = await orchestrator.redeem_card_keys([key], UserId("u1"))

        # Assert
        assert result.results[0].is_valid is True
        assert len(result.allocation.long_term) == 6
        assert result.summary.long_term_requested == 10
        assert result.summary.long_term_provided == 6
        assert result.summary.partial_grant is True

    @pytest.mark.asyncio
    async def test_duplicate_key_in_batch_counts_once(
        self, orchestrator, verifier, identities
    ):
        await stock(identities, 10)
        key = mint(verifier, email_count=2)

        result = await orchestrator.redeem_card_keys([key, key], UserId("u1"))

        assert result.results[0].is_valid is True
        assert result.results[1].error.kind is ErrorKind.ALREADY_USED
        assert len(result.allocation.short_term) == 2

    @pytest.mark.asyncio
    async def test_valid_keys_are_audited(self, orchestrator, verifier, audit, clock):
        key = mint(verifier, email_count=7)

        await orchestrator.redeem_card_keys([key, "junk"], UserId("u1"))

        assert len(audit.entries) == 1
        entry = audit.entries[0]
        assert entry.user_id == "u1"
        assert entry.email_count == 7
        assert entry.verified_at == clock.now
        assert entry.source is CardSource.TAOBAO

    @pytest.mark.asyncio
    async def test_audit_failure_does_not_fail_redemption(
        self, verifier, registry, identities, clock
    ):
        orchestrator = build_orchestrator(
            verifier, registry, identities, FailingAuditLogRepository(), clock
        )
        await stock(identities, 1)

        result = await orchestrator.redeem_card_keys([mint(verifier)], UserId("u1"))

        assert result.summary.valid_count == 1
        assert len(result.allocation.short_term) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            DataError("INSERT", {}, Exception("value too long")),
            RuntimeError("audit sink broke"),
        ],
    )
    async def test_unexpected_audit_error_does_not_fail_redemption(
        self, verifier, registry, identities, clock, error
    ):
        # Arrange
        orchestrator = build_orchestrator(
            verifier, registry, identities, RejectingAuditLogRepository(error), clock
        )
        await stock(identities, 2)
        key = mint(verifier, email_count=2)

        # Act
        result = await orchestrator.redeem_card_keys([key], UserId("u1"))

        # Assert
        assert result.summary.valid_count == 1
        assert len(result.allocation.short_term) == 2
        assert result.summary.partial_grant is False

    @pytest.mark.asyncio
    async def test_cancellation_during_audit_propagates(
        self, verifier, registry, identities, clock
    ):
        orchestrator = build_orchestrator(
            verifier,
            registry,
            identities,
            RejectingAuditLogRepository(asyncio.CancelledError()),
            clock,
        )

        with pytest.raises(asyncio.CancelledError):
            await orchestrator.redeem_card_keys([mint(verifier)], UserId("u1"))

    @pytest.mark.asyncio
    async def test_empty_batch_is_rejected(self, orchestrator):
        with pytest.raises(ValidationError):
            await orchestrator.redeem_card_keys([], UserId("u1"))

    @pytest.mark.asyncio
    async def test_oversized_batch_is_rejected(self, orchestrator, audit):
        with pytest.raises(ValidationError):
            await orchestrator.redeem_card_keys(["junk"] * 101, UserId("u1"))

        assert audit.entries == []

    @pytest.mark.asyncio
    async def test_batch_at_the_limit_is_accepted(self, orchestrator):
        result = await orchestrator.redeem_card_keys(["junk"] * 100, UserId("u1"))

        assert result.summary.total_verified == 100
        assert result.summary.invalid_count == 100


class TestRedeemInvite:
    """Tests for invite redemption with allocation."""

    @pytest.mark.asyncio
    async def test_invite_grants_imap_and_graph(
        self, orchestrator, registry, identities
    ):
        # Arrange
        await stock(identities, 3, protocol=IdentityProtocol.IMAP)
        await stock(identities, 3, protocol=IdentityProtocol.GRAPH)
        issued = registry.issue(
            InviteConfig(
                type=InviteType.CUSTOM,
                imap_email_count=2,
                graph_email_count=1,
                max_registrations=1,
                valid_days=7,
                registration_methods={"google": True},
            )
        )

        # Act
        result = await orchestrator.redeem_invite(issued.token, UserId("u1"), "google")

        # Assert
        assert result.redemption.success is True
        assert len(result.allocation.imap) == 2
        assert len(result.allocation.graph) == 1
        assert result.requested == 3
        assert result.provided == 3
        assert result.partial_grant is False

    @pytest.mark.asyncio
    async def test_failed_redemption_grants_nothing(
        self, orchestrator, registry, identities
    ):
        await stock(identities, 3)
        issued = registry.issue(InviteConfig(type=InviteType.QUICK))
        await orchestrator.redeem_invite(issued.token, UserId("u1"), "google")

        result = await orchestrator.redeem_invite(issued.token, UserId("u2"), "google")

        assert result.redemption.success is False
        assert result.redemption.error.kind is ErrorKind.EXHAUSTED
        assert result.allocation.imap == []
        assert result.allocation.graph == []

    @pytest.mark.asyncio
    async def test_empty_pool_is_a_partial_grant(self, orchestrator, registry):
        issued = registry.issue(InviteConfig(type=InviteType.QUICK))

        result = await orchestrator.redeem_invite(issued.token, UserId("u1"), "linuxdo")

        assert result.redemption.success is True
        assert result.provided == 0
        assert result.partial_grant is True


class TestVerificationHistory:
    """Tests for the verification log lookup."""

    @pytest.mark.asyncio
    async def test_history_is_per_user_newest_first(self, orchestrator, verifier):
        first = mint(verifier, email_count=1)
        second = mint(verifier, email_count=2)
        await orchestrator.redeem_card_keys([first], UserId("u1"))
        await orchestrator.redeem_card_keys([second], UserId("u1"))
        await orchestrator.redeem_card_keys([mint(verifier)], UserId("u2"))

        history = await orchestrator.verification_history(UserId("u1"))

        assert [entry.email_count for entry in history] == [2, 1]
