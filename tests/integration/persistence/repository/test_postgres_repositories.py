"""Integration tests for the PostgreSQL repositories.

These exercise the statements the atomicity contracts rest on: the invite
compare-and-set, single-use card-key consumption, SKIP LOCKED identity
claims and the audit savepoint. Concurrent callers each get their own
session, as concurrent requests do.
"""

import asyncio
from datetime import datetime, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError

from mailpool.domain.model import (
    AuditEntry,
    CardKeyConsumption,
    PooledIdentity,
    RedemptionUse,
)
from mailpool.domain.value import (
    CardDuration,
    CardKeyId,
    CardSource,
    IdentityProtocol,
    InviteId,
    PoolTier,
    RegistrationMethod,
    UserId,
)
from mailpool.persistence.repository import (
    PostgresAuditLogRepository,
    PostgresCardKeyRepository,
    PostgresInviteRedemptionRepository,
    PostgresPooledIdentityRepository,
)
from mailpool.persistence.tables import pooled_identities_table

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def use(user: str) -> RedemptionUse:
    return RedemptionUse(
        user_id=UserId(user), method=RegistrationMethod.GOOGLE, timestamp=NOW
    )


async def in_transaction(session_factory, work):
    """Run work(session) in its own committed transaction."""
    async with session_factory() as session:
        result = await work(session)
        await session.commit()
        return result


async def stock(session_factory, count: int, **kwargs) -> None:
    identities = [
        PooledIdentity(email=f"id{i:02d}@example.com", **kwargs) for i in range(count)
    ]
    await in_transaction(
        session_factory,
        lambda session: PostgresPooledIdentityRepository(session).add(identities),
    )


class TestPostgresInviteRedemptionRepository:
    """Compare-and-set on the invite redemption record."""

    @pytest.mark.asyncio
    async def test_concurrent_first_uses_record_once(self, session_factory):
        # Arrange
        invite_id = InviteId("invite-1")

        async def redeem(user: str) -> bool:
            return await in_transaction(
                session_factory,
                lambda session: PostgresInviteRedemptionRepository(
                    session
                ).append_use_if_count(invite_id, 0, use(user)),
            )

        # Act
        outcomes = await asyncio.gather(*(redeem(f"u{i}") for i in range(5)))

        # Assert
        assert outcomes.count(True) == 1
        async with session_factory() as session:
            record = await PostgresInviteRedemptionRepository(
                session
            ).find_by_invite_id(invite_id)
        assert record.used_count == 1
        assert len(record.used_by) == 1

    @pytest.mark.asyncio
    async def test_concurrent_followup_uses_record_once(self, session_factory):
        # Arrange
        invite_id = InviteId("invite-2")
        await in_transaction(
            session_factory,
            lambda session: PostgresInviteRedemptionRepository(
                session
            ).append_use_if_count(invite_id, 0, use("first")),
        )

        async def redeem(user: str) -> bool:
            return await in_transaction(
                session_factory,
                lambda session: PostgresInviteRedemptionRepository(
                    session
                ).append_use_if_count(invite_id, 1, use(user)),
            )

        # Act
        outcomes = await asyncio.gather(*(redeem(f"u{i}") for i in range(5)))

        # Assert
        assert outcomes.count(True) == 1
        async with session_factory() as session:
            record = await PostgresInviteRedemptionRepository(
                session
            ).find_by_invite_id(invite_id)
        assert record.used_count == 2
        assert [u.user_id for u in record.used_by][0] == "first"

    @pytest.mark.asyncio
    async def test_unknown_invite_has_no_record(self, session_factory):
        async with session_factory() as session:
            repo = PostgresInviteRedemptionRepository(session)

            assert await repo.find_by_invite_id(InviteId("missing")) is None


class TestPostgresCardKeyRepository:
    """Single-use consumption."""

    @pytest.mark.asyncio
    async def test_concurrent_consumption_succeeds_once(self, session_factory):
        # Arrange
        key = CardKeyId("card-1")

        async def consume(user: str) -> bool:
            consumption = CardKeyConsumption(
                key=key, user_id=UserId(user), consumed_at=NOW
            )
            return await in_transaction(
                session_factory,
                lambda session: PostgresCardKeyRepository(session).consume(
                    consumption
                ),
            )

        # Act
        outcomes = await asyncio.gather(consume("alice"), consume("bob"))

        # Assert
        assert sorted(outcomes) == [False, True]
        async with session_factory() as session:
            stored = await PostgresCardKeyRepository(session).find_consumption(key)
        assert stored.user_id in {"alice", "bob"}


class TestPostgresPooledIdentityRepository:
    """Atomic identity claims."""

    @pytest.mark.asyncio
    async def test_concurrent_claims_are_disjoint(self, session_factory):
        # Arrange
        await stock(session_factory, 10, tier=PoolTier.SHORT_TERM)

        async def claim(user: str) -> list[str]:
            return await in_transaction(
                session_factory,
                lambda session: PostgresPooledIdentityRepository(
                    session
                ).claim_available(3, UserId(user), tier=PoolTier.SHORT_TERM),
            )

        # Act
        grants = await asyncio.gather(*(claim(f"u{i}") for i in range(4)))
        leftover = await in_transaction(
            session_factory,
            lambda session: PostgresPooledIdentityRepository(
                session
            ).claim_available(10, UserId("late"), tier=PoolTier.SHORT_TERM),
        )

        # Assert
        claimed = [email for grant in grants for email in grant] + leftover
        assert len(claimed) == len(set(claimed))
        assert all(len(grant) <= 3 for grant in grants)
        assert len(claimed) == 10

        async with session_factory() as session:
            rows = (
                await session.execute(
                    select(
                        pooled_identities_table.c.email,
                        pooled_identities_table.c.assigned_to,
                    )
                )
            ).all()
        owners = {row.email: row.assigned_to for row in rows}
        for user, grant in zip([f"u{i}" for i in range(4)], grants):
            assert all(owners[email] == user for email in grant)

    @pytest.mark.asyncio
    async def test_banned_and_other_tier_are_never_claimed(self, session_factory):
        # Arrange
        await stock(session_factory, 2, tier=PoolTier.LONG_TERM)
        await in_transaction(
            session_factory,
            lambda session: PostgresPooledIdentityRepository(session).add(
                [
                    PooledIdentity(
                        email="banned@example.com",
                        tier=PoolTier.SHORT_TERM,
                        banned=True,
                    ),
                    PooledIdentity(
                        email="graph@example.com",
                        tier=PoolTier.SHORT_TERM,
                        protocol=IdentityProtocol.GRAPH,
                    ),
                ]
            ),
        )

        # Act
        claimed = await in_transaction(
            session_factory,
            lambda session: PostgresPooledIdentityRepository(
                session
            ).claim_available(5, UserId("u1"), tier=PoolTier.SHORT_TERM),
        )

        # Assert
        assert claimed == ["graph@example.com"]

    @pytest.mark.asyncio
    async def test_duplicate_emails_are_skipped(self, session_factory):
        await stock(session_factory, 2, tier=PoolTier.SHORT_TERM)

        inserted = await in_transaction(
            session_factory,
            lambda session: PostgresPooledIdentityRepository(session).add(
                [
                    PooledIdentity(email="id00@example.com", tier=PoolTier.SHORT_TERM),
                    PooledIdentity(email="new@example.com", tier=PoolTier.SHORT_TERM),
                ]
            ),
        )

        assert inserted == 1


class TestPostgresAuditLogRepository:
    """Audit inserts run in a savepoint."""

    @pytest.mark.asyncio
    async def test_rejected_audit_insert_keeps_request_writes(self, session_factory):
        # Arrange
        await stock(session_factory, 1, tier=PoolTier.SHORT_TERM)
        oversized = AuditEntry(
            subject_key="k" * 65,
            user_id=UserId("u1"),
            verified_at=NOW,
            email_count=1,
            duration=CardDuration.SHORT,
            source=CardSource.TAOBAO,
        )

        # Act
        async with session_factory() as session:
            claimed = await PostgresPooledIdentityRepository(
                session
            ).claim_available(1, UserId("u1"))
            with pytest.raises(DBAPIError):
                await PostgresAuditLogRepository(session).append([oversized])
            await session.commit()

        # Assert
        async with session_factory() as session:
            owner = (
                await session.execute(
                    select(pooled_identities_table.c.assigned_to).where(
                        pooled_identities_table.c.email == claimed[0]
                    )
                )
            ).scalar_one()
        assert owner == "u1"

    @pytest.mark.asyncio
    async def test_history_is_newest_first(self, session_factory):
        entries = [
            AuditEntry(
                subject_key=f"key-{day}",
                user_id=UserId("u1"),
                verified_at=NOW.replace(day=day),
                email_count=day,
                duration=CardDuration.LONG,
                source=CardSource.XIANYU,
            )
            for day in (1, 3, 2)
        ]
        await in_transaction(
            session_factory,
            lambda session: PostgresAuditLogRepository(session).append(entries),
        )

        async with session_factory() as session:
            history = await PostgresAuditLogRepository(session).find_by_user(
                UserId("u1"), limit=2
            )

        assert [entry.subject_key for entry in history] == ["key-3", "key-2"]
