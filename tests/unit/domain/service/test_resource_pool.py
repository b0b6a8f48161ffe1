"""Unit tests for ResourcePool and IdentityStatusCache."""

import asyncio

import pytest

from mailpool.domain.model import PooledIdentity
from mailpool.domain.service import IdentityStatusCache, ResourcePool
from mailpool.domain.service.resource_pool import CacheState
from mailpool.domain.value import IdentityProtocol, PoolTier, UserId
from mailpool.persistence.repository.inmemory import InMemoryPooledIdentityRepository


@pytest.fixture
def identities() -> InMemoryPooledIdentityRepository:
    return InMemoryPooledIdentityRepository()


@pytest.fixture
def cache() -> IdentityStatusCache:
    return IdentityStatusCache()


@pytest.fixture
def pool(identities, cache) -> ResourcePool:
    return ResourcePool(identity_repository=identities, status_cache=cache)


def make_identities(
    count: int,
    tier: PoolTier = PoolTier.SHORT_TERM,
    protocol: IdentityProtocol = IdentityProtocol.IMAP,
    prefix: str = "box",
    banned: bool = False,
) -> list[PooledIdentity]:
    return [
        PooledIdentity(
            email=f"{prefix}{i}@example.com",
            tier=tier,
            protocol=protocol,
            banned=banned,
        )
        for i in range(count)
    ]


class CountingIdentityRepository(InMemoryPooledIdentityRepository):
    def __init__(self) -> None:
        super().__init__()
        self.load_calls = 0

    async def load_statuses(self) -> dict[str, bool]:
        self.load_calls += 1
        await asyncio.sleep(0.01)
        return await super().load_statuses()


class TestAllocation:
    """Tests for tier and protocol allocation."""

    @pytest.mark.asyncio
    async def test_partial_grant_returns_what_is_available(self, pool, identities):
        # Arrange
        await identities.add(make_identities(6))

        # Act
        granted = await pool.get_by_tier(PoolTier.SHORT_TERM, 10, UserId("u1"))

        # Assert
        assert len(granted) == 6
        assert await pool.get_by_tier(PoolTier.SHORT_TERM, 1, UserId("u2")) == []

    @pytest.mark.asyncio
    async def test_granted_identities_are_assigned(self, pool, identities):
        await identities.add(make_identities(2))

        granted = await pool.get_by_tier(PoolTier.SHORT_TERM, 2, UserId("u1"))

        for email in granted:
            assert identities.get(email).assigned_to == "u1"
            assert identities.get(email).assigned_at is not None

    @pytest.mark.asyncio
    async def test_tiers_do_not_mix(self, pool, identities):
        await identities.add(make_identities(3, tier=PoolTier.SHORT_TERM, prefix="s"))
        await identities.add(make_identities(2, tier=PoolTier.LONG_TERM, prefix="l"))

        granted = await pool.get_by_tier(PoolTier.LONG_TERM, 5, UserId("u1"))

        assert sorted(granted) == ["l0@example.com", "l1@example.com"]

    @pytest.mark.asyncio
    async def test_banned_identities_are_never_granted(self, pool, identities):
        await identities.add(make_identities(3, prefix="ok"))
        await identities.add(make_identities(3, prefix="bad", banned=True))
        await pool.mark_banned("ok0@example.com")

        granted = await pool.get_by_tier(PoolTier.SHORT_TERM, 10, UserId("u1"))

        assert sorted(granted) == ["ok1@example.com", "ok2@example.com"]

    @pytest.mark.asyncio
    async def test_concurrent_claims_are_disjoint(self, pool, identities):
        await identities.add(make_identities(20))

        grants = await asyncio.gather(
            *(
                pool.get_by_tier(PoolTier.SHORT_TERM, 3, UserId(f"u{i}"))
                for i in range(10)
            )
        )

        emails = [email for grant in grants for email in grant]
        assert len(emails) == 20
        assert len(set(emails)) == 20

    @pytest.mark.asyncio
    async def test_protocol_allocation(self, pool, identities):
        await identities.add(make_identities(2, protocol=IdentityProtocol.IMAP))
        await identities.add(
            make_identities(2, protocol=IdentityProtocol.GRAPH, prefix="graph")
        )

        graph = await pool.get_by_protocol(IdentityProtocol.GRAPH, 5, UserId("u1"))

        assert sorted(graph) == ["graph0@example.com", "graph1@example.com"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, -3])
    async def test_non_positive_count_grants_nothing(self, pool, identities, count):
        await identities.add(make_identities(2))

        assert await pool.get_by_tier(PoolTier.SHORT_TERM, count, UserId("u1")) == []
        assert identities.get("box0@example.com").assigned_to is None


class TestStatusCache:
    """Tests for the ban status cache."""

    @pytest.mark.asyncio
    async def test_cache_hydrates_once_under_concurrency(self):
        repository = CountingIdentityRepository()
        await repository.add(make_identities(4))
        cache = IdentityStatusCache()
        pools = [ResourcePool(repository, cache) for _ in range(5)]

        await asyncio.gather(*(p.initialize() for p in pools))

        assert repository.load_calls == 1
        assert cache.state is CacheState.READY
        assert cache.stats().total == 4

    @pytest.mark.asyncio
    async def test_cache_starts_uninitialized(self, cache):
        assert cache.state is CacheState.UNINITIALIZED
        assert cache.get("anyone@example.com") is None

    @pytest.mark.asyncio
    async def test_refresh_picks_up_out_of_band_changes(self, pool, identities):
        # Arrange
        await identities.add(make_identities(2))
        await pool.initialize()
        await identities.set_banned("box1@example.com", True)
        await identities.add(make_identities(1, prefix="late"))

        # Act
        stale = await pool.stats()
        fresh = await pool.refresh()

        # Assert
        assert stale.total == 2
        assert stale.banned == 0
        assert fresh.total == 3
        assert fresh.banned == 1
        assert await pool.is_banned("box1@example.com") is True

    @pytest.mark.asyncio
    async def test_unknown_email_is_not_banned(self, pool):
        assert await pool.is_banned("nobody@example.com") is False

    @pytest.mark.asyncio
    async def test_upsert_status_writes_through(self, pool, identities):
        await identities.add(make_identities(1))

        known = await pool.upsert_status("box0@example.com", True)

        assert known is True
        assert await pool.is_banned("box0@example.com") is True
        assert identities.get("box0@example.com").banned is True

        await pool.upsert_status("box0@example.com", False)
        assert await pool.is_banned("box0@example.com") is False

    @pytest.mark.asyncio
    async def test_upsert_status_of_unknown_identity(self, pool):
        assert await pool.upsert_status("ghost@example.com", True) is False
        assert "ghost@example.com" not in pool.status_cache


class TestAddIdentities:
    """Tests for adding identities."""

    @pytest.mark.asyncio
    async def test_duplicates_are_skipped(self, pool):
        # Arrange
        await pool.add_identities(make_identities(3))
        batch = make_identities(5) + make_identities(1, prefix="box4")

        # Act
        result = await pool.add_identities(batch)

        # Assert
        assert result.added == 3
        assert result.skipped == 3

    @pytest.mark.asyncio
    async def test_stats_count_banned_and_active(self, pool):
        await pool.add_identities(make_identities(4))
        await pool.add_identities(make_identities(2, prefix="bad", banned=True))

        stats = await pool.stats()

        assert stats.total == 6
        assert stats.banned == 2
        assert stats.active == 4
