"""Pooled identity domain service."""

import asyncio
from enum import Enum
from types import MappingProxyType
from typing import Awaitable, Callable, Mapping

import logfire
from pydantic import BaseModel

from mailpool.domain.model import PooledIdentity
from mailpool.domain.repository import PooledIdentityRepository
from mailpool.domain.value import IdentityProtocol, PoolTier, UserId

from .base import DEFAULT_STORE_TIMEOUT_SECONDS, Service

StatusLoader = Callable[[], Awaitable[dict[str, bool]]]


class CacheState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class PoolStats(BaseModel):
    """Identity counts as seen by the status cache."""

    total: int
    banned: int
    active: int


class AddIdentitiesResult(BaseModel):
    """Outcome of adding identities to the pool."""

    added: int
    skipped: int


class IdentityStatusCache:
    """Process-wide cache of identity ban statuses.

    Hydrated once, on first use, under a lock. Readers always see a complete
    immutable snapshot; refresh builds a new snapshot and swaps it in.
    The store stays authoritative for allocation, the cache only answers
    status queries.
    """

    def __init__(self) -> None:
        self._state = CacheState.UNINITIALIZED
        self._snapshot: Mapping[str, bool] = MappingProxyType({})
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is CacheState.READY

    async def ensure_ready(self, loader: StatusLoader) -> None:
        """Hydrate the cache if nobody has yet."""
        if self.is_ready:
            return
        async with self._lock:
            if self.is_ready:
                return
            self._swap(await loader())
            self._state = CacheState.READY
            logfire.info("Identity status cache ready", total=len(self._snapshot))

    async def reload(self, loader: StatusLoader) -> None:
        """Rebuild the snapshot from the store."""
        async with self._lock:
            self._swap(await loader())
            self._state = CacheState.READY
            logfire.info("Identity status cache refreshed", total=len(self._snapshot))

    def _swap(self, statuses: dict[str, bool]) -> None:
        self._snapshot = MappingProxyType(dict(statuses))

    def get(self, email: str) -> bool | None:
        """Ban status of an email, None if unknown."""
        return self._snapshot.get(email)

    def __contains__(self, email: str) -> bool:
        return email in self._snapshot

    def put(self, statuses: Mapping[str, bool]) -> None:
        """Write-through update of individual statuses."""
        updated = dict(self._snapshot)
        updated.update(statuses)
        self._snapshot = MappingProxyType(updated)

    def stats(self) -> PoolStats:
        snapshot = self._snapshot
        banned = sum(1 for is_banned in snapshot.values() if is_banned)
        return PoolStats(
            total=len(snapshot), banned=banned, active=len(snapshot) - banned
        )


class ResourcePool(Service):
    """Domain service allocating pooled identities.

    Allocation is delegated to one atomic claim in the store per call, so
    concurrent allocations never hand out the same identity twice, and
    banned or already assigned identities are never returned.
    """

    def __init__(
        self,
        identity_repository: PooledIdentityRepository,
        status_cache: IdentityStatusCache,
        store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize resource pool.

        Args:
            identity_repository: Pooled identity repository
            status_cache: Shared ban status cache
            store_timeout_seconds: Bound on each store call
        """
        self.identity_repository = identity_repository
        self.status_cache = status_cache
        self.store_timeout_seconds = store_timeout_seconds

    async def _load_statuses(self) -> dict[str, bool]:
        return await self._store(
            self.identity_repository.load_statuses(), "identity.load_statuses"
        )

    async def initialize(self) -> None:
        """Hydrate the status cache if it is not ready yet."""
        with logfire.span("resource_pool.initialize"):
            await self.status_cache.ensure_ready(self._load_statuses)

    async def refresh(self) -> PoolStats:
        """Rehydrate the status cache from the store.

        Returns:
            Counts after the refresh
        """
        with logfire.span("resource_pool.refresh"):
            await self.status_cache.reload(self._load_statuses)
            return self.status_cache.stats()

    async def is_banned(self, email: str) -> bool:
        """Check whether an identity is banned. Unknown emails are not."""
        await self.initialize()
        return self.status_cache.get(email) is True

    async def mark_banned(self, email: str) -> bool:
        """Ban an identity.

        Returns:
            True if the identity is known to the store
        """
        return await self.upsert_status(email, True)

    async def upsert_status(self, email: str, banned: bool) -> bool:
        """Set the ban status of an identity in the store and the cache.

        Args:
            email: Identity email
            banned: New ban status

        Returns:
            True if the identity is known to the store
        """
        with logfire.span("resource_pool.upsert_status", email=email, banned=banned):
            await self.initialize()
            known = await self._store(
                self.identity_repository.set_banned(email, banned),
                "identity.set_banned",
            )
            if not known:
                logfire.warn("Status update for unknown identity", email=email)
                return False
            self.status_cache.put({email: banned})
            logfire.info("Identity status updated", email=email, banned=banned)
            return True

    async def get_by_tier(
        self, tier: PoolTier, count: int, assignee: UserId
    ) -> list[str]:
        """Allocate up to count identities from a tier.

        A short result is a partial grant, not an error.

        Args:
            tier: Pool tier
            count: Number of identities wanted
            assignee: User the identities are granted to

        Returns:
            Allocated emails, at most count
        """
        with logfire.span(
            "resource_pool.get_by_tier", tier=tier.value, count=count, assignee=assignee
        ):
            return await self._claim(count, assignee, tier=tier)

    async def get_by_protocol(
        self, protocol: IdentityProtocol, count: int, assignee: UserId
    ) -> list[str]:
        """Allocate up to count identities reachable through a protocol.

        Args:
            protocol: Mail protocol
            count: Number of identities wanted
            assignee: User the identities are granted to

        Returns:
            Allocated emails, at most count
        """
        with logfire.span(
            "resource_pool.get_by_protocol",
            protocol=protocol.value,
            count=count,
            assignee=assignee,
        ):
            return await self._claim(count, assignee, protocol=protocol)

    async def _claim(
        self,
        count: int,
        assignee: UserId,
        tier: PoolTier | None = None,
        protocol: IdentityProtocol | None = None,
    ) -> list[str]:
        if count <= 0:
            return []

        emails = await self._store(
            self.identity_repository.claim_available(
                count, assignee, tier=tier, protocol=protocol
            ),
            "identity.claim_available",
        )
        if len(emails) < count:
            logfire.warn(
                "Pool short of identities",
                tier=tier.value if tier else None,
                protocol=protocol.value if protocol else None,
                requested=count,
                provided=len(emails),
            )
        return emails

    async def add_identities(
        self, identities: list[PooledIdentity]
    ) -> AddIdentitiesResult:
        """Add identities, skipping emails that are already known.

        Args:
            identities: Identities to add

        Returns:
            Added and skipped counts
        """
        with logfire.span("resource_pool.add_identities", count=len(identities)):
            await self.initialize()

            fresh: dict[str, PooledIdentity] = {}
            for identity in identities:
                if identity.email in self.status_cache or identity.email in fresh:
                    continue
                fresh[identity.email] = identity

            added = 0
            if fresh:
                added = await self._store(
                    self.identity_repository.add(list(fresh.values())),
                    "identity.add",
                )
                self.status_cache.put(
                    {email: identity.banned for email, identity in fresh.items()}
                )

            result = AddIdentitiesResult(
                added=added, skipped=len(identities) - added
            )
            logfire.info(
                "Identities added", added=result.added, skipped=result.skipped
            )
            return result

    async def stats(self) -> PoolStats:
        """Counts of known, banned and active identities."""
        await self.initialize()
        return self.status_cache.stats()
