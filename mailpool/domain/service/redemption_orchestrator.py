"""Batch redemption domain service."""

import logfire
from pydantic import BaseModel

from mailpool.domain.error import ValidationError
from mailpool.domain.model import AuditEntry
from mailpool.domain.repository import AuditLogRepository
from mailpool.domain.value import IdentityProtocol, PoolTier, UserId

from .base import DEFAULT_STORE_TIMEOUT_SECONDS, Clock, Service, utc_now
from .card_key_verifier import CardKeyVerification, CardKeyVerifier
from .invite_registry import InviteRedemption, InviteRegistry
from .resource_pool import ResourcePool

DEFAULT_BATCH_LIMIT = 100


class TierAllocation(BaseModel):
    """Identities granted per tier."""

    short_term: list[str] = []
    long_term: list[str] = []


class ProtocolAllocation(BaseModel):
    """Identities granted per protocol."""

    imap: list[str] = []
    graph: list[str] = []


class BatchSummary(BaseModel):
    """Totals of one card-key batch."""

    total_verified: int
    valid_count: int
    invalid_count: int
    total_emails_requested: int
    total_emails_provided: int
    short_term_requested: int
    short_term_provided: int
    long_term_requested: int
    long_term_provided: int
    partial_grant: bool


class BatchRedemptionResult(BaseModel):
    """Per-key outcomes plus the combined grant."""

    results: list[CardKeyVerification]
    allocation: TierAllocation
    summary: BatchSummary


class InviteRedemptionResult(BaseModel):
    """Invite redemption plus the identities granted for it."""

    redemption: InviteRedemption
    allocation: ProtocolAllocation
    requested: int = 0
    provided: int = 0
    partial_grant: bool = False


class BatchRedemptionOrchestrator(Service):
    """Turns verified entitlements into concrete identity grants.

    Order within one call: verify and consume each token, sum demand per
    tier, claim once per tier, then append audit entries.
    """

    def __init__(
        self,
        card_key_verifier: CardKeyVerifier,
        invite_registry: InviteRegistry,
        resource_pool: ResourcePool,
        audit_repository: AuditLogRepository,
        batch_limit: int = DEFAULT_BATCH_LIMIT,
        store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize orchestrator.

        Args:
            card_key_verifier: Card-key domain service
            invite_registry: Invite domain service
            resource_pool: Pooled identity domain service
            audit_repository: Card verification log
            batch_limit: Maximum keys per batch
            store_timeout_seconds: Bound on each store call
            clock: Source of the current UTC time
        """
        self.card_key_verifier = card_key_verifier
        self.invite_registry = invite_registry
        self.resource_pool = resource_pool
        self.audit_repository = audit_repository
        self.batch_limit = batch_limit
        self.store_timeout_seconds = store_timeout_seconds
        self.clock = clock

    async def redeem_card_keys(
        self, keys: list[str], user_id: UserId
    ) -> BatchRedemptionResult:
        """Redeem a batch of card keys.

        Each key succeeds or fails on its own; a bad key never spoils the
        rest of the batch. Store unavailability aborts the whole call.

        Args:
            keys: Card keys as submitted
            user_id: Redeeming user

        Returns:
            Per-key results, allocation and summary

        Raises:
            ValidationError: If the batch is empty or over the limit
            UnavailableError: If the store is unreachable
        """
        if not keys:
            raise ValidationError("At least one card key is required")
        if len(keys) > self.batch_limit:
            raise ValidationError(
                f"At most {self.batch_limit} card keys can be verified at once"
            )

        with logfire.span(
            "orchestrator.redeem_card_keys", key_count=len(keys), user_id=user_id
        ):
            results = [
                await self.card_key_verifier.redeem(key, user_id) for key in keys
            ]
            valid = [r.data for r in results if r.is_valid and r.data]

            demand = {tier: 0 for tier in PoolTier}
            for payload in valid:
                demand[payload.duration.tier] += payload.email_count

            granted = {tier: [] for tier in PoolTier}
            for tier, count in demand.items():
                if count:
                    granted[tier] = await self.resource_pool.get_by_tier(
                        tier, count, user_id
                    )

            now = self.clock()
            await self._audit(
                [
                    AuditEntry(
                        subject_key=payload.key,
                        user_id=user_id,
                        verified_at=now,
                        email_count=payload.email_count,
                        duration=payload.duration,
                        source=payload.source,
                        custom_source=payload.custom_source,
                    )
                    for payload in valid
                ]
            )

            short_requested = demand[PoolTier.SHORT_TERM]
            long_requested = demand[PoolTier.LONG_TERM]
            short_provided = len(granted[PoolTier.SHORT_TERM])
            long_provided = len(granted[PoolTier.LONG_TERM])
            summary = BatchSummary(
                total_verified=len(results),
                valid_count=len(valid),
                invalid_count=len(results) - len(valid),
                total_emails_requested=short_requested + long_requested,
                total_emails_provided=short_provided + long_provided,
                short_term_requested=short_requested,
                short_term_provided=short_provided,
                long_term_requested=long_requested,
                long_term_provided=long_provided,
                partial_grant=(
                    short_provided < short_requested or long_provided < long_requested
                ),
            )
            logfire.info(
                "Card key batch redeemed",
                user_id=user_id,
                valid_count=summary.valid_count,
                invalid_count=summary.invalid_count,
                requested=summary.total_emails_requested,
                provided=summary.total_emails_provided,
            )
            return BatchRedemptionResult(
                results=results,
                allocation=TierAllocation(
                    short_term=granted[PoolTier.SHORT_TERM],
                    long_term=granted[PoolTier.LONG_TERM],
                ),
                summary=summary,
            )

    async def redeem_invite(
        self, token: str, user_id: UserId, method: str
    ) -> InviteRedemptionResult:
        """Redeem an invite and grant its IMAP and Graph quotas.

        Args:
            token: Invite token
            user_id: Registering user
            method: Registration method

        Returns:
            Redemption result with the granted identities

        Raises:
            UnavailableError: If the store is unreachable
        """
        with logfire.span(
            "orchestrator.redeem_invite", user_id=user_id, method=method
        ):
            redemption = await self.invite_registry.redeem(token, user_id, method)
            if not redemption.success or not redemption.data:
                return InviteRedemptionResult(
                    redemption=redemption, allocation=ProtocolAllocation()
                )

            grant = redemption.data
            imap = await self.resource_pool.get_by_protocol(
                IdentityProtocol.IMAP, grant.imap_email_count, user_id
            )
            graph = await self.resource_pool.get_by_protocol(
                IdentityProtocol.GRAPH, grant.graph_email_count, user_id
            )

            requested = grant.imap_email_count + grant.graph_email_count
            provided = len(imap) + len(graph)
            return InviteRedemptionResult(
                redemption=redemption,
                allocation=ProtocolAllocation(imap=imap, graph=graph),
                requested=requested,
                provided=provided,
                partial_grant=provided < requested,
            )

    async def verification_history(
        self, user_id: UserId, limit: int = 100
    ) -> list[AuditEntry]:
        """Recent card verification log entries of a user, newest first."""
        with logfire.span("orchestrator.verification_history", user_id=user_id):
            return await self._store(
                self.audit_repository.find_by_user(user_id, limit),
                "audit.find_by_user",
            )

    async def _audit(self, entries: list[AuditEntry]) -> None:
        if not entries:
            return
        try:
            await self._store(self.audit_repository.append(entries), "audit.append")
        except Exception:
            logfire.exception(
                "Failed to record card verification log",
                entry_count=len(entries),
                keys=[entry.subject_key for entry in entries],
            )
