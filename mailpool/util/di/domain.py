"""Domain layer DI providers."""

from dishka import Scope, provide

from mailpool.config import (
    CryptoSettings,
    InvitationSettings,
    RedemptionSettings,
    Settings,
)
from mailpool.domain.repository import (
    AuditLogRepository,
    CardKeyRepository,
    InviteRedemptionRepository,
    PooledIdentityRepository,
    StoreHealthRepository,
)
from mailpool.domain.service import (
    BatchRedemptionOrchestrator,
    CardKeyVerifier,
    HealthService,
    IdentityStatusCache,
    InviteRegistry,
    ResourcePool,
    TokenCodec,
)
from mailpool.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each HTTP request gets fresh service instances with their own transaction.
    The codec and the identity status cache hold process-wide state and are
    APP-scoped.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_token_codec(self, crypto_settings: CryptoSettings) -> TokenCodec:
        """Provide token codec (fails fast on a missing secret)."""
        return TokenCodec(secret=crypto_settings.require_secret())

    @provide(scope=Scope.APP)
    def get_identity_status_cache(self) -> IdentityStatusCache:
        """Provide the shared identity status cache."""
        return IdentityStatusCache()

    @provide
    def get_invite_registry(
        self,
        codec: TokenCodec,
        redemption_repository: InviteRedemptionRepository,
        invitation_settings: InvitationSettings,
        redemption_settings: RedemptionSettings,
        settings: Settings,
    ) -> InviteRegistry:
        """Provide invite registry domain service."""
        return InviteRegistry(
            codec=codec,
            redemption_repository=redemption_repository,
            invitation_settings=invitation_settings,
            invite_base_url=settings.api.frontend_url,
            max_redeem_attempts=redemption_settings.max_redeem_attempts,
            store_timeout_seconds=redemption_settings.store_timeout_seconds,
        )

    @provide
    def get_card_key_verifier(
        self,
        codec: TokenCodec,
        card_key_repository: CardKeyRepository,
        redemption_settings: RedemptionSettings,
    ) -> CardKeyVerifier:
        """Provide card-key verifier domain service."""
        return CardKeyVerifier(
            codec=codec,
            card_key_repository=card_key_repository,
            store_timeout_seconds=redemption_settings.store_timeout_seconds,
        )

    @provide
    def get_resource_pool(
        self,
        identity_repository: PooledIdentityRepository,
        status_cache: IdentityStatusCache,
        redemption_settings: RedemptionSettings,
    ) -> ResourcePool:
        """Provide resource pool domain service."""
        return ResourcePool(
            identity_repository=identity_repository,
            status_cache=status_cache,
            store_timeout_seconds=redemption_settings.store_timeout_seconds,
        )

    @provide
    def get_orchestrator(
        self,
        card_key_verifier: CardKeyVerifier,
        invite_registry: InviteRegistry,
        resource_pool: ResourcePool,
        audit_repository: AuditLogRepository,
        redemption_settings: RedemptionSettings,
    ) -> BatchRedemptionOrchestrator:
        """Provide batch redemption orchestrator."""
        return BatchRedemptionOrchestrator(
            card_key_verifier=card_key_verifier,
            invite_registry=invite_registry,
            resource_pool=resource_pool,
            audit_repository=audit_repository,
            batch_limit=redemption_settings.batch_limit,
            store_timeout_seconds=redemption_settings.store_timeout_seconds,
        )

    @provide
    def get_health_service(
        self,
        health_repository: StoreHealthRepository,
        redemption_settings: RedemptionSettings,
    ) -> HealthService:
        """Provide store health domain service."""
        return HealthService(
            health_repository=health_repository,
            store_timeout_seconds=redemption_settings.store_timeout_seconds,
        )
