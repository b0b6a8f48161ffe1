"""Application layer DI providers."""

from dishka import Scope, provide

from mailpool.application.usecase.card import (
    GetVerificationHistoryUseCase,
    MintCardKeyUseCase,
    VerifyCardKeysUseCase,
)
from mailpool.application.usecase.invite import (
    GetInviteUsageUseCase,
    IssueInviteUseCase,
    RedeemInviteUseCase,
    VerifyInviteUseCase,
)
from mailpool.application.usecase.pool import (
    AddIdentitiesUseCase,
    GetPoolStatsUseCase,
    RefreshPoolUseCase,
    UpdateIdentityStatusUseCase,
)
from mailpool.domain.repository import Transaction
from mailpool.domain.service import (
    BatchRedemptionOrchestrator,
    CardKeyVerifier,
    InviteRegistry,
    ResourcePool,
)
from mailpool.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Invite use cases
    @provide(scope=Scope.REQUEST)
    def get_issue_invite_use_case(
        self, invite_registry: InviteRegistry
    ) -> IssueInviteUseCase:
        """Provide issue invite use case."""
        return IssueInviteUseCase(invite_registry=invite_registry)

    @provide(scope=Scope.REQUEST)
    def get_verify_invite_use_case(
        self, invite_registry: InviteRegistry
    ) -> VerifyInviteUseCase:
        """Provide verify invite use case."""
        return VerifyInviteUseCase(invite_registry=invite_registry)

    @provide(scope=Scope.REQUEST)
    def get_redeem_invite_use_case(
        self, orchestrator: BatchRedemptionOrchestrator, transaction: Transaction
    ) -> RedeemInviteUseCase:
        """Provide redeem invite use case."""
        return RedeemInviteUseCase(orchestrator=orchestrator, transaction=transaction)

    @provide(scope=Scope.REQUEST)
    def get_invite_usage_use_case(
        self, invite_registry: InviteRegistry
    ) -> GetInviteUsageUseCase:
        """Provide invite usage use case."""
        return GetInviteUsageUseCase(invite_registry=invite_registry)

    # Card-key use cases
    @provide(scope=Scope.REQUEST)
    def get_verify_card_keys_use_case(
        self, orchestrator: BatchRedemptionOrchestrator, transaction: Transaction
    ) -> VerifyCardKeysUseCase:
        """Provide batch verify card keys use case."""
        return VerifyCardKeysUseCase(orchestrator=orchestrator, transaction=transaction)

    @provide(scope=Scope.REQUEST)
    def get_mint_card_key_use_case(
        self, card_key_verifier: CardKeyVerifier
    ) -> MintCardKeyUseCase:
        """Provide mint card key use case."""
        return MintCardKeyUseCase(card_key_verifier=card_key_verifier)

    @provide(scope=Scope.REQUEST)
    def get_verification_history_use_case(
        self, orchestrator: BatchRedemptionOrchestrator
    ) -> GetVerificationHistoryUseCase:
        """Provide verification history use case."""
        return GetVerificationHistoryUseCase(orchestrator=orchestrator)

    # Pool use cases
    @provide(scope=Scope.REQUEST)
    def get_add_identities_use_case(
        self, resource_pool: ResourcePool, transaction: Transaction
    ) -> AddIdentitiesUseCase:
        """Provide add identities use case."""
        return AddIdentitiesUseCase(resource_pool=resource_pool, transaction=transaction)

    @provide(scope=Scope.REQUEST)
    def get_update_identity_status_use_case(
        self, resource_pool: ResourcePool, transaction: Transaction
    ) -> UpdateIdentityStatusUseCase:
        """Provide update identity status use case."""
        return UpdateIdentityStatusUseCase(
            resource_pool=resource_pool, transaction=transaction
        )

    @provide(scope=Scope.REQUEST)
    def get_pool_stats_use_case(self, resource_pool: ResourcePool) -> GetPoolStatsUseCase:
        """Provide pool stats use case."""
        return GetPoolStatsUseCase(resource_pool=resource_pool)

    @provide(scope=Scope.REQUEST)
    def get_refresh_pool_use_case(self, resource_pool: ResourcePool) -> RefreshPoolUseCase:
        """Provide refresh pool use case."""
        return RefreshPoolUseCase(resource_pool=resource_pool)
