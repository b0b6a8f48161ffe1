"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from mailpool.config import (
    CryptoSettings,
    InvitationSettings,
    RedemptionSettings,
    Settings,
)
from mailpool.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_crypto_settings(self, settings: Settings) -> CryptoSettings:
        """Provide token sealing settings."""
        return settings.crypto

    @provide(scope=Scope.APP)
    def provide_invitation_settings(self, settings: Settings) -> InvitationSettings:
        """Provide invitation settings."""
        return settings.invitations

    @provide(scope=Scope.APP)
    def provide_redemption_settings(self, settings: Settings) -> RedemptionSettings:
        """Provide redemption settings."""
        return settings.redemption
