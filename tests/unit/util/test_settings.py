"""Unit tests for settings helpers."""

import pytest

from mailpool.config import CryptoSettings, ObservabilitySettings, Settings
from mailpool.util.error import ConfigurationError
from mailpool.util.observability import should_send_to_logfire


class TestCryptoSettings:
    """Tests for the sealing secret check."""

    @pytest.mark.parametrize("secret", [None, "", "short"])
    def test_unusable_secret_fails(self, secret):
        with pytest.raises(ConfigurationError):
            CryptoSettings(secret=secret).require_secret()

    def test_usable_secret_is_returned(self):
        secret = "s" * 16

        assert CryptoSettings(secret=secret).require_secret() == secret


class TestSettings:
    """Tests for derived URLs."""

    def test_production_invite_links_use_https(self):
        settings = Settings(
            environment="production",
            host="api.example.com",
            frontend_host="example.com",
        )

        assert settings.api.frontend_url == "https://example.com"
        assert settings.api.base_url == "https://api.example.com"

    def test_development_links_point_at_localhost(self):
        settings = Settings(environment="development")

        assert settings.api.frontend_url == "http://localhost:3000"


class TestShouldSendToLogfire:
    """Tests for the Logfire sending decision."""

    @pytest.mark.parametrize(
        "observability, expected",
        [
            (ObservabilitySettings(), False),
            (ObservabilitySettings(logfire_token="tok"), True),
            (ObservabilitySettings(logfire_token="tok", send_to_logfire=False), False),
            (ObservabilitySettings(send_to_logfire=True), True),
        ],
    )
    def test_decision(self, observability, expected):
        settings = Settings(observability=observability)

        assert should_send_to_logfire(settings) is expected
