"""Tests for environment settings."""

import pytest

from tokenforge.core.settings import DEFAULT_EXPIRY_MS, KmsSettings, TokenSettings
from tokenforge.crypto.algorithms import Algorithm


class TestTokenSettings:
    """Tests for TOKENFORGE_* settings."""

    def test_defaults(self) -> None:
        settings = TokenSettings()
        assert settings.default_expiry_ms == DEFAULT_EXPIRY_MS
        assert settings.clock_skew == 0
        assert settings.algorithms == [Algorithm.HS256]
        assert settings.secret is None

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOKENFORGE_DEFAULT_EXPIRY_MS", "60000")
        monkeypatch.setenv("TOKENFORGE_ALGORITHMS", '["HS256", "HS512"]')
        monkeypatch.setenv("TOKENFORGE_SECRET", "c2VjcmV0")
        settings = TokenSettings()
        assert settings.default_expiry_ms == 60000
        assert settings.algorithms == [Algorithm.HS256, Algorithm.HS512]
        assert settings.secret is not None
        assert settings.secret.get_secret_value() == "c2VjcmV0"
        assert "c2VjcmV0" not in repr(settings)


class TestKmsSettings:
    """Tests for TOKENFORGE_KMS_* settings."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOKENFORGE_KMS_REGION", "eu-west-1")
        monkeypatch.setenv("TOKENFORGE_KMS_ACCOUNT", "123456789012")
        settings = KmsSettings()
        assert settings.region == "eu-west-1"
        assert settings.account == "123456789012"
        assert settings.endpoint_url is None
