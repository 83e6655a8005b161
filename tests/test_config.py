"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from bitrabo.config import Settings


class TestSettings:
    """Tests for Settings parsing."""

    def test_defaults(self, bare_settings):
        assert bare_settings.api_port == 3000
        assert bare_settings.provider_timeout_seconds == 10.0
        assert bare_settings.upstream_url == "https://swap.onekeycn.com"
        assert not bare_settings.is_production

    def test_provider_lists(self):
        settings = Settings(_env_file=None, enabled_providers=" LiFi, 0x ,,", provider_priority="okx,1INCH")
        assert settings.enabled_provider_ids == ["lifi", "0x"]
        assert settings.provider_priority_list == ["okx", "1inch"]

    def test_safe_dict_redacts_secrets(self, settings):
        safe = settings.get_safe_dict()
        assert safe["credentials"]["okx"] == "***"
        assert "okx-secret" not in str(safe)
        assert safe["fee"]["receiver_evm"] == settings.fee_receiver_evm

    def test_invalid_timeout(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, provider_timeout_seconds=0)

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "3.5")
        monkeypatch.setenv("FEE_RECEIVER_EVM", "0xabc")
        settings = Settings(_env_file=None)
        assert settings.provider_timeout_seconds == 3.5
        assert settings.fee_receiver_evm == "0xabc"
