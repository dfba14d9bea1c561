"""
tests/test_config.py

Configuration resolution and error serialization.
"""

from dataclasses import FrozenInstanceError

import pytest

from codevision.config import (
    FULLY_CONFIGURED,
    GEMINI,
    GROQ,
    PARTIALLY_CONFIGURED,
    TEXT_TIMEOUT_S,
    UNCONFIGURED,
    VISION_TIMEOUT_S,
    Settings,
)
from codevision.errors import ConfigurationError, ProviderError, TransportError
from codevision.schemas import OperationKind


class TestSettingsFromEnv:

    def test_reads_credentials(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk-1")
        monkeypatch.setenv("GEMINI_API_KEY", "gm-1")
        monkeypatch.setenv("GROQ_MODEL", "llama-test")

        settings = Settings.from_env()

        assert settings.groq_api_key == "gsk-1"
        assert settings.gemini_api_key == "gm-1"
        assert settings.groq_model == "llama-test"

    def test_blank_credential_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "")
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)

        settings = Settings.from_env()

        assert settings.groq_api_key is None
        assert settings.state == UNCONFIGURED
        assert settings.missing_credentials() == ["GROQ_API_KEY", "GEMINI_API_KEY"]

    def test_repr_hides_credentials(self, full_settings):
        assert "gsk-test" not in repr(full_settings)
        assert "gsk-test" not in repr(full_settings.require(OperationKind.CONVERT))


class TestConfigurationState:

    def test_states(self, full_settings, empty_settings):
        assert full_settings.state == FULLY_CONFIGURED
        assert empty_settings.state == UNCONFIGURED
        assert Settings(groq_api_key="k", gemini_api_key=None).state == PARTIALLY_CONFIGURED

    def test_providers_status(self):
        settings = Settings(groq_api_key=None, gemini_api_key="k")
        assert settings.providers_status() == {GROQ: False, GEMINI: True}


class TestRequire:

    @pytest.mark.parametrize("kind", [OperationKind.CONVERT, OperationKind.AUDIT, OperationKind.REFACTOR])
    def test_text_operations_use_groq(self, full_settings, kind):
        config = full_settings.require(kind)
        assert config.provider == GROQ
        assert config.api_key == "gsk-test"
        assert config.timeout_s == TEXT_TIMEOUT_S

    @pytest.mark.parametrize("kind", [OperationKind.VISION_CORRECT, OperationKind.VISION_GENERATE])
    def test_vision_operations_use_gemini(self, full_settings, kind):
        config = full_settings.require(kind)
        assert config.provider == GEMINI
        assert config.api_key == "gm-test"
        assert config.timeout_s == VISION_TIMEOUT_S

    def test_missing_credential_raises(self):
        settings = Settings(groq_api_key="k", gemini_api_key=None)
        with pytest.raises(ConfigurationError) as exc_info:
            settings.require(OperationKind.VISION_CORRECT)

        error = exc_info.value
        assert error.provider == GEMINI
        assert error.status_code == 503
        assert "GEMINI_API_KEY" in error.message

    def test_config_is_immutable(self, full_settings):
        config = full_settings.require(OperationKind.CONVERT)
        with pytest.raises(FrozenInstanceError):
            config.model = "other"


class TestErrorTaxonomy:

    @pytest.mark.parametrize("status,kind,http_status", [
        (401, "authentication", 401),
        (403, "authentication", 403),
        (429, "rate_limit", 429),
        (500, "provider_error", 500),
        (200, "provider_error", 502),
        (None, "provider_error", 502),
    ])
    def test_provider_error_classification(self, status, kind, http_status):
        error = ProviderError("boom", status, "body")
        assert error.kind == kind
        assert error.status_code == http_status
        assert error.to_dict()["upstreamStatus"] == status
        assert error.to_dict()["upstreamBody"] == "body"

    def test_transport_timeout(self):
        error = TransportError("slow", timeout=True)
        assert error.kind == "timeout"
        assert error.status_code == 504

    def test_transport_network(self):
        error = TransportError("down")
        assert error.kind == "transport"
        assert error.status_code == 502
        assert error.to_dict() == {"error": "down", "kind": "transport"}
