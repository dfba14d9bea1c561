"""
Provider configuration.

Credentials are read once, at startup, into a `Settings` object. Each
operation kind maps to one provider and gets its own immutable
`ProviderConfig`; an operation whose provider has no credential is refused
with `ConfigurationError` before any network call is attempted.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import ConfigurationError
from .schemas import OperationKind

logger = logging.getLogger(__name__)

GROQ = "groq"
GEMINI = "gemini"

DEFAULT_GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"
DEFAULT_GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_GEMINI_URL = "https://generativelanguage.googleapis.com"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

TEXT_TIMEOUT_S = 30.0
VISION_TIMEOUT_S = 60.0

CREDENTIAL_ENV = {GROQ: "GROQ_API_KEY", GEMINI: "GEMINI_API_KEY"}

OPERATION_PROVIDERS: Dict[OperationKind, str] = {
    OperationKind.CONVERT: GROQ,
    OperationKind.AUDIT: GROQ,
    OperationKind.REFACTOR: GROQ,
    OperationKind.VISION_CORRECT: GEMINI,
    OperationKind.VISION_GENERATE: GEMINI,
}

OPERATION_TEMPERATURES: Dict[OperationKind, float] = {
    OperationKind.CONVERT: 0.1,
    OperationKind.AUDIT: 0.1,
    OperationKind.REFACTOR: 0.2,
    OperationKind.VISION_CORRECT: 0.2,
    OperationKind.VISION_GENERATE: 0.4,
}

UNCONFIGURED = "unconfigured"
PARTIALLY_CONFIGURED = "partially_configured"
FULLY_CONFIGURED = "fully_configured"


@dataclass(frozen=True)
class ProviderConfig:
    provider: str
    endpoint: str
    api_key: str = field(repr=False)
    model: str
    timeout_s: float
    temperature: float


@dataclass(frozen=True)
class Settings:
    """Process configuration, resolved once from the environment."""

    groq_api_key: Optional[str] = field(repr=False)
    gemini_api_key: Optional[str] = field(repr=False)
    groq_url: str = DEFAULT_GROQ_URL
    groq_model: str = DEFAULT_GROQ_MODEL
    gemini_url: str = DEFAULT_GEMINI_URL
    gemini_model: str = DEFAULT_GEMINI_MODEL

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            groq_url=os.getenv("GROQ_API_URL", DEFAULT_GROQ_URL),
            groq_model=os.getenv("GROQ_MODEL", DEFAULT_GROQ_MODEL),
            gemini_url=os.getenv("GEMINI_API_URL", DEFAULT_GEMINI_URL),
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        )

    def has_credential(self, provider: str) -> bool:
        if provider == GROQ:
            return bool(self.groq_api_key)
        if provider == GEMINI:
            return bool(self.gemini_api_key)
        return False

    def providers_status(self) -> Dict[str, bool]:
        return {name: self.has_credential(name) for name in CREDENTIAL_ENV}

    def missing_credentials(self) -> List[str]:
        return [env for name, env in CREDENTIAL_ENV.items() if not self.has_credential(name)]

    @property
    def state(self) -> str:
        present = sum(self.providers_status().values())
        if present == 0:
            return UNCONFIGURED
        if present < len(CREDENTIAL_ENV):
            return PARTIALLY_CONFIGURED
        return FULLY_CONFIGURED

    def require(self, kind: OperationKind) -> ProviderConfig:
        """Return the provider config for an operation, or refuse it."""
        provider = OPERATION_PROVIDERS[kind]
        if not self.has_credential(provider):
            env = CREDENTIAL_ENV[provider]
            raise ConfigurationError(f"{provider.capitalize()} API not configured ({env} missing).", provider)

        if provider == GROQ:
            return ProviderConfig(
                provider=GROQ,
                endpoint=self.groq_url,
                api_key=self.groq_api_key,
                model=self.groq_model,
                timeout_s=TEXT_TIMEOUT_S,
                temperature=OPERATION_TEMPERATURES[kind],
            )
        return ProviderConfig(
            provider=GEMINI,
            endpoint=self.gemini_url,
            api_key=self.gemini_api_key,
            model=self.gemini_model,
            timeout_s=VISION_TIMEOUT_S,
            temperature=OPERATION_TEMPERATURES[kind],
        )

    def log_summary(self) -> None:
        missing = self.missing_credentials()
        if missing:
            logger.warning("Missing environment variables: %s", ", ".join(missing))
        else:
            logger.info("API configuration complete: Groq and Gemini detected.")
