"""
Typed failures raised by the operation pipeline.

Every failure path ends in one of these; the HTTP layer maps them to a
status code and a JSON body with `to_dict()`.
"""

from typing import Any, Dict, Optional


class CodeVisionError(Exception):
    """Base class for all pipeline failures."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "kind": self.kind}


class ConfigurationError(CodeVisionError):
    """A required provider credential is absent. Never reaches the network."""

    kind = "configuration"
    status_code = 503

    def __init__(self, message: str, provider: str):
        super().__init__(message)
        self.provider = provider


class TransportError(CodeVisionError):
    """The provider could not be reached, or did not answer in time."""

    status_code = 502

    def __init__(self, message: str, timeout: bool = False):
        super().__init__(message)
        self.timeout = timeout
        if timeout:
            self.status_code = 504

    @property
    def kind(self) -> str:
        return "timeout" if self.timeout else "transport"


class ProviderError(CodeVisionError):
    """The provider answered with a non-success status (or an unusable body)."""

    def __init__(self, message: str, upstream_status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body

    @property
    def kind(self) -> str:
        if self.upstream_status in (401, 403):
            return "authentication"
        if self.upstream_status == 429:
            return "rate_limit"
        return "provider_error"

    @property
    def status_code(self) -> int:
        if self.upstream_status is not None and 400 <= self.upstream_status < 600:
            return self.upstream_status
        return 502

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["upstreamStatus"] = self.upstream_status
        data["upstreamBody"] = self.body
        return data


class NormalizationError(CodeVisionError):
    """The reply could not be shaped into the expected result. Keeps the raw text."""

    kind = "normalization"
    status_code = 502

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["raw"] = self.raw
        return data
