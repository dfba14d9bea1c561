"""
tests/test_pipeline.py

End-to-end operation runs with a fake provider client.
"""

import pytest

from codevision.errors import ConfigurationError, NormalizationError, ProviderError
from codevision.pipeline import OperationPipeline
from codevision.providers import RawModelReply
from codevision.schemas import (
    AuditOperation,
    ConvertOperation,
    ConvertedCode,
    Findings,
    VisionCorrectOperation,
    VisionResult,
)


class TestOperationPipeline:

    @pytest.mark.asyncio
    async def test_convert_scenario(self, full_settings, fake_client_factory):
        client, factory = fake_client_factory(RawModelReply.success("```javascript\nconsole.log(1);\n```"))
        pipeline = OperationPipeline(full_settings, client_factory=factory)

        result = await pipeline.run(ConvertOperation(code="print(1)", source_language="python", target_language="javascript"))

        assert result == ConvertedCode(code="console.log(1);")
        prompt, config = client.calls[0]
        assert prompt.user == "print(1)"
        assert config.provider == "groq"

    @pytest.mark.asyncio
    async def test_audit_scenario(self, full_settings, fake_client_factory):
        raw = '```json\n[{"severity":"high","title":"eval","description":"unsafe"}]\n```'
        _, factory = fake_client_factory(RawModelReply.success(raw))
        pipeline = OperationPipeline(full_settings, client_factory=factory)

        result = await pipeline.run(AuditOperation(code="eval(x)"))

        assert isinstance(result, Findings)
        assert [f.model_dump() for f in result.items] == [
            {"severity": "high", "title": "eval", "description": "unsafe", "file": None, "line": None}
        ]

    @pytest.mark.asyncio
    async def test_vision_correct_uses_gemini(self, full_settings, fake_client_factory):
        client, factory = fake_client_factory(RawModelReply.success("CODE:\nx = 1\nNOTES:\n- typo"))
        pipeline = OperationPipeline(full_settings, client_factory=factory)

        result = await pipeline.run(VisionCorrectOperation(image=b"png"))

        assert result == VisionResult(code="x = 1", notes="- typo")
        prompt, config = client.calls[0]
        assert prompt.image == b"png"
        assert config.provider == "gemini"

    @pytest.mark.asyncio
    async def test_missing_credential_never_calls_provider(self, empty_settings, fake_client_factory):
        client, factory = fake_client_factory(RawModelReply.success("unused"))
        pipeline = OperationPipeline(empty_settings, client_factory=factory)

        with pytest.raises(ConfigurationError):
            await pipeline.run(AuditOperation(code="x"))

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, full_settings, fake_client_factory):
        error = ProviderError("Groq returned HTTP 429.", 429, '{"error": "slow down"}')
        _, factory = fake_client_factory(RawModelReply.failure(error))
        pipeline = OperationPipeline(full_settings, client_factory=factory)

        with pytest.raises(ProviderError) as exc_info:
            await pipeline.run(ConvertOperation(code="a", source_language="c", target_language="go"))

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_normalization_failure_keeps_raw(self, full_settings, fake_client_factory):
        _, factory = fake_client_factory(RawModelReply.success("Everything looks secure."))
        pipeline = OperationPipeline(full_settings, client_factory=factory)

        with pytest.raises(NormalizationError) as exc_info:
            await pipeline.run(AuditOperation(code="x"))

        assert exc_info.value.raw == "Everything looks secure."
