"""
Outbound provider calls.

One attempt per request, bounded by the config's timeout. Failures come
back as a `RawModelReply` holding a typed error instead of raising, so the
pipeline decides what to do with them.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Literal, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .config import GEMINI, GROQ, ProviderConfig
from .errors import CodeVisionError, ProviderError, TransportError
from .prompts import IMAGE_MIME_TYPE, Prompt

logger = logging.getLogger(__name__)

MAX_LOGGED_BODY = 500

ReplyStatus = Literal["success", "failure"]


@dataclass
class RawModelReply:
    status: ReplyStatus
    text: Optional[str] = None
    error: Optional[CodeVisionError] = None

    @classmethod
    def success(cls, text: str) -> "RawModelReply":
        return cls(status="success", text=text)

    @classmethod
    def failure(cls, error: CodeVisionError) -> "RawModelReply":
        return cls(status="failure", error=error)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def unwrap(self) -> str:
        if self.error is not None:
            raise self.error
        return self.text or ""


class ChatCompletionClient:
    """OpenAI-compatible chat completion endpoint (Groq)."""

    async def complete(self, prompt: Prompt, config: ProviderConfig) -> RawModelReply:
        messages = []
        if prompt.system:
            messages.append({"role": "system", "content": prompt.system})
        messages.append({"role": "user", "content": prompt.user})

        payload = {
            "model": config.model,
            "messages": messages,
            "temperature": config.temperature,
        }
        headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=config.timeout_s) as client:
                response = await client.post(config.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException:
            logger.error("%s request timed out after %ss", config.provider, config.timeout_s)
            return RawModelReply.failure(
                TransportError(f"{config.provider} did not respond within {config.timeout_s:g}s.", timeout=True)
            )
        except httpx.HTTPError as e:
            logger.error("%s request failed: %s", config.provider, e)
            return RawModelReply.failure(TransportError(f"Could not reach {config.provider}: {e}"))

        if not response.is_success:
            body = response.text
            logger.error("%s error %s: %s", config.provider, response.status_code, body[:MAX_LOGGED_BODY])
            return RawModelReply.failure(
                ProviderError(f"{config.provider} returned HTTP {response.status_code}.", response.status_code, body)
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None
        if content is None:
            return RawModelReply.failure(
                ProviderError(f"Unexpected response from {config.provider}.", response.status_code, response.text)
            )
        return RawModelReply.success(content)


class GeminiVisionClient:
    """Gemini multimodal generation through the google-genai SDK."""

    async def complete(self, prompt: Prompt, config: ProviderConfig) -> RawModelReply:
        client = genai.Client(
            api_key=config.api_key,
            http_options=types.HttpOptions(
                base_url=config.endpoint,
                timeout=int(config.timeout_s * 1000),
            ),
        )

        contents = [prompt.user]
        if prompt.image is not None:
            contents.append(
                types.Part.from_bytes(data=prompt.image, mime_type=prompt.image_mime_type or IMAGE_MIME_TYPE)
            )

        try:
            response = await asyncio.to_thread(
                client.models.generate_content,
                model=config.model,
                contents=contents,
                config=types.GenerateContentConfig(temperature=config.temperature),
            )
        except genai_errors.APIError as e:
            body = str(e.details) if e.details else None
            logger.error("%s error %s: %s", config.provider, e.code, (body or "")[:MAX_LOGGED_BODY])
            return RawModelReply.failure(
                ProviderError(f"{config.provider} returned HTTP {e.code}: {e.message}", e.code, body)
            )
        except httpx.TimeoutException:
            logger.error("%s request timed out after %ss", config.provider, config.timeout_s)
            return RawModelReply.failure(
                TransportError(f"{config.provider} did not respond within {config.timeout_s:g}s.", timeout=True)
            )
        except httpx.HTTPError as e:
            logger.error("%s request failed: %s", config.provider, e)
            return RawModelReply.failure(TransportError(f"Could not reach {config.provider}: {e}"))

        text = response.text
        if text is None:
            return RawModelReply.failure(ProviderError(f"{config.provider} returned no text."))
        return RawModelReply.success(text)


def client_for(config: ProviderConfig):
    if config.provider == GROQ:
        return ChatCompletionClient()
    if config.provider == GEMINI:
        return GeminiVisionClient()
    raise ValueError(f"Unknown provider: {config.provider}")
