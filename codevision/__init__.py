"""
CodeVision AI - backend proxy between the client app and the LLM providers.

Groq handles code conversion, audit and refactoring; Gemini handles
screenshot correction and UI-to-code generation.
"""

from .config import ProviderConfig, Settings
from .errors import (
    CodeVisionError,
    ConfigurationError,
    NormalizationError,
    ProviderError,
    TransportError,
)
from .normalizer import normalize
from .pipeline import OperationPipeline
from .prompts import Prompt, build_prompt

__all__ = [
    "ProviderConfig",
    "Settings",
    "CodeVisionError",
    "ConfigurationError",
    "NormalizationError",
    "ProviderError",
    "TransportError",
    "normalize",
    "OperationPipeline",
    "Prompt",
    "build_prompt",
]
