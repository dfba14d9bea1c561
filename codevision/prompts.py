"""
Prompt construction for every operation.

Pure functions: the same operation always produces the same prompt text.
Language labels are embedded verbatim; checking them is left to the model.
"""

from dataclasses import dataclass
from typing import Optional

from .schemas import (
    AuditOperation,
    ConvertOperation,
    OperationRequest,
    RefactorOperation,
    VisionCorrectOperation,
    VisionGenerateOperation,
)

IMAGE_MIME_TYPE = "image/png"
DEFAULT_CORRECT_LANGUAGE = "Detected from image"
DEFAULT_GENERATE_LANGUAGE = "HTML/CSS"

LANGUAGE_MISMATCH_MESSAGE = (
    "Error: Detected language is [detected_language] but the declared source language "
    "is [source_language]. Please verify the requested language."
)

CONVERT_SYSTEM_PROMPT = """
You are a senior software engineer and expert code converter.

Your task is to strictly follow the instructions below.

INPUT:
- Source language declared by the user: {source_language}
- Target language requested by the user: {target_language}
- User code: provided in the next message.

PROCESS:

1) Detect the actual programming language of the provided code.

2) Compare the detected language with the user-declared source language.

3) If the detected language DOES NOT match the declared source language:
   Output ONLY the following message and nothing else:
   {mismatch_message}

4) If the detected language matches the declared source language:
   - Fully analyze the source code.
   - Identify and fix any syntax errors, logical issues, or structural problems.
   - Convert the corrected code into the requested target language.
   - Adapt syntax, conventions, idioms, and best practices to the target language.

5) After conversion:
   - Re-analyze the converted code and fix any remaining errors.
   - Ensure the final output is syntactically correct and executable.

OUTPUT RULES (STRICT):
- If language mismatch: output ONLY the error message.
- If conversion succeeds: output ONLY the final converted code.
- Do NOT include explanations, markdown formatting or code fences.
- Do NOT add any extra text before or after the result.
"""

AUDIT_SYSTEM_PROMPT = """
You are a senior application security engineer performing a code audit.

Review the code provided in the next message for security vulnerabilities,
bugs and dangerous patterns.

Respond with a JSON array and NOTHING else. Each element is an object with
exactly these fields:
- "severity": one of "low", "medium", "high"
- "title": short name of the issue
- "description": what is wrong and how to fix it
- "file": file name if known, otherwise null
- "line": line number if known, otherwise null

If there are no issues, respond with [].
Do NOT write any prose, headings or explanations outside the array.
"""

REFACTOR_SYSTEM_PROMPT = """
You are a senior software engineer refactoring {language} code.

Refactor the code provided in the next message:
- Preserve its observable behavior exactly.
- Improve naming, structure and readability.
- Remove duplication and dead code.

Output ONLY the refactored code. No explanations, no markdown, no code fences.
"""

VISION_CORRECT_PROMPT = """
Analyze this image of code and fix any bugs.
Target Language: {target_language}.
{error_context}
Return:
CODE:
[Corrected code]

NOTES:
- Max 3 short fixes
"""

VISION_GENERATE_PROMPT = """
Generate functional {target_language} code based on this user interface screenshot.
Return ONLY the code. No explanations.
"""


@dataclass(frozen=True)
class Prompt:
    """Outbound prompt: optional system instruction, user payload, optional image."""

    user: str
    system: Optional[str] = None
    image: Optional[bytes] = None
    image_mime_type: Optional[str] = None


def build_convert_prompt(operation: ConvertOperation) -> Prompt:
    system = CONVERT_SYSTEM_PROMPT.format(
        source_language=operation.source_language,
        target_language=operation.target_language,
        mismatch_message=LANGUAGE_MISMATCH_MESSAGE,
    )
    return Prompt(system=system, user=operation.code)


def build_audit_prompt(operation: AuditOperation) -> Prompt:
    return Prompt(system=AUDIT_SYSTEM_PROMPT, user=operation.code)


def build_refactor_prompt(operation: RefactorOperation) -> Prompt:
    system = REFACTOR_SYSTEM_PROMPT.format(language=operation.language or "the given")
    return Prompt(system=system, user=operation.code)


def build_vision_correct_prompt(operation: VisionCorrectOperation) -> Prompt:
    error_context = f"User error context: {operation.error_context}\n" if operation.error_context else ""
    text = VISION_CORRECT_PROMPT.format(
        target_language=operation.target_language or DEFAULT_CORRECT_LANGUAGE,
        error_context=error_context,
    )
    return Prompt(user=text, image=operation.image, image_mime_type=IMAGE_MIME_TYPE)


def build_vision_generate_prompt(operation: VisionGenerateOperation) -> Prompt:
    text = VISION_GENERATE_PROMPT.format(
        target_language=operation.target_language or DEFAULT_GENERATE_LANGUAGE,
    )
    return Prompt(user=text, image=operation.image, image_mime_type=IMAGE_MIME_TYPE)


_BUILDERS = {
    ConvertOperation: build_convert_prompt,
    AuditOperation: build_audit_prompt,
    RefactorOperation: build_refactor_prompt,
    VisionCorrectOperation: build_vision_correct_prompt,
    VisionGenerateOperation: build_vision_generate_prompt,
}


def build_prompt(operation: OperationRequest) -> Prompt:
    try:
        builder = _BUILDERS[type(operation)]
    except KeyError:
        raise TypeError(f"Unsupported operation: {type(operation).__name__}") from None
    return builder(operation)
