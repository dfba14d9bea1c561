"""
Response normalization.

Turns a provider's freeform text reply into the typed result for the
operation that produced it:

  1. trim
  2. strip the outermost code fence lines (interior fences are kept)
  3. single-payload operations: the text is the result
  4. vision correction: split on the first ``NOTES:`` marker
  5. audit: drop markdown heading lines and parse a JSON array of findings

Audit parse failures raise `NormalizationError` carrying the stripped text,
so the caller can still show what the model said.
"""

import json
import re
from typing import List, Optional, Tuple

from pydantic import ValidationError

from .errors import NormalizationError
from .schemas import (
    ConvertedCode,
    Finding,
    Findings,
    NormalizedResult,
    OperationKind,
    RefactoredCode,
    VisionResult,
)

FENCE = "```"
CODE_LABEL = "CODE:"
NOTES_MARKER = "NOTES:"
DEFAULT_NOTES = "Corrections applied."

_OPENING_FENCE_RE = re.compile(r"^\s*```[^`]*$")
_CLOSING_FENCE_RE = re.compile(r"^\s*```\s*$")
_HEADING_RE = re.compile(r"^\s*#")


def _find_fences(lines: List[str]) -> Tuple[Optional[int], Optional[int]]:
    opening = next((i for i, line in enumerate(lines) if _OPENING_FENCE_RE.match(line)), None)
    if opening is None:
        return None, None
    closing = None
    for i in range(len(lines) - 1, opening, -1):
        if _CLOSING_FENCE_RE.match(lines[i]):
            closing = i
            break
    return opening, closing


def strip_code_fences(text: str) -> str:
    """Remove the first opening fence line and the last closing fence line."""
    text = text.strip()
    lines = text.split("\n")
    opening, closing = _find_fences(lines)
    if opening is None:
        return text

    if closing is not None:
        del lines[closing]
    del lines[opening]
    stripped = "\n".join(lines).strip()

    # closing fence glued to the last line of code, e.g. "foo()```"
    if closing is None and stripped.endswith(FENCE):
        stripped = stripped[: -len(FENCE)].rstrip()
    return stripped


def strip_markdown_headings(text: str) -> str:
    lines = [line for line in text.split("\n") if not _HEADING_RE.match(line)]
    return "\n".join(lines).strip()


def split_code_and_notes(text: str) -> Tuple[str, str]:
    """Split a ``CODE: ... NOTES: ...`` reply. The first NOTES: wins."""
    code_part, marker, notes_part = text.partition(NOTES_MARKER)
    if not marker:
        return text.strip(), DEFAULT_NOTES

    code = code_part.strip()
    if code.startswith(CODE_LABEL):
        code = code[len(CODE_LABEL):].strip()
    return code, notes_part.strip() or DEFAULT_NOTES


def parse_findings(text: str) -> List[Finding]:
    cleaned = strip_markdown_headings(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise NormalizationError(f"Audit reply is not valid JSON: {e.msg}", raw=cleaned) from e

    if not isinstance(payload, list):
        raise NormalizationError("Audit reply is not a JSON array.", raw=cleaned)

    findings = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise NormalizationError(f"Audit finding #{index} is not an object.", raw=cleaned)
        try:
            findings.append(Finding.model_validate(item))
        except ValidationError as e:
            raise NormalizationError(f"Audit finding #{index} is invalid: {e.errors()[0]['msg']}", raw=cleaned) from e
    return findings


def normalize(kind: OperationKind, text: Optional[str]) -> NormalizedResult:
    """Normalize a raw reply into the result shape of `kind`."""
    cleaned = strip_code_fences(text or "")

    if kind == OperationKind.CONVERT:
        return ConvertedCode(code=cleaned)
    if kind == OperationKind.REFACTOR:
        return RefactoredCode(code=cleaned)
    if kind == OperationKind.VISION_GENERATE:
        return VisionResult(code=cleaned, notes="")
    if kind == OperationKind.VISION_CORRECT:
        code, notes = split_code_and_notes(cleaned)
        return VisionResult(code=code, notes=notes)
    if kind == OperationKind.AUDIT:
        return Findings(items=parse_findings(cleaned))
    raise ValueError(f"Unknown operation kind: {kind}")
