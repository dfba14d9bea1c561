from dataclasses import dataclass, field
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, field_validator


class OperationKind(str, Enum):
    CONVERT = "convert"
    AUDIT = "audit"
    REFACTOR = "refactor"
    VISION_CORRECT = "vision_correct"
    VISION_GENERATE = "vision_generate"


# Operation requests (one per inbound call)

@dataclass(frozen=True)
class ConvertOperation:
    code: str
    source_language: str
    target_language: str
    kind: OperationKind = field(default=OperationKind.CONVERT, init=False)


@dataclass(frozen=True)
class AuditOperation:
    code: str
    kind: OperationKind = field(default=OperationKind.AUDIT, init=False)


@dataclass(frozen=True)
class RefactorOperation:
    code: str
    language: Optional[str] = None
    kind: OperationKind = field(default=OperationKind.REFACTOR, init=False)


@dataclass(frozen=True)
class VisionCorrectOperation:
    image: bytes
    target_language: Optional[str] = None
    error_context: Optional[str] = None
    kind: OperationKind = field(default=OperationKind.VISION_CORRECT, init=False)


@dataclass(frozen=True)
class VisionGenerateOperation:
    image: bytes
    target_language: Optional[str] = None
    kind: OperationKind = field(default=OperationKind.VISION_GENERATE, init=False)


OperationRequest = Union[
    ConvertOperation,
    AuditOperation,
    RefactorOperation,
    VisionCorrectOperation,
    VisionGenerateOperation,
]


class Finding(BaseModel):
    severity: Literal["low", "medium", "high"]
    title: str
    description: str
    file: Optional[str] = None
    line: Optional[int] = None

    @field_validator("severity", mode="before")
    @classmethod
    def lower_severity(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


# Normalized results, mirroring the operation that produced them

@dataclass(frozen=True)
class ConvertedCode:
    code: str


@dataclass(frozen=True)
class Findings:
    items: List[Finding]


@dataclass(frozen=True)
class RefactoredCode:
    code: str


@dataclass(frozen=True)
class VisionResult:
    code: str
    notes: str = ""


NormalizedResult = Union[ConvertedCode, Findings, RefactoredCode, VisionResult]


# HTTP request/response bodies

class ConvertRequest(BaseModel):
    sourceCode: str
    fromLanguage: str
    toLanguage: str


class ConvertResponse(BaseModel):
    convertedCode: str


class AuditRequest(BaseModel):
    code: str


class AuditResponse(BaseModel):
    findings: List[Finding]


class RefactorRequest(BaseModel):
    code: str
    language: Optional[str] = None


class RefactorResponse(BaseModel):
    refactoredCode: str


class VisionRequest(BaseModel):
    image: str
    mode: str = "generate"
    targetLanguage: Optional[str] = None
    errorCode: Optional[str] = None


class VisionResponse(BaseModel):
    result: str
    notes: str = ""


class ProviderStatus(BaseModel):
    groq: bool
    gemini: bool


class HealthResponse(BaseModel):
    status: str = "ok"
    state: str
    config: ProviderStatus
