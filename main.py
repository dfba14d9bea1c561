"""
CodeVision AI - Secure Backend Proxy
Keeps Groq and Gemini credentials server-side, shapes the prompts and turns
the model replies into the JSON the client app expects.
"""

import os
import time
import base64
import binascii
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware

from codevision.config import Settings
from codevision.errors import CodeVisionError
from codevision.pipeline import OperationPipeline
from codevision.schemas import (
    AuditOperation,
    AuditRequest,
    AuditResponse,
    ConvertOperation,
    ConvertRequest,
    ConvertResponse,
    HealthResponse,
    ProviderStatus,
    RefactorOperation,
    RefactorRequest,
    RefactorResponse,
    VisionCorrectOperation,
    VisionGenerateOperation,
    VisionRequest,
    VisionResponse,
)

# Load environment variables from .env file
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Configuration - resolved once for the whole process
settings = Settings.from_env()
PORT = int(os.getenv("PORT", "3000"))

pipeline: Optional[OperationPipeline] = None


def get_pipeline() -> OperationPipeline:
    global pipeline
    if pipeline is None:
        pipeline = OperationPipeline(settings)
    return pipeline


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.log_summary()
    logger.info("Configuration state: %s", settings.state)
    yield


app = FastAPI(title="CodeVision AI", description="Secure backend proxy for Groq and Gemini", lifespan=lifespan)

CORS_ALLOW_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    elapsed_ms = (time.time() - start_time) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.exception_handler(CodeVisionError)
async def codevision_error_handler(request: Request, exc: CodeVisionError):
    logger.error("%s %s failed (%s): %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def decode_image(image: str) -> bytes:
    """Decode a base64 image, accepting a data URL prefix."""
    encoded = image.split(",", 1)[1] if "," in image else image
    encoded = encoded.strip()
    # Add padding if needed
    missing_padding = len(encoded) % 4
    if missing_padding:
        encoded += "=" * (4 - missing_padding)
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Image is not valid base64.")
    if not data:
        raise HTTPException(status_code=400, detail="Image is empty.")
    return data


# Endpoints

@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Backend OK"


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return HealthResponse(
        status="ok",
        state=settings.state,
        config=ProviderStatus(**settings.providers_status()),
    )


@app.post("/api/convert", response_model=ConvertResponse)
async def convert(request: ConvertRequest):
    operation = ConvertOperation(
        code=request.sourceCode,
        source_language=request.fromLanguage,
        target_language=request.toLanguage,
    )
    result = await get_pipeline().run(operation)
    return ConvertResponse(convertedCode=result.code)


@app.post("/api/audit", response_model=AuditResponse)
async def audit(request: AuditRequest):
    result = await get_pipeline().run(AuditOperation(code=request.code))
    return AuditResponse(findings=result.items)


@app.post("/api/refactor", response_model=RefactorResponse)
async def refactor(request: RefactorRequest):
    result = await get_pipeline().run(RefactorOperation(code=request.code, language=request.language))
    return RefactorResponse(refactoredCode=result.code)


@app.post("/api/vision", response_model=VisionResponse)
async def vision(request: VisionRequest):
    image = decode_image(request.image)

    if request.mode == "correct":
        operation = VisionCorrectOperation(
            image=image,
            target_language=request.targetLanguage,
            error_context=request.errorCode,
        )
    else:
        operation = VisionGenerateOperation(image=image, target_language=request.targetLanguage)

    result = await get_pipeline().run(operation)
    return VisionResponse(result=result.code, notes=result.notes)


if __name__ == "__main__":
    import uvicorn
    logger.info("CodeVision AI starting on http://localhost:%s", PORT)
    uvicorn.run(app, host="0.0.0.0", port=PORT)
