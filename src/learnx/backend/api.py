"""FastAPI application exposing the LearnX request handlers."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from learnx.backend.handler_service import HandlerService
from learnx.backend.schemas import (
    AnalyzeSlidesRequest,
    AnalyzeSlidesResponse,
    ExplainImageRequest,
    ExplainImageResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    GenerateImageRequest,
    GenerateImageResponse,
    SpeechToTextRequest,
    SpeechToTextResponse,
)
from learnx.core.config import Settings, get_settings
from learnx.core.errors import LearnXError
from learnx.core.gateway import GatewayClient

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

HANDLER_NAMES = [
    "generate-image",
    "generate-content",
    "analyze-text-for-slides",
    "explain-image",
    "speech-to-text",
]

router = APIRouter(prefix="/functions", tags=["functions"])


# ============================================================================
# Helper Functions
# ============================================================================


def get_handler_service(request: Request) -> HandlerService:
    """Get the handler service bound to this app."""
    return request.app.state.handler_service


ServiceDep = Annotated[HandlerService, Depends(get_handler_service)]


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message or "Unknown error"},
        headers=CORS_HEADERS,
    )


# ============================================================================
# Handler Endpoints
# ============================================================================


@router.post("/generate-image", response_model=GenerateImageResponse)
def generate_image(body: GenerateImageRequest, service: ServiceDep):
    """Generate an image from a text prompt."""
    return service.generate_image(body)


@router.post("/generate-content", response_model=GenerateContentResponse)
def generate_content(body: GenerateContentRequest, service: ServiceDep):
    """Write content about a topic."""
    return service.generate_content(body)


@router.post("/analyze-text-for-slides", response_model=AnalyzeSlidesResponse)
def analyze_text_for_slides(body: AnalyzeSlidesRequest, service: ServiceDep):
    """Create a slide outline from free text."""
    return service.analyze_text_for_slides(body)


@router.post("/explain-image", response_model=ExplainImageResponse)
def explain_image(body: ExplainImageRequest, service: ServiceDep):
    """Explain an image for students."""
    return service.explain_image(body)


@router.post("/speech-to-text", response_model=SpeechToTextResponse)
def speech_to_text(body: SpeechToTextRequest, service: ServiceDep):
    """Transcribe an audio clip."""
    return service.speech_to_text(body)


# ============================================================================
# App Factory
# ============================================================================


def create_app(
    settings: Settings | None = None,
    gateway: GatewayClient | None = None,
) -> FastAPI:
    """Create the API app.

    Settings are resolved here so that a missing key fails at startup
    rather than on the first request.
    """
    settings = settings or get_settings()
    gateway = gateway or GatewayClient.from_settings(settings)

    app = FastAPI(
        title="LearnX Functions API",
        description="AI request handlers for the LearnX learning tools",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.handler_service = HandlerService(gateway, settings)

    # Every response carries permissive CORS headers; preflight is a no-op
    @app.middleware("http")
    async def cors_headers(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        logger.warning("Invalid request to %s: %s", request.url.path, details)
        return error_response(f"Invalid request: {details}")

    @app.exception_handler(LearnXError)
    async def learnx_error_handler(request: Request, exc: LearnXError):
        logger.error("Error in %s function: %s", request.url.path.rsplit("/", 1)[-1], exc)
        return error_response(str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error in %s: %s", request.url.path, exc, exc_info=exc)
        return error_response(str(exc))

    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "LearnX Functions API",
            "functions": [f"/functions/{name}" for name in HANDLER_NAMES],
            "docs": "/docs",
        }

    return app
