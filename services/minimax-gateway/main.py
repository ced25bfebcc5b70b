from contextlib import asynccontextmanager
from typing import Any, Dict

import httpx
import structlog

# Internal Imports
from core.config import settings
from core.dependencies import (
    get_audio_service,
    get_blueprint_service,
    get_chat_service,
    get_generation_service,
    get_vision_service,
)
from core.exceptions import RelayError
from core.logging import configure_logging
from core.telemetry import setup_telemetry
from domain.models import (
    AudioRequest,
    AudioResponse,
    BlueprintRequest,
    BlueprintResponse,
    ChatRequest,
    ChatResponse,
    ImageRequest,
    ImageResponse,
    VideoRequest,
    VideoResponse,
    VisionRequest,
    VisionResponse,
)
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from services.audio_service import AudioService
from services.blueprint_service import BlueprintService
from services.chat_service import ChatService
from services.generation_service import GenerationService
from services.vision_service import VisionService

# 1. Configure Logging
configure_logging(json_logs=(settings.ENV == "production"), log_level=settings.LOG_LEVEL)
logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}

DEFAULT_UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again."

# Keyed by the last path segment of each relay
UNEXPECTED_MESSAGES = {
    "minimax-blueprint": "An unexpected error occurred during blueprint generation.",
    "minimax-vision": "An unexpected error occurred during object detection.",
    "minimax-audio": "An unexpected error occurred during audio generation.",
    "minimax-image": "An unexpected error occurred during image generation.",
    "minimax-video": "An unexpected error occurred during video generation.",
}


# 2. Lifespan (Startup/Shutdown)
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("startup_initiated", env=settings.ENV, provider=settings.MINIMAX_BASE_URL)

    if settings.TELEMETRY_ENABLED:
        setup_telemetry()

    # One pooled client per process; credentials are attached per request
    app.state.http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)

    yield

    await app.state.http_client.aclose()
    logger.info("shutdown_initiated")


# 3. Create Main App
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, version="1.0.0")


# 4. Outer Boundary: CORS + last-resort error envelope
# Headers go on every response whether or not the request carries an Origin;
# preflight is always an empty 200.
@app.middleware("http")
async def cors_boundary(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("unhandled_exception", error=str(exc), path=request.url.path)
        endpoint = request.url.path.rstrip("/").rsplit("/", 1)[-1]
        response = JSONResponse(
            status_code=500,
            content={
                "error": str(exc) or exc.__class__.__name__,
                "message": UNEXPECTED_MESSAGES.get(endpoint, DEFAULT_UNEXPECTED_MESSAGE),
            },
        )

    response.headers.update(CORS_HEADERS)
    return response


# 5. Exception Handlers
@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    log = logger.warning if exc.status_code < 500 else logger.error
    log("relay_error", path=request.url.path, status=exc.status_code, error=exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    logger.warning("invalid_request_body", path=request.url.path, problems=problems)
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body",
            "message": "The request body must be a JSON object with the expected fields.",
            "details": problems,
        },
    )


# 6. Relay Endpoints
router = APIRouter(prefix=settings.ROUTE_PREFIX)


@router.post("/minimax-chat")
async def chat_endpoint(body: ChatRequest, service: ChatService = Depends(get_chat_service)) -> ChatResponse:
    return await service.relay(body)


@router.post("/minimax-blueprint")
async def blueprint_endpoint(
    body: BlueprintRequest, service: BlueprintService = Depends(get_blueprint_service)
) -> BlueprintResponse:
    return await service.generate(body)


@router.post("/minimax-vision")
async def vision_endpoint(body: VisionRequest, service: VisionService = Depends(get_vision_service)) -> VisionResponse:
    return await service.detect(body)


@router.post("/minimax-audio")
async def audio_endpoint(body: AudioRequest, service: AudioService = Depends(get_audio_service)) -> AudioResponse:
    return await service.synthesize(body)


@router.post("/minimax-image")
async def image_endpoint(
    body: ImageRequest, service: GenerationService = Depends(get_generation_service)
) -> ImageResponse:
    """
    Blocks until the image task finishes (up to ~2.5 minutes).
    """
    return await service.generate_image(body)


@router.post("/minimax-video")
async def video_endpoint(
    body: VideoRequest, service: GenerationService = Depends(get_generation_service)
) -> VideoResponse:
    """
    Blocks until the video task finishes (up to ~5 minutes).
    """
    return await service.generate_video(body)


app.include_router(router)


# 7. Health Check
@app.get("/health")
def health_check() -> Dict[str, Any]:
    return {"status": "ok", "env": settings.ENV}
