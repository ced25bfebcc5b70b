import asyncio

import httpx
from connections.minimax_connection_provider import MinimaxClient
from core.config import settings
from fastapi import Depends, Request
from services.audio_service import AudioService
from services.blueprint_service import BlueprintService
from services.chat_service import ChatService
from services.generation_service import GenerationService
from services.job_runner import JobRunner, Sleeper
from services.vision_service import VisionService


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    The shared connection pool created in the app lifespan.
    """
    return request.app.state.http_client


def get_minimax_client(http: httpx.AsyncClient = Depends(get_http_client)) -> MinimaxClient:
    return MinimaxClient(http, base_url=settings.MINIMAX_BASE_URL)


def get_sleeper() -> Sleeper:
    """
    Dependency Factory: the poll delay. Overridden in tests to avoid real waits.
    """
    return asyncio.sleep


def get_job_runner(
    client: MinimaxClient = Depends(get_minimax_client),
    sleep: Sleeper = Depends(get_sleeper),
) -> JobRunner:
    return JobRunner(client, sleep=sleep)


def get_chat_service(client: MinimaxClient = Depends(get_minimax_client)) -> ChatService:
    return ChatService(client)


def get_blueprint_service(client: MinimaxClient = Depends(get_minimax_client)) -> BlueprintService:
    return BlueprintService(client)


def get_vision_service(client: MinimaxClient = Depends(get_minimax_client)) -> VisionService:
    return VisionService(client)


def get_audio_service(client: MinimaxClient = Depends(get_minimax_client)) -> AudioService:
    return AudioService(client)


def get_generation_service(runner: JobRunner = Depends(get_job_runner)) -> GenerationService:
    return GenerationService(runner)
