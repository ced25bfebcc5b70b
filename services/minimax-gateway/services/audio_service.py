from typing import Any, Dict

import structlog
from connections.minimax_connection_provider import MinimaxClient
from core.config import settings
from core.exceptions import ContentError
from domain.error_codes import AUDIO_ERRORS
from domain.models import AudioRequest, AudioResponse
from services.guards import require, require_api_key

logger = structlog.get_logger()


class AudioService:
    """
    Text-to-speech. Single synchronous call; the provider returns the audio inline (no polling).
    """

    def __init__(self, client: MinimaxClient):
        self.client = client

    def build_payload(self, request: AudioRequest) -> Dict[str, Any]:
        voice_setting: Dict[str, Any] = {
            "voice_id": request.voice_id or settings.DEFAULT_VOICE_ID,
            "speed": request.speed or 1.0,
            "vol": 1.0,
            "pitch": 0,
        }
        if request.emotion:
            voice_setting["emotion"] = request.emotion

        return {
            "model": request.model or settings.SPEECH_MODEL,
            "text": request.text,
            "stream": False,
            "voice_setting": voice_setting,
        }

    async def synthesize(self, request: AudioRequest) -> AudioResponse:
        api_key = require_api_key(request)
        require("Missing text", "Text content is required for audio generation.", request.text)

        payload = self.build_payload(request)
        logger.info(
            "audio_synthesis_started",
            model=payload["model"],
            voice_id=payload["voice_setting"]["voice_id"],
            chars=len(request.text or ""),
        )

        envelope = await self.client.text_to_speech(api_key, payload, AUDIO_ERRORS)

        audio = envelope.data.audio if envelope.data else None
        if not audio:
            raise ContentError("No audio data", "The API did not return audio data.")

        return AudioResponse(
            audio_data=audio,
            audio_url=f"data:audio/mp3;base64,{audio}",
            usage=envelope.usage,
        )
