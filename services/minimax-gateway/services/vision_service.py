import json

import structlog
from connections.minimax_connection_provider import MinimaxClient
from core.config import settings
from core.exceptions import ContentError
from domain.error_codes import VISION_ERRORS
from domain.models import VisionRequest, VisionResponse
from services.guards import require, require_api_key
from services.prompts import VISION_INSTRUCTION, VISION_USER_PROMPT, image_message

logger = structlog.get_logger()


class VisionService:
    """
    Object detection via chat-completion. Boxes come back as [ymin, xmin, ymax, xmax] on a 0-1000 scale.
    """

    def __init__(self, client: MinimaxClient, model: str = settings.CHAT_MODEL):
        self.client = client
        self.model = model

    async def detect(self, request: VisionRequest) -> VisionResponse:
        api_key = require_api_key(request)
        require("Missing image data", "Image base64 data is required.", request.image_base64)

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": VISION_INSTRUCTION},
                image_message(request.image_base64 or "", VISION_USER_PROMPT),
            ],
            "response_format": {"type": "json_object"},
            # Lower than chat/blueprint to keep boxes stable between calls
            "temperature": 0.3,
            "max_tokens": 2048,
        }

        envelope = await self.client.chat_completion(api_key, payload, VISION_ERRORS)

        content = envelope.first_message_content()
        if not content:
            logger.error("vision_no_assistant_message")
            raise ContentError(
                "No response",
                "The AI did not generate a response. Please try again.",
                extra={"rawResponse": envelope.model_dump(mode="json", exclude_none=True)},
            )

        logger.info("vision_assistant_message", preview=str(content)[:500])

        try:
            detection = json.loads(content)
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning("vision_parse_failed", error=str(e), preview=str(content)[:500])
            raise ContentError(
                "Invalid detection format",
                "Failed to parse object detection results.",
                details=str(content),
            )

        objects = detection.get("objects") if isinstance(detection, dict) else None
        if not isinstance(objects, list):
            objects = []
        logger.info("vision_objects_detected", count=len(objects))
        return VisionResponse(objects=objects, usage=envelope.usage)
