import json

import structlog
from connections.minimax_connection_provider import MinimaxClient
from core.config import settings
from core.exceptions import ContentError, InvalidRequestError
from domain.error_codes import BLUEPRINT_ERRORS
from domain.models import BlueprintMode, BlueprintRequest, BlueprintResponse
from services.guards import require, require_api_key
from services.prompts import BLUEPRINT_USER_TEMPLATE, build_blueprint_instruction, image_message

logger = structlog.get_logger()


class BlueprintService:
    """
    Turns a photo of an object into an assembly/disassembly blueprint.

    One chat-completion call in JSON mode. The result is only checked for being
    a well-formed JSON object; individual fields are passed through as the model wrote them.
    """

    def __init__(self, client: MinimaxClient, model: str = settings.CHAT_MODEL):
        self.client = client
        self.model = model

    async def generate(self, request: BlueprintRequest) -> BlueprintResponse:
        api_key = require_api_key(request)
        require(
            "Missing required fields",
            "Image, object name, and mode are required.",
            request.image_base64,
            request.object_name,
            request.mode,
        )

        try:
            mode = BlueprintMode(request.mode)
        except ValueError:
            raise InvalidRequestError("Invalid mode", "Mode must be either 'assembly' or 'disassembly'.")

        object_name = request.object_name or ""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": build_blueprint_instruction(object_name, mode.value)},
                image_message(
                    request.image_base64 or "",
                    BLUEPRINT_USER_TEMPLATE.format(mode=mode.value, object_name=object_name),
                ),
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.7,
            "max_tokens": 4096,
        }

        logger.info("blueprint_generation_started", object_name=object_name, mode=mode.value)
        envelope = await self.client.chat_completion(api_key, payload, BLUEPRINT_ERRORS)

        content = envelope.first_message_content()
        if not content:
            raise ContentError("No response", "The AI did not generate a blueprint. Please try again.")

        try:
            blueprint = json.loads(content)
        except (TypeError, json.JSONDecodeError):
            blueprint = None

        if not isinstance(blueprint, dict):
            logger.warning("blueprint_parse_failed", preview=str(content)[:300])
            raise ContentError(
                "Invalid blueprint format",
                "Failed to parse blueprint data.",
                details=str(content),
            )

        logger.info("blueprint_generated", steps=len(blueprint.get("steps") or []))
        return BlueprintResponse(blueprint=blueprint, usage=envelope.usage)
