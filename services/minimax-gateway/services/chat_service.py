import structlog
from connections.minimax_connection_provider import MinimaxClient
from core.config import settings
from core.exceptions import ContentError
from domain.error_codes import CHAT_ERRORS
from domain.models import ChatRequest, ChatResponse
from services.guards import require, require_api_key

logger = structlog.get_logger()


class ChatService:
    """
    Forwards a conversation verbatim to the chat-completion endpoint.
    """

    def __init__(self, client: MinimaxClient, model: str = settings.CHAT_MODEL):
        self.client = client
        self.model = model

    async def relay(self, request: ChatRequest) -> ChatResponse:
        api_key = require_api_key(request)
        require("Missing messages", "At least one chat message is required.", request.messages)

        payload = {
            "model": self.model,
            "messages": [m.model_dump(exclude_unset=True) for m in request.messages or []],
            "temperature": 0.7,
            "max_tokens": 2048,
        }

        logger.info("chat_relay_started", message_count=len(payload["messages"]))
        envelope = await self.client.chat_completion(api_key, payload, CHAT_ERRORS)

        content = envelope.first_message_content()
        if not content:
            raise ContentError("No response", "The AI did not generate a response. Please try again.")

        return ChatResponse(message=content, usage=envelope.usage)
