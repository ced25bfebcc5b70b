"""
Caller-side helpers for the chat relay.

Unlike the relays, this module reads a default credential from the environment
(MINIMAX_API_KEY) and sends it along with every request.
"""

import json
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, Optional

import httpx
import structlog
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()

JSON_SYSTEM_PROMPT = (
    "You are a precise JSON generator. Always return valid JSON without any markdown "
    "formatting or explanations. Never use ```json blocks."
)

# Leading ```json / ``` and trailing ``` markers
CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
# Outermost brace span: first "{" to last "}"
BRACE_SPAN = re.compile(r"\{[\s\S]*\}")


class DispatchSettings(BaseSettings):
    GATEWAY_URL: str = ""
    GATEWAY_ANON_KEY: str = ""
    MINIMAX_API_KEY: str = ""
    CHAT_PATH: str = "/functions/v1/minimax-chat"
    DISPATCH_TIMEOUT: float = 60.0

    model_config = SettingsConfigDict()


class DispatchError(Exception):
    pass


class StructuredJSONError(DispatchError):
    pass


@asynccontextmanager
async def _http_client(http: Optional[httpx.AsyncClient], timeout: float) -> AsyncIterator[httpx.AsyncClient]:
    if http is not None:
        yield http
        return

    async with httpx.AsyncClient(timeout=timeout) as client:
        yield client


async def call_minimax(
    messages: Iterable[Dict[str, Any]],
    settings: Optional[DispatchSettings] = None,
    http: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Posts the conversation to the chat relay and returns the assistant text.
    Raises DispatchError carrying the relay's own message when it reports a failure.
    """
    config = settings or DispatchSettings()

    if not config.GATEWAY_URL or not config.MINIMAX_API_KEY:
        raise DispatchError("Missing environment variables")

    url = f"{config.GATEWAY_URL.rstrip('/')}{config.CHAT_PATH}"
    headers = {
        "Authorization": f"Bearer {config.GATEWAY_ANON_KEY}",
        "Content-Type": "application/json",
    }
    body = {"messages": list(messages), "apiKey": config.MINIMAX_API_KEY}

    async with _http_client(http, config.DISPATCH_TIMEOUT) as client:
        try:
            resp = await client.post(url, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error("minimax_dispatch_unreachable", url=url, error=str(e))
            raise DispatchError("Minimax API call failed") from e

    if not resp.is_success:
        message = _relay_message(resp) or "Minimax API call failed"
        logger.error("minimax_dispatch_failed", status=resp.status_code, message=message)
        raise DispatchError(message)

    data = _json_or_empty(resp)
    if not data.get("message"):
        raise DispatchError("No response from AI")

    return data["message"]


def parse_structured_json(raw: str) -> Any:
    """
    Best-effort recovery of a JSON value from model output.

    1. Strip surrounding code fences and parse directly.
    2. Otherwise parse the outermost {...} span.
    Text outside the span is discarded, and a reply
    holding several objects will not parse.
    """
    cleaned = CODE_FENCE.sub("", raw.strip())

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    match = BRACE_SPAN.search(cleaned)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise StructuredJSONError("Invalid JSON response") from e

    raise StructuredJSONError("Invalid JSON response")


async def generate_structured_json(
    prompt: str,
    image_base64: Optional[str] = None,
    settings: Optional[DispatchSettings] = None,
    http: Optional[httpx.AsyncClient] = None,
) -> Any:
    user_content = prompt
    if image_base64:
        user_content = (
            f"[Image provided]\n\n{prompt}\n\n"
            "IMPORTANT: Return ONLY valid JSON. No markdown, no explanations, just pure JSON."
        )

    raw = await call_minimax(
        [
            {"role": "system", "content": JSON_SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ],
        settings=settings,
        http=http,
    )

    try:
        return parse_structured_json(raw)
    except StructuredJSONError:
        logger.error("structured_json_unparseable", preview=raw[:300])
        raise


def _json_or_empty(resp: httpx.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _relay_message(resp: httpx.Response) -> Optional[str]:
    return _json_or_empty(resp).get("message")
