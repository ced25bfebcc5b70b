import json
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import httpx
import structlog
from core.config import settings
from core.exceptions import InvalidEnvelopeError, ProviderError, UpstreamHTTPError
from domain.error_codes import describe_status
from domain.models import (
    ChatCompletionEnvelope,
    ProviderEnvelope,
    SpeechEnvelope,
    TaskStatusEnvelope,
    TaskSubmission,
)
from pydantic import ValidationError

logger = structlog.get_logger()

EnvelopeT = TypeVar("EnvelopeT", bound=ProviderEnvelope)

INVALID_RESPONSE_MESSAGE = "The API returned an invalid response."


def parse_envelope(body: str, model: Type[EnvelopeT]) -> Optional[EnvelopeT]:
    """
    Validates a raw provider body at the boundary.
    Returns None when the body is malformed (not JSON, or not an object of the expected shape).
    """
    try:
        return model.model_validate(json.loads(body))
    except (json.JSONDecodeError, ValidationError):
        return None


def raise_for_provider_status(envelope: ProviderEnvelope, errors: Mapping[int, str]) -> None:
    """Raises ProviderError if the envelope declares a non-zero base_resp.status_code."""
    declared = describe_status(envelope.base_resp, errors)
    if declared is not None:
        code, message = declared
        logger.warning("provider_declared_error", code=code, message=message)
        raise ProviderError(code, message)


class MinimaxClient:
    """
    Thin async wrapper over the MiniMax REST API.
    The credential is supplied per call and never stored on the client.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str = settings.MINIMAX_BASE_URL):
        self.http = http
        self.base_url = base_url.rstrip("/")

    def file_url(self, file_id: str) -> str:
        return f"{self.base_url}/v1/files/retrieve?file_id={file_id}"

    async def chat_completion(
        self, api_key: str, payload: Dict[str, Any], errors: Mapping[int, str]
    ) -> ChatCompletionEnvelope:
        resp = await self._send("POST", "/v1/text/chatcompletion_v2", api_key, json=payload)
        logger.info("chat_completion_response", status=resp.status_code, preview=resp.text[:500])

        if not resp.is_success:
            raise UpstreamHTTPError(
                f"API error: {resp.status_code}",
                f"Minimax API returned error {resp.status_code}.",
                details=resp.text,
            )

        return self._checked(resp.text, ChatCompletionEnvelope, errors, INVALID_RESPONSE_MESSAGE)

    async def text_to_speech(self, api_key: str, payload: Dict[str, Any], errors: Mapping[int, str]) -> SpeechEnvelope:
        resp = await self._send("POST", "/v1/t2a_v2", api_key, json=payload)

        if not resp.is_success:
            raise UpstreamHTTPError(
                f"API error: {resp.status_code}",
                f"Failed to generate audio. Status: {resp.status_code}",
                details=resp.text,
            )

        return self._checked(resp.text, SpeechEnvelope, errors, INVALID_RESPONSE_MESSAGE)

    async def submit_task(
        self, kind: str, api_key: str, payload: Dict[str, Any], errors: Mapping[int, str]
    ) -> TaskSubmission:
        """
        Creates an async generation task (kind is "image" or "video").
        """
        resp = await self._send("POST", f"/v1/{kind}_generation", api_key, json=payload)

        if not resp.is_success:
            raise UpstreamHTTPError(
                f"API error: {resp.status_code}",
                f"Failed to create {kind} generation task. Status: {resp.status_code}",
                details=resp.text,
            )

        return self._checked(
            resp.text,
            TaskSubmission,
            errors,
            "The API returned an invalid response when creating task.",
        )

    async def query_task(self, kind: str, api_key: str, task_id: str) -> Optional[TaskStatusEnvelope]:
        """
        Fetches the task status. Returns None for a malformed body so the caller
        can decide whether to tolerate it; provider error codes are NOT checked here.
        """
        resp = await self._send("GET", f"/v1/query/{kind}_generation", api_key, params={"task_id": task_id})
        return parse_envelope(resp.text, TaskStatusEnvelope)

    def _checked(
        self, body: str, model: Type[EnvelopeT], errors: Mapping[int, str], invalid_message: str
    ) -> EnvelopeT:
        envelope = parse_envelope(body, model)
        if envelope is None:
            raise InvalidEnvelopeError("Invalid response", invalid_message, details=body)

        raise_for_provider_status(envelope, errors)
        return envelope

    async def _send(self, method: str, path: str, api_key: str, **kwargs: Any) -> httpx.Response:
        headers = {"Authorization": f"Bearer {api_key}"}
        url = f"{self.base_url}{path}"

        try:
            resp = await self.http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("provider_unreachable", method=method, path=path, error=str(e))
            raise UpstreamHTTPError(
                "Upstream unreachable",
                "Could not reach the Minimax API. Please try again.",
                details=str(e),
                original_error=e,
            )

        logger.debug("provider_response", method=method, path=path, status=resp.status_code)
        if not resp.is_success:
            logger.warning("provider_request_failed", method=method, path=path, status=resp.status_code)
        return resp
