from typing import Any

from core.exceptions import MissingFieldError
from domain.models import RelayRequest


def require_api_key(request: RelayRequest) -> str:
    """The credential is always checked first, before any domain field."""
    if not request.api_key:
        raise MissingFieldError(
            "API key not provided",
            "Please provide your MiniMax API key in the apiKey field.",
        )
    return request.api_key


def require(error: str, message: str, *values: Any) -> None:
    if not all(values):
        raise MissingFieldError(error, message)
