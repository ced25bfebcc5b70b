"""
Provider status-code tables, one per endpoint family.

The tables overlap but are deliberately not merged: 1013 and 1039 mean
different things depending on which MiniMax endpoint answered.
"""

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from domain.models import BaseResp

UNKNOWN_ERROR = "Unknown error"

_COMMON = {
    1004: "Authentication failed. Please check your API key.",
    1008: (
        "Insufficient balance. Please add funds to your Minimax account at "
        "https://platform.minimax.io/user-center/payment/balance"
    ),
    1002: "Rate limited. Please wait a moment and try again.",
}


def _table(extra: Dict[int, str]) -> Mapping[int, str]:
    merged = dict(_COMMON)
    merged.update(extra)
    return MappingProxyType(merged)


CHAT_ERRORS = _table({1039: "Token limit exceeded. Please try a shorter message."})
BLUEPRINT_ERRORS = _table({1039: "Token limit exceeded. Please try a shorter prompt."})
VISION_ERRORS = _table({1039: "Token limit exceeded. Please try a shorter prompt."})
AUDIO_ERRORS = _table({1013: "Invalid parameters. Please check your audio generation request."})
IMAGE_ERRORS = _table({1013: "Invalid parameters. Please check your image generation request."})
VIDEO_ERRORS = _table({1013: "Invalid parameters. Please check your video generation request."})


def describe_status(base_resp: Optional[BaseResp], table: Mapping[int, str]) -> Optional[Tuple[int, str]]:
    """
    Returns (code, message) when the envelope declares an error, else None.
    Lookup order: table entry, then provider status_msg, then a generic fallback.
    """
    if base_resp is None or not base_resp.status_code:
        return None

    code = base_resp.status_code
    message = table.get(code) or base_resp.status_msg or UNKNOWN_ERROR
    return code, message
