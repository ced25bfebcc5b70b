from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# --- Inbound Requests ---
# Required fields are Optional here: absence is reported as a
# 400 "missing field" envelope by the service layer, not as a schema error.


class RelayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: Optional[str] = Field(default=None, alias="apiKey")


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Literal["user", "assistant", "system"]
    content: Union[str, List[Dict[str, Any]]]


class ChatRequest(RelayRequest):
    messages: Optional[List[ChatMessage]] = None


class BlueprintMode(str, Enum):
    ASSEMBLY = "assembly"
    DISASSEMBLY = "disassembly"


class BlueprintRequest(RelayRequest):
    image_base64: Optional[str] = Field(default=None, alias="imageBase64")
    object_name: Optional[str] = Field(default=None, alias="objectName")
    mode: Optional[str] = None


class VisionRequest(RelayRequest):
    image_base64: Optional[str] = Field(default=None, alias="imageBase64")


class AudioRequest(RelayRequest):
    text: Optional[str] = None
    voice_id: Optional[str] = Field(default=None, alias="voiceId")
    model: Optional[str] = None
    speed: Optional[float] = None
    emotion: Optional[str] = None


class ImageRequest(RelayRequest):
    prompt: Optional[str] = None


class VideoRequest(RelayRequest):
    prompt: Optional[str] = None
    first_frame_image: Optional[str] = Field(default=None, alias="firstFrameImage")


# --- Outbound Responses ---


class CamelResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ChatResponse(BaseModel):
    message: Union[str, List[Dict[str, Any]]]
    usage: Optional[Dict[str, Any]] = None


class BlueprintResponse(BaseModel):
    blueprint: Dict[str, Any]
    usage: Optional[Dict[str, Any]] = None


class VisionResponse(BaseModel):
    objects: List[Any]
    usage: Optional[Dict[str, Any]] = None


class AudioResponse(CamelResponse):
    audio_data: str = Field(alias="audioData")
    audio_url: str = Field(alias="audioUrl")
    usage: Optional[Dict[str, Any]] = None


class ImageResponse(CamelResponse):
    image_url: str = Field(alias="imageUrl")
    file_id: str = Field(alias="fileId")
    task_id: str = Field(alias="taskId")


class VideoResponse(CamelResponse):
    video_url: str = Field(alias="videoUrl")
    file_id: str = Field(alias="fileId")
    task_id: str = Field(alias="taskId")


# --- Provider Envelopes ---
# Extra fields are kept so they can be echoed back for debugging.


class BaseResp(BaseModel):
    status_code: Optional[int] = None
    status_msg: Optional[str] = None


class ProviderEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    base_resp: Optional[BaseResp] = None


class ChoiceMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    content: Optional[Any] = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: Optional[ChoiceMessage] = None


class ChatCompletionEnvelope(ProviderEnvelope):
    choices: Optional[List[Choice]] = None
    usage: Optional[Dict[str, Any]] = None

    def first_message_content(self) -> Optional[Any]:
        if not self.choices or self.choices[0].message is None:
            return None
        return self.choices[0].message.content


class SpeechData(BaseModel):
    model_config = ConfigDict(extra="allow")

    audio: Optional[str] = None


class SpeechEnvelope(ProviderEnvelope):
    data: Optional[SpeechData] = None
    usage: Optional[Dict[str, Any]] = None


class TaskSubmission(ProviderEnvelope):
    task_id: Optional[str] = None


class TaskStatusEnvelope(ProviderEnvelope):
    status: Optional[str] = None
    file_id: Optional[str] = None


# --- Generation Jobs ---


class JobState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class GenerationTask(BaseModel):
    task_id: str
    state: JobState = JobState.SUBMITTED
    file_id: Optional[str] = None
    attempts: int = 0
