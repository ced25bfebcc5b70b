from typing import Any, Dict

import structlog
from core.config import settings
from domain.error_codes import IMAGE_ERRORS, VIDEO_ERRORS
from domain.models import ImageRequest, ImageResponse, VideoRequest, VideoResponse
from services.guards import require, require_api_key
from services.job_runner import JobRunner, JobSpec, PollPolicy

logger = structlog.get_logger()

IMAGE_JOB = JobSpec(
    kind="image",
    errors=IMAGE_ERRORS,
    policy=PollPolicy(interval_seconds=settings.POLLING_INTERVAL, max_attempts=settings.IMAGE_MAX_POLL_ATTEMPTS),
)

VIDEO_JOB = JobSpec(
    kind="video",
    errors=VIDEO_ERRORS,
    policy=PollPolicy(interval_seconds=settings.POLLING_INTERVAL, max_attempts=settings.VIDEO_MAX_POLL_ATTEMPTS),
)


class GenerationService:
    """
    Image and video generation. Both are long-running provider tasks driven by the JobRunner;
    the response only carries a retrieval URL, the file itself is never downloaded here.
    """

    def __init__(self, runner: JobRunner, image_job: JobSpec = IMAGE_JOB, video_job: JobSpec = VIDEO_JOB):
        self.runner = runner
        self.image_job = image_job
        self.video_job = video_job

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        api_key = require_api_key(request)
        require("Missing prompt", "Image generation prompt is required.", request.prompt)

        payload = {
            "model": settings.IMAGE_MODEL,
            "prompt": request.prompt,
            "aspect_ratio": "1:1",
            "num_inference_steps": 50,
        }

        task = await self.runner.run(self.image_job, api_key, payload)
        file_id = task.file_id or ""

        return ImageResponse(image_url=self.runner.client.file_url(file_id), file_id=file_id, task_id=task.task_id)

    async def generate_video(self, request: VideoRequest) -> VideoResponse:
        api_key = require_api_key(request)
        require("Missing prompt", "Video prompt is required.", request.prompt)

        payload: Dict[str, Any] = {"model": settings.VIDEO_MODEL, "prompt": request.prompt}
        if request.first_frame_image:
            payload["first_frame_image"] = request.first_frame_image

        logger.info("video_generation_requested", has_first_frame=bool(request.first_frame_image))
        task = await self.runner.run(self.video_job, api_key, payload)
        file_id = task.file_id or ""

        return VideoResponse(video_url=self.runner.client.file_url(file_id), file_id=file_id, task_id=task.task_id)
