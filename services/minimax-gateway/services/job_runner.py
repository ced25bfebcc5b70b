import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping

import structlog
from connections.minimax_connection_provider import MinimaxClient, raise_for_provider_status
from core.exceptions import ContentError, JobFailedError, JobTimeoutError, ProviderError
from core.telemetry import tracer
from domain.models import GenerationTask, JobState

logger = structlog.get_logger()

Sleeper = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class PollPolicy:
    interval_seconds: float = 5.0
    max_attempts: int = 30


@dataclass(frozen=True)
class JobSpec:
    """
    Describes one kind of async generation job.
    kind drives both the provider paths ("/v1/<kind>_generation") and the user-facing wording.
    """

    kind: str
    errors: Mapping[int, str]
    policy: PollPolicy

    @property
    def label(self) -> str:
        return self.kind.capitalize()


class JobRunner:
    """
    Runs the submit -> poll -> retrieve protocol for MiniMax async tasks.

    The wait happens BEFORE every poll, so the wall-clock budget is roughly
    max_attempts * interval_seconds. Malformed status bodies are tolerated and
    counted; provider errors and explicit failures abort immediately.
    """

    def __init__(self, client: MinimaxClient, sleep: Sleeper = asyncio.sleep):
        self.client = client
        self.sleep = sleep

    async def run(self, spec: JobSpec, api_key: str, payload: Dict[str, Any]) -> GenerationTask:
        with tracer.start_as_current_span(f"minimax.{spec.kind}_generation") as span:
            task = await self.submit(spec, api_key, payload)
            span.set_attribute("minimax.task_id", task.task_id)

            task = await self.poll(spec, api_key, task)
            span.set_attribute("minimax.poll_attempts", task.attempts)
            return task

    async def submit(self, spec: JobSpec, api_key: str, payload: Dict[str, Any]) -> GenerationTask:
        submission = await self.client.submit_task(spec.kind, api_key, payload, spec.errors)

        if not submission.task_id:
            raise ContentError(
                "No task ID",
                f"Failed to get task ID from {spec.kind} generation request.",
                details=submission.model_dump_json(),
            )

        logger.info("job_submitted", kind=spec.kind, task_id=submission.task_id)
        return GenerationTask(task_id=submission.task_id)

    async def poll(self, spec: JobSpec, api_key: str, task: GenerationTask) -> GenerationTask:
        task.state = JobState.POLLING

        while task.attempts < spec.policy.max_attempts:
            await self.sleep(spec.policy.interval_seconds)
            task.attempts += 1

            status = await self.client.query_task(spec.kind, api_key, task.task_id)

            if status is None:
                # Transient glitch, keep polling
                logger.warning("job_poll_malformed", kind=spec.kind, task_id=task.task_id, attempt=task.attempts)
                continue

            try:
                raise_for_provider_status(status, spec.errors)
            except ProviderError:
                task.state = JobState.FAILED
                raise

            state = (status.status or "").lower()
            logger.debug("job_poll_attempt", kind=spec.kind, task_id=task.task_id, attempt=task.attempts, status=state)

            if state == "success" and status.file_id:
                task.state = JobState.SUCCEEDED
                task.file_id = status.file_id
                logger.info("job_succeeded", kind=spec.kind, task_id=task.task_id, attempts=task.attempts)
                return task

            if state in ("failed", "fail"):
                task.state = JobState.FAILED
                logger.warning("job_failed", kind=spec.kind, task_id=task.task_id, attempts=task.attempts)
                raise JobFailedError("Generation failed", f"{spec.label} generation task failed.")

        task.state = JobState.TIMED_OUT
        logger.warning("job_timed_out", kind=spec.kind, task_id=task.task_id, attempts=task.attempts)
        raise JobTimeoutError("Timeout", f"{spec.label} generation timed out. Please try again.")
