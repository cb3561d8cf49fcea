"""
Client-side polling of a render config's latest generation
"""
import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import structlog

from planvision.core.config import settings
from planvision.models.enums import JobStatus
from planvision.schemas.generation import GenerationJobResponse

logger = structlog.get_logger()

DEFAULT_FAILURE_MESSAGE = "Generation failed on server."
TIMEOUT_MESSAGE = "Generation timed out. Please try again later."


class PollOutcome(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class PollResult:
    outcome: PollOutcome
    job: Optional[GenerationJobResponse] = None
    error_message: Optional[str] = None
    attempts: int = 0


class GenerationPoller:
    """
    Polls the latest-generation endpoint until the job is terminal or the
    attempt budget runs out. Each attempt waits one interval first.

    Timing out only stops the client; the server-side job keeps running.
    """

    def __init__(
        self,
        fetch_status: Callable[[str], Awaitable[GenerationJobResponse]],
        interval: float = None,
        max_attempts: int = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.fetch_status = fetch_status
        self.interval = settings.POLL_INTERVAL_SECONDS if interval is None else interval
        self.max_attempts = settings.POLL_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self._sleep = sleep

    async def poll(self, config_id: str) -> PollResult:
        log = logger.bind(render_config_id=config_id)

        for attempt in range(1, self.max_attempts + 1):
            await self._sleep(self.interval)

            try:
                job = await self.fetch_status(config_id)
            except Exception as e:
                # A failed request uses up the attempt; the next one may succeed
                log.warning("Status request failed", attempt=attempt, error=str(e))
                continue

            log.debug("Polling status", attempt=attempt, status=job.status.value)

            if job.status == JobStatus.COMPLETED:
                log.info("Generation completed", job_id=job.id, attempts=attempt)
                return PollResult(outcome=PollOutcome.COMPLETED, job=job, attempts=attempt)

            if job.status == JobStatus.FAILED:
                message = job.errorMessage or DEFAULT_FAILURE_MESSAGE
                log.warning("Generation failed", job_id=job.id, error_message=message)
                return PollResult(
                    outcome=PollOutcome.FAILED,
                    job=job,
                    error_message=message,
                    attempts=attempt,
                )

        log.warning("Polling timed out", attempts=self.max_attempts)
        return PollResult(
            outcome=PollOutcome.TIMED_OUT,
            error_message=TIMEOUT_MESSAGE,
            attempts=self.max_attempts,
        )
