"""
Render session: the client-side state of one design flow
"""
import asyncio
from typing import List, Optional

import structlog

from planvision.client.api_client import PlanVisionAPIError, PlanVisionClient
from planvision.client.poller import GenerationPoller, PollOutcome, PollResult
from planvision.schemas.generation import GenerationJobResponse
from planvision.schemas.render_config import RenderConfigCreate, RenderConfigResponse

logger = structlog.get_logger()


class RenderSession:
    """
    Tracks submitted configs, generation history and the in-flight poll.

    At most one poll runs per session; starting a new one cancels the old
    one so a stale result can never overwrite newer state.
    """

    def __init__(self, client: PlanVisionClient, poller: Optional[GenerationPoller] = None):
        self.client = client
        self.poller = poller or GenerationPoller(client.get_generation_status)
        self.config_id: Optional[str] = None
        self.history: List[GenerationJobResponse] = []
        self.selected: Optional[GenerationJobResponse] = None
        self.result: Optional[GenerationJobResponse] = None
        self.error_message: Optional[str] = None
        self._poll_task: Optional[asyncio.Task] = None

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def submit(self, data: RenderConfigCreate) -> Optional[RenderConfigResponse]:
        """Submit a config and start polling its generation"""
        self.error_message = None
        try:
            config = await self.client.create_render_config(data)
        except PlanVisionAPIError as e:
            self.error_message = f"Failed to submit job: {e}"
            return None

        self.config_id = config.id
        self.start_polling(config.id)
        return config

    async def refine(self, custom_instructions: str) -> Optional[RenderConfigResponse]:
        """Generate again from the current config with extra instructions"""
        if self.config_id is None:
            self.error_message = "Cannot refine: no render config submitted yet."
            return None

        self.error_message = None
        try:
            config = await self.client.refine(self.config_id, custom_instructions)
        except PlanVisionAPIError as e:
            self.error_message = f"Failed to submit job: {e}"
            return None

        self.config_id = config.id
        self.start_polling(config.id)
        return config

    async def load_history(self) -> List[GenerationJobResponse]:
        if self.config_id is None:
            return []
        self.history = await self.client.get_generations(self.config_id)
        if self.history and self.selected is None:
            self.selected = self.history[0]
        return self.history

    def start_polling(self, config_id: str) -> asyncio.Task:
        """Poll a config's latest generation, replacing any poll already running"""
        if self.is_polling:
            logger.info("Cancelling previous poll", render_config_id=config_id)
            self._poll_task.cancel()

        self._poll_task = asyncio.create_task(self._poll(config_id))
        return self._poll_task

    async def wait(self) -> None:
        """Wait for the current poll, if any, to finish"""
        if self._poll_task is not None:
            await asyncio.gather(self._poll_task, return_exceptions=True)

    def cancel(self) -> None:
        if self.is_polling:
            self._poll_task.cancel()

    async def _poll(self, config_id: str) -> PollResult:
        result = await self.poller.poll(config_id)
        self._apply(result)
        return result

    def _apply(self, result: PollResult) -> None:
        if result.outcome == PollOutcome.COMPLETED:
            self.result = result.job
            self.history.insert(0, result.job)
            self.selected = result.job
        else:
            self.error_message = result.error_message
