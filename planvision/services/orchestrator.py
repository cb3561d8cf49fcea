"""
Generation orchestrator: creates jobs and runs one background pipeline task per job.

Request handlers only create the job row and hand off; the worker task owns
the job from then on and is the only code that moves it out of ``pending``.
Every failure after the row exists is captured into the job's
``error_message`` instead of propagating to the caller.
"""
import asyncio
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session
import structlog

from planvision.core.exceptions import AppException, NotFoundError
from planvision.db.base import SessionLocal
from planvision.db.session import session_scope
from planvision.schemas.generation import GenerationJobResponse, PENDING_PLACEHOLDER
from planvision.schemas.render_config import RenderConfigCreate, RenderConfigResponse
from planvision.services.ai_providers import ExternalServiceError, GenerativeProvider, RetryPolicy
from planvision.services.generation import GenerationService
from planvision.services.prompt_builder import PromptParams, build_prompt_from_params
from planvision.services.reference_image import ReferenceImageFetcher
from planvision.services.render_config import RenderConfigService
from planvision.services.storage import StorageService

logger = structlog.get_logger()

OUTPUT_CONTENT_TYPE = "image/jpeg"


class GenerationOrchestrator:
    """Owns the generation pipeline and the read API used by polling clients"""

    def __init__(
        self,
        provider: GenerativeProvider,
        storage: StorageService,
        fetcher: ReferenceImageFetcher,
        retry_policy: Optional[RetryPolicy] = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        self.provider = provider
        self.storage = storage
        self.fetcher = fetcher
        self.retry_policy = retry_policy or RetryPolicy()
        self.session_factory = session_factory
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def active_job_ids(self) -> List[str]:
        return list(self._tasks)

    # Submission

    async def create(self, config_id: str) -> GenerationJobResponse:
        """Create a job for an existing config and start its worker without waiting for it"""
        with session_scope(self.session_factory) as db:
            if RenderConfigService(db).get_config(config_id) is None:
                raise NotFoundError(f"Render config {config_id} not found")
            job = GenerationService(db).create_job(config_id)
            response = GenerationJobResponse.from_job(job)

        self._schedule(response.id, config_id)
        return response

    async def submit(self, data: RenderConfigCreate) -> RenderConfigResponse:
        """Create a render config and trigger its first generation"""
        with session_scope(self.session_factory) as db:
            config = RenderConfigService(db).create_config(data.to_columns())
            config_id = config.id

        job = await self.create(config_id)
        return self._config_response(config_id, job)

    async def refine(self, config_id: str, custom_instructions: str) -> RenderConfigResponse:
        """Start a new generation from a child config with extra instructions"""
        with session_scope(self.session_factory) as db:
            child = RenderConfigService(db).derive_config(config_id, custom_instructions)
            child_id = child.id

        job = await self.create(child_id)
        return self._config_response(child_id, job)

    # Read API

    def get_config(self, config_id: str) -> RenderConfigResponse:
        with session_scope(self.session_factory) as db:
            config = RenderConfigService(db).get_config(config_id)
            if config is None:
                raise NotFoundError(f"Render config {config_id} not found")
            return RenderConfigResponse.from_config(config)

    def get_history(self, config_id: str) -> List[GenerationJobResponse]:
        """All jobs for a config, newest first"""
        with session_scope(self.session_factory) as db:
            jobs = GenerationService(db).list_jobs_for_config(config_id)
            return [GenerationJobResponse.from_job(job) for job in jobs]

    def get_latest(self, config_id: str) -> GenerationJobResponse:
        """Newest job for a config, or an unsaved pending placeholder"""
        with session_scope(self.session_factory) as db:
            job = GenerationService(db).get_latest_job(config_id)
            if job is None:
                return PENDING_PLACEHOLDER.model_copy()
            return GenerationJobResponse.from_job(job)

    # Worker

    def _schedule(self, job_id: str, config_id: str) -> asyncio.Task:
        if job_id in self._tasks:
            raise AppException(f"Generation job {job_id} already has a running worker")

        task = asyncio.create_task(self._run_pipeline(job_id, config_id), name=f"generation-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(job_id, None))
        logger.info("Generation worker scheduled", job_id=job_id, render_config_id=config_id)
        return task

    async def _run_pipeline(self, job_id: str, config_id: str) -> None:
        log = logger.bind(job_id=job_id, render_config_id=config_id)
        try:
            with session_scope(self.session_factory) as db:
                GenerationService(db).mark_processing(job_id)
                config = RenderConfigService(db).get_config(config_id)
                if config is None:
                    raise NotFoundError(f"Render config {config_id} not found")
                params = PromptParams.from_config(config)
                input_image_url = config.input_image_url

            reference = await self.fetcher.fetch(input_image_url)
            prompt = build_prompt_from_params(params)

            log.info("Calling generative provider", provider=self.provider.provider_name)
            output = await self.retry_policy.execute(
                self.provider.generate_image, prompt, reference.data, reference.content_type
            )
            if not output:
                raise ExternalServiceError("No image generated")

            public_url = await self.storage.store(
                output, content_type=OUTPUT_CONTENT_TYPE, filename=f"gen-{job_id}.jpg"
            )

            with session_scope(self.session_factory) as db:
                GenerationService(db).mark_completed(job_id, prompt_used=prompt, output_image_url=public_url)
            log.info("Generation completed", output_image_url=public_url)

        except asyncio.CancelledError:
            log.warning("Generation cancelled")
            self._record_failure(job_id, "Generation cancelled")
            raise
        except Exception as e:
            log.error("Generation failed", error=str(e), error_type=type(e).__name__)
            self._record_failure(job_id, str(e) or type(e).__name__)

    def _record_failure(self, job_id: str, message: str) -> None:
        try:
            with session_scope(self.session_factory) as db:
                GenerationService(db).mark_failed(job_id, message)
        except AppException as e:
            # Nothing upstream can act on this; the job keeps its last stored state
            logger.error("Could not record generation failure", job_id=job_id, error=str(e))

    # Lifecycle

    async def join(self) -> None:
        """Wait for every running worker to finish"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel running workers and wait for them to record their final state"""
        for task in list(self._tasks.values()):
            task.cancel()
        await self.join()

    def _config_response(self, config_id: str, job: GenerationJobResponse) -> RenderConfigResponse:
        response = self.get_config(config_id)
        response.generation = job
        return response
