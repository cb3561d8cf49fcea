"""
Generation service for persisting and querying generation jobs
"""
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from planvision.core.exceptions import InvalidJobTransitionError, NotFoundError, PersistenceError
from planvision.models.enums import JobStatus
from planvision.models.generation import GenerationJob

logger = structlog.get_logger()

# Allowed status moves; terminal states have no outgoing edges
_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.PROCESSING, JobStatus.FAILED},
    JobStatus.PROCESSING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


class GenerationService:
    def __init__(self, db: Session):
        self.db = db

    def create_job(self, render_config_id: str) -> GenerationJob:
        """Create a new pending generation job"""
        job = GenerationJob(
            render_config_id=render_config_id,
            status=JobStatus.PENDING.value,
            prompt_used="",
        )
        self._commit(job)
        logger.info("generation job created", job_id=job.id, render_config_id=render_config_id)
        return job

    def get_job(self, job_id: str) -> Optional[GenerationJob]:
        """Get generation job by ID"""
        with self._reading(job_id=job_id):
            return self.db.query(GenerationJob).filter(GenerationJob.id == job_id).first()

    def list_jobs_for_config(self, render_config_id: str) -> List[GenerationJob]:
        """All jobs for a render config, newest first"""
        with self._reading(render_config_id=render_config_id):
            return (
                self.db.query(GenerationJob)
                .filter(GenerationJob.render_config_id == render_config_id)
                .order_by(desc(GenerationJob.created_at))
                .all()
            )

    def get_latest_job(self, render_config_id: str) -> Optional[GenerationJob]:
        with self._reading(render_config_id=render_config_id):
            return (
                self.db.query(GenerationJob)
                .filter(GenerationJob.render_config_id == render_config_id)
                .order_by(desc(GenerationJob.created_at))
                .first()
            )

    def mark_processing(self, job_id: str) -> GenerationJob:
        return self._transition(job_id, JobStatus.PROCESSING)

    def mark_completed(self, job_id: str, prompt_used: str, output_image_url: str) -> GenerationJob:
        return self._transition(
            job_id,
            JobStatus.COMPLETED,
            prompt_used=prompt_used,
            output_image_url=output_image_url,
            error_message=None,
        )

    def mark_failed(self, job_id: str, error_message: str) -> GenerationJob:
        return self._transition(job_id, JobStatus.FAILED, error_message=error_message)

    def _transition(self, job_id: str, status: JobStatus, **fields) -> GenerationJob:
        """Move a job to a new status, refusing any change once it is terminal"""
        job = self.get_job(job_id)
        if job is None:
            raise NotFoundError(f"Generation job {job_id} not found")

        current = JobStatus(job.status)
        if status not in _TRANSITIONS[current]:
            logger.warning(
                "rejected generation job transition",
                job_id=job_id,
                current_status=current.value,
                requested_status=status.value,
            )
            raise InvalidJobTransitionError(job_id, current.value, status.value)

        job.status = status.value
        for key, value in fields.items():
            setattr(job, key, value)
        self._commit(job)
        logger.info("generation job status updated", job_id=job_id, status=status.value)
        return job

    def _commit(self, job: GenerationJob) -> None:
        try:
            self.db.add(job)
            self.db.commit()
            self.db.refresh(job)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("generation job write failed", job_id=job.id, error=str(e))
            raise PersistenceError(f"Failed to persist generation job: {e}") from e

    @contextmanager
    def _reading(self, **context) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("generation job read failed", error=str(e), **context)
            raise PersistenceError(f"Failed to read generation jobs: {e}") from e
