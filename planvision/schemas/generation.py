"""
Generation-related Pydantic schemas
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from planvision.models.enums import JobStatus


class GenerationJobResponse(BaseModel):
    """Generation job as exposed to clients and used for polling"""
    id: str = Field(..., description="Job ID, empty for the pending placeholder")
    status: JobStatus = Field(..., description="pending | processing | completed | failed")
    promptUsed: str = ""
    outputImageUrl: Optional[str] = None
    errorMessage: Optional[str] = None
    createdAt: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @classmethod
    def from_job(cls, job) -> "GenerationJobResponse":
        return cls(
            id=str(job.id),
            status=JobStatus(job.status),
            promptUsed=job.prompt_used or "",
            outputImageUrl=job.output_image_url,
            errorMessage=job.error_message,
            createdAt=job.created_at,
        )


# Returned when a config has no job yet; never persisted
PENDING_PLACEHOLDER = GenerationJobResponse(id="", status=JobStatus.PENDING)
