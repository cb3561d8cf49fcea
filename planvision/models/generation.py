"""
Generation job models
"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from planvision.db.base import Base
from planvision.models.enums import JobStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GenerationJob(Base):
    __tablename__ = "generation_jobs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    render_config_id = Column(String(36), ForeignKey("render_configs.id"), nullable=False, index=True)
    status = Column(String(20), default=JobStatus.PENDING.value, nullable=False)
    prompt_used = Column(Text, default="", nullable=False)
    output_image_url = Column(String(2048), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    render_config = relationship("RenderConfig", back_populates="generation_jobs")
