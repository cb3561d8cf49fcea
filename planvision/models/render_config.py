"""
Render configuration models
"""
from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime, Float, ForeignKey, Text
from sqlalchemy.orm import relationship

from planvision.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RenderConfig(Base):
    """Immutable parameters for one design generation request"""
    __tablename__ = "render_configs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    parent_config_id = Column(String(36), ForeignKey("render_configs.id"), nullable=True)

    input_image_url = Column(String(2048), nullable=False)
    image_type_label = Column(String(100), nullable=False, default="Room")
    image_type_value = Column(String(100), nullable=True)

    style_name = Column(String(100), nullable=True)
    style_prompt_fragment = Column(Text, nullable=True)

    color_primary_hex = Column(String(8), nullable=True)
    color_secondary_hex = Column(String(8), nullable=True)
    color_neutral_hex = Column(String(8), nullable=True)

    perspective_x = Column(Float, nullable=True)
    perspective_y = Column(Float, nullable=True)
    perspective_angle = Column(Float, nullable=True)

    custom_instructions = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    generation_jobs = relationship("GenerationJob", back_populates="render_config")
