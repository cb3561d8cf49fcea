# Database models
from planvision.models.render_config import RenderConfig
from planvision.models.generation import GenerationJob
from planvision.models.enums import JobStatus

__all__ = [
    "RenderConfig",
    "GenerationJob",
    "JobStatus",
]
