from planvision.schemas.generation import GenerationJobResponse, PENDING_PLACEHOLDER
from planvision.schemas.render_config import (
    RenderConfigCreate,
    RenderConfigResponse,
    RefinementRequest,
)

__all__ = [
    "GenerationJobResponse",
    "PENDING_PLACEHOLDER",
    "RenderConfigCreate",
    "RenderConfigResponse",
    "RefinementRequest",
]
