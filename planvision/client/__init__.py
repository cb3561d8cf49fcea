"""
Client-side pieces: API client, status poller, render session and the
perspective overlay used to mark the camera on floor plans
"""
from planvision.client.api_client import PlanVisionAPIError, PlanVisionClient
from planvision.client.perspective import (
    OverlayGeometry,
    PerspectiveSpec,
    composite_perspective_overlay,
    compute_overlay_geometry,
    transform_to_image_coordinates,
)
from planvision.client.poller import GenerationPoller, PollOutcome, PollResult
from planvision.client.session import RenderSession

__all__ = [
    "PlanVisionAPIError",
    "PlanVisionClient",
    "OverlayGeometry",
    "PerspectiveSpec",
    "composite_perspective_overlay",
    "compute_overlay_geometry",
    "transform_to_image_coordinates",
    "GenerationPoller",
    "PollOutcome",
    "PollResult",
    "RenderSession",
]
