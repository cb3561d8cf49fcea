"""
Render config and generation endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, status
import structlog

from planvision.core.deps import get_orchestrator
from planvision.schemas.generation import GenerationJobResponse
from planvision.schemas.render_config import (
    RefinementRequest,
    RenderConfigCreate,
    RenderConfigResponse,
)
from planvision.services.orchestrator import GenerationOrchestrator

logger = structlog.get_logger()

router = APIRouter()


@router.post("", response_model=RenderConfigResponse, status_code=status.HTTP_201_CREATED)
async def create_render_config(
    request: RenderConfigCreate,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Create a render config and start its first generation
    """
    response = await orchestrator.submit(request)
    logger.info("Render config submitted", render_config_id=response.id)
    return response


@router.get("/{config_id}", response_model=RenderConfigResponse)
async def get_render_config(
    config_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.get_config(config_id)


@router.post(
    "/{config_id}/generations",
    response_model=GenerationJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def create_generation(
    config_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Start a new generation job; the job runs in the background
    """
    return await orchestrator.create(config_id)


@router.get("/{config_id}/generation", response_model=GenerationJobResponse)
async def get_generation_status(
    config_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Latest job for a config, polled by clients until it is terminal
    """
    orchestrator.get_config(config_id)
    return orchestrator.get_latest(config_id)


@router.get("/{config_id}/generations", response_model=List[GenerationJobResponse])
async def get_generations(
    config_id: str,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    orchestrator.get_config(config_id)
    return orchestrator.get_history(config_id)


@router.post(
    "/{config_id}/refinements",
    response_model=RenderConfigResponse,
    status_code=status.HTTP_201_CREATED,
)
async def refine_render_config(
    config_id: str,
    request: RefinementRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Create a child config with extra instructions and generate from it
    """
    return await orchestrator.refine(config_id, request.customInstructions)
