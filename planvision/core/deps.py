"""
Dependency injection for FastAPI
"""
from fastapi import Request

from planvision.services.orchestrator import GenerationOrchestrator


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    """Get the process-wide generation orchestrator"""
    return request.app.state.orchestrator
