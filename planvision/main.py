"""
PlanVision generation backend - main FastAPI application
"""
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from planvision.api.v1.api import api_router
from planvision.core.config import settings
from planvision.core.exceptions import NotFoundError
from planvision.core.logging import configure_logging
from planvision.core.middleware import LoggingMiddleware
from planvision.services.orchestrator import GenerationOrchestrator

logger = structlog.get_logger()


def build_orchestrator() -> GenerationOrchestrator:
    """Wire the orchestrator from settings"""
    from planvision.db.session import create_db_and_tables
    from planvision.services.ai_providers import AIProviderFactory, RetryPolicy
    from planvision.services.reference_image import ReferenceImageFetcher
    from planvision.services.storage import StorageService

    create_db_and_tables()
    return GenerationOrchestrator(
        provider=AIProviderFactory.from_settings(),
        storage=StorageService(),
        fetcher=ReferenceImageFetcher(),
        retry_policy=RetryPolicy(),
    )


def create_app(orchestrator: Optional[GenerationOrchestrator] = None) -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Asynchronous AI design generation for room photos and floor plans.",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
    )
    app.state.orchestrator = orchestrator

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Process-Time", "X-Request-ID"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with the API error format"""
        logger.error(
            "HTTP Exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.status_code, "message": exc.detail},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_exception_handler(request: Request, exc: NotFoundError):
        """Handle not found errors"""
        return JSONResponse(status_code=404, content={"code": 404, "message": str(exc)})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions"""
        logger.error(
            "Unexpected Error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
        )
        return JSONResponse(
            status_code=500,
            content={"code": 500, "message": "Internal server error"},
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.VERSION,
            "activeJobs": len(app.state.orchestrator.active_job_ids) if app.state.orchestrator else 0,
        }

    @app.on_event("startup")
    async def startup_event():
        if app.state.orchestrator is None:
            app.state.orchestrator = build_orchestrator()
        logger.info(
            "PlanVision backend starting up",
            version=settings.VERSION,
            api_prefix=settings.API_V1_STR,
            provider=app.state.orchestrator.provider.provider_name,
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("PlanVision backend shutting down")
        if app.state.orchestrator is not None:
            await app.state.orchestrator.shutdown()

    return app


app = create_app()
