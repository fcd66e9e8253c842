"""HTTP boundary: receives new-object notifications and runs jobs."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from video_processing_service import __version__
from video_processing_service.application.orchestrator import PipelineOrchestrator
from video_processing_service.application.trigger import decode_trigger
from video_processing_service.domain.exceptions import BadTriggerError
from video_processing_service.domain.protocols import IStagingArea
from video_processing_service.infrastructure.config import ServiceConfig
from video_processing_service.shared.logging import get_logger

logger = get_logger(__name__)


def create_app(
    orchestrator: PipelineOrchestrator,
    staging: Optional[IStagingArea] = None
) -> FastAPI:
    """
    Create the FastAPI application around an orchestrator.

    Staging directories are created during start-up; failing to create them
    aborts start-up rather than failing individual jobs later.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("API starting")
        if staging is not None:
            staging.ensure_directories()
        yield
        logger.info("API stopping")

    app = FastAPI(
        title="Video Processing Service",
        description="Transcodes raw uploads to a low-resolution rendition and publishes it",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return "Video processing service is running"

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.post("/process-video")
    async def process_video(request: Request):
        try:
            payload = await request.json()
        except ValueError:
            payload = None

        try:
            source_id = decode_trigger(payload)
        except BadTriggerError as e:
            logger.warning(f"Rejected trigger: {e}")
            return JSONResponse(status_code=400, content={"status": "rejected", "error": str(e)})

        # Jobs block on network and ffmpeg; keep the event loop free
        result = await run_in_threadpool(app.state.orchestrator.process, source_id)

        return JSONResponse(
            status_code=200 if result.success else 500,
            content=result.to_dict(),
        )

    return app


def create_app_from_config(config: ServiceConfig) -> FastAPI:
    """Wire real collaborators from configuration and build the app."""
    from video_processing_service.application.factories import ServiceFactory

    factory = ServiceFactory(config)
    return create_app(factory.create_orchestrator(), staging=factory.create_staging())
