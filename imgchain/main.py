from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from imgchain.application.dtos.common_dto import HealthResponse, RootResponse
from imgchain.infrastructure.api.dependencies import get_capability, get_settings
from imgchain.infrastructure.api.middlewares import add_default_middlewares
from imgchain.infrastructure.api.routes.history_routes import router as history_router
from imgchain.infrastructure.api.routes.processing_routes import router as processing_router
from imgchain.infrastructure.api.routes.session_routes import router as session_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # load OpenCV in the background; renders wait on the readiness gate
    capability = get_capability()
    loader = asyncio.create_task(capability.load_async())
    try:
        yield
    finally:
        if not loader.done():
            loader.cancel()


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title="imgchain Backend",
        version="0.1.0",
        description="""
        ## imgchain Backend API

        Compose an ordered chain of OpenCV image operations over an uploaded
        image, with linear undo/redo over the chain.

        ### Features
        - **Sessions**: Upload an image; it stays untouched as the session original
        - **Operation Catalog**: Fifteen pixel and frequency domain transforms
        - **Step History**: Add, undo, redo; a new step discards the redo list
        - **Rendering**: Every history change replays the whole chain from the original
        - **Download**: The final image as `processed_image.<ext>`

        ### Error Responses
        - **400 Bad Request**: Unsupported operation, invalid parameter or undecodable image
        - **404 Not Found**: Unknown session, or no final image yet
        - **413 Payload Too Large**: Upload exceeds the configured limit
        - **422 Unprocessable Entity**: Validation error in request body
        - **503 Service Unavailable**: Image transform capability not ready
        - **500 Internal Server Error**: A step failed inside the transform library
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan,
    )
    add_default_middlewares(app, settings)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the imgchain API",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "imgchain-backend", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Service health and image transform capability state",
    )
    def health():
        """Check API health status."""
        capability = get_capability()
        return {
            "status": "healthy",
            "capability": capability.state,
            "opencv_version": capability.version,
        }

    app.include_router(session_router)
    app.include_router(history_router)
    app.include_router(processing_router)
    return app


app = create_app()
