"""
FastAPI application main entry point.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from award_scraper.config import PORT
from award_scraper.errors import IngestError, ValidationError
from award_scraper.pipeline import Pipeline, build_pipeline
from backend.app.api.models import ErrorResponse
from backend.app.api.routes import router
from backend.app.metrics import REQUEST_COUNT, REQUEST_DURATION

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    logger_factory=structlog.PrintLoggerFactory(),
)

logger = structlog.get_logger()


def create_app(pipeline: Optional[Pipeline] = None) -> FastAPI:
    """
    Build the API around a pipeline.

    The browser is closed when the app shuts down (uvicorn runs the lifespan
    exit on SIGTERM/SIGINT).

    Args:
        pipeline: Pre-built pipeline (tests inject fakes); built from
            configuration when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("api_started")
        yield
        await app.state.pipeline.close()
        logger.info("api_stopped")

    app = FastAPI(
        title="DoD Contract Scraper API",
        description="Renders DoD contract announcements and extracts award events",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.pipeline = pipeline or build_pipeline()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "apikey", "prefer"],
    )

    # Add metrics middleware
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Middleware to collect HTTP metrics."""
        start_time = time.time()

        response = await call_next(request)

        REQUEST_DURATION.observe(time.time() - start_time)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()

        return response

    @app.exception_handler(IngestError)
    async def ingest_error_handler(request: Request, exc: IngestError):
        """Turn pipeline errors into the structured failure body."""
        status = 400 if isinstance(exc, ValidationError) else 500
        logger.error("request_failed",
                     path=request.url.path,
                     error_type=type(exc).__name__,
                     error=exc.message,
                     url=exc.url)
        body = ErrorResponse(error=exc.message, url=exc.url)
        return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies or query parameters get the same failure body as other 400s."""
        errors = exc.errors()
        detail = errors[0].get("msg", "") if errors else ""
        logger.warning("request_invalid", path=request.url.path, errors=len(errors))
        body = ErrorResponse(error=f"Invalid request: {detail}" if detail else "Invalid request")
        return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

    app.include_router(router)

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
