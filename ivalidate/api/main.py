"""
FastAPI application for idea validation.

Endpoints:
- Refining a free-form idea into the required triple
- Starting validation runs (executed in the background)
- Polling run progress and fetching completed results

Architecture Decision:
- No database - every run is one JSON document on disk
- Clients observe runs only by polling; there is no push channel
"""

# Load .env BEFORE any application imports that read os.environ
from dotenv import load_dotenv
load_dotenv()

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ivalidate import __version__
from ivalidate.api.routes import refine, validate
from ivalidate.api.schemas import ErrorResponse
from ivalidate.config import configure_logging, get_settings
from ivalidate.errors import (
    IdeaValidationError,
    ParseError,
    PreconditionError,
    ServiceUnavailableError,
    TransientStorageError,
)

logger = structlog.get_logger(__name__)

# Most specific first
_ERROR_STATUS: tuple[tuple[type[IdeaValidationError], int], ...] = (
    (PreconditionError, 400),
    (TransientStorageError, 503),
    (ServiceUnavailableError, 503),
    (ParseError, 502),
)


def error_status(error: IdeaValidationError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and make sure the data directory exists."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("api_started", data_dir=str(settings.data_dir), version=__version__)
    yield


app = FastAPI(
    title="Idea Validation API",
    description="Evidence-based startup idea validation from real user discussions",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IdeaValidationError)
async def validation_error_handler(request: Request, exc: IdeaValidationError) -> JSONResponse:
    status_code = error_status(exc)
    logger.warning(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=status_code,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


# =============================================================================
# API routes
# =============================================================================

app.include_router(validate.router, prefix="/api", tags=["Validation"])
app.include_router(refine.router, prefix="/api", tags=["Refine"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


# =============================================================================
# Run with: python -m ivalidate.api.main
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.environ.get("PORT", 8100))
    uvicorn.run(
        "ivalidate.api.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
    )
