"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from learnmap.config import settings
from learnmap.exceptions import (
    LearnmapError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(
    title="Learnmap Topics API",
    description="Topic classification and recommendation feeds for learning roadmaps",
    version="0.1.0",
)

logger = logging.getLogger(__name__)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LearnmapError)
async def learnmap_exception_handler(request: Request, exc: LearnmapError):
    """Map application exceptions to HTTP responses."""
    if isinstance(exc, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, TransientStoreError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.warning(
        "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Learnmap Topics API", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers
from learnmap.routers import dashboard, public, roadmaps, settings as settings_router, topics

app.include_router(topics.router, prefix="/api/topics", tags=["topics"])
app.include_router(roadmaps.router, prefix="/api/roadmaps", tags=["roadmaps"])
app.include_router(dashboard.router, prefix="/api", tags=["dashboard"])
app.include_router(public.router, prefix="/api", tags=["public"])
app.include_router(settings_router.router, prefix="/api", tags=["settings"])
