"""Main FastAPI application with modularized routes."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from exam_api.config import LOG_LEVEL
from exam_api.database import init_db
from exam_api.errors import GenerationError, StorageError, TestNotFoundError
from exam_api.logging_setup import setup_console_logging
from exam_api.routes import blobs, builder, generation, knowledge, tests

setup_console_logging(LOG_LEVEL)

log = logging.getLogger(__name__)

app = FastAPI(title="Exam Builder API")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Startup events
@app.on_event("startup")
def startup_events() -> None:
    """Create database tables on startup."""
    init_db()


# Service errors
@app.exception_handler(TestNotFoundError)
def handle_not_found(request: Request, exc: TestNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Test not found"})


@app.exception_handler(StorageError)
def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    log.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Storage operation failed"})


@app.exception_handler(GenerationError)
def handle_generation_error(request: Request, exc: GenerationError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": exc.message})


# Include routers
app.include_router(tests.router)
app.include_router(builder.router)
app.include_router(blobs.router)
app.include_router(knowledge.router)
app.include_router(generation.router)
