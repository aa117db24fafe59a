"""
FastAPI application entry point.
Initializes logging and the local store, and mounts the command routes.
"""

import os
import time
import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api_routes import router
from .config import API_VERSION, LOG_FORMAT, LOG_DATE_FORMAT
from .errors import APIError, internal_error_response
from .store import open_store, close_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT
)
logger = logging.getLogger(__name__)


# =============================================================================
# STARTUP/SHUTDOWN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup: open the store (creates tables on first launch)
    store = open_store()
    logger.info(f"Store ready with {len(store.get_all_problems())} cached problem(s)")

    yield

    # Shutdown: release the database
    close_store()
    logger.info("Application shutdown complete.")


# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title="psup",
    description="Local companion API: problem fetching and caching, solve tracking and AI chat",
    version="1.0.0",
    lifespan=lifespan
)


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def request_logging_middleware(request: Request, call_next: Callable) -> Response:
    """Log request timing."""
    start_time = time.time()

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} "
        f"status={response.status_code} "
        f"duration={duration_ms:.1f}ms"
    )

    # Add timing header
    response.headers["X-Response-Time"] = f"{duration_ms:.1f}ms"

    return response


# Global exception handler for APIError
@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    """Handle structured API errors."""
    logger.error(f"API Error: {exc.code.value} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().to_dict()
    )


# Global exception handler for unhandled exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with structured response."""
    error_msg = str(exc)
    logger.error(f"Unhandled exception: {error_msg}\n{traceback.format_exc()}")

    detail = None if os.getenv("PSUP_HIDE_TRACEBACKS") else traceback.format_exc()
    return JSONResponse(
        status_code=500,
        content=internal_error_response(error_msg, detail)
    )


# The desktop frontend is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# Include API routes with versioning prefix
app.include_router(router, prefix=f"/api/{API_VERSION}")

# Also include without prefix
app.include_router(router)


# =============================================================================
# ROOT ENDPOINTS
# =============================================================================

@app.get("/")
def root():
    """Root endpoint with API information."""
    return {
        "message": "psup local API",
        "version": "1.0.0",
        "api_version": API_VERSION,
        "docs": "/docs",
        "endpoints": {
            "health": "GET /health",
            "fetch_problem": f"POST /api/{API_VERSION}/problems/{{problem_id}}/fetch",
            "list_problems": f"GET /api/{API_VERSION}/problems",
            "get_problem": f"GET /api/{API_VERSION}/problems/{{problem_id}}",
            "delete_problem": f"DELETE /api/{API_VERSION}/problems/{{problem_id}}",
            "save_chat": f"PUT /api/{API_VERSION}/chats/{{problem_id}}",
            "get_chat": f"GET /api/{API_VERSION}/chats/{{problem_id}}",
            "record_solve": f"POST /api/{API_VERSION}/solves/{{problem_id}}",
            "unrecord_solve": f"DELETE /api/{API_VERSION}/solves/{{problem_id}}",
            "is_solved_today": f"GET /api/{API_VERSION}/solves/{{problem_id}}/today",
            "activity": f"GET /api/{API_VERSION}/activity?days={{days}}",
            "chat": f"POST /api/{API_VERSION}/chat",
            "chat_stream": f"POST /api/{API_VERSION}/chat/stream",
            "models": f"POST /api/{API_VERSION}/chat/models"
        }
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"
    }


@app.get(f"/api/{API_VERSION}/health")
def health_check_versioned():
    """Versioned health check endpoint."""
    return health_check()
