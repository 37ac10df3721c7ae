"""
FastAPI entry point with Neo4j driver lifecycle management.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.db.neo4j import neo4j_driver
from app.features.communications.api import communications, conversations, users
from app.features.communications.api.errors import register_exception_handlers
from app.infrastructure.observability.logging import get_logger, log_request, setup_logging
from app.middleware import RequestContextMiddleware
from app.routes import client_errors, health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the graph store driver on startup and close it on shutdown."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    try:
        logger.info("Initializing Neo4j driver")
        await neo4j_driver.initialize()
        logger.info("All services initialized successfully", services=["neo4j"])
    except Exception as e:
        # Keep serving: /readyz reports the store as down and listings answer 503
        logger.error("Failed to initialize Neo4j driver", error=str(e), error_type=type(e).__name__)

    yield

    logger.info("Application shutting down")

    try:
        logger.info("Closing Neo4j driver")
        await neo4j_driver.close()
        logger.info("All services closed successfully")
    except Exception as e:
        logger.error("Error closing Neo4j driver", error=str(e))


app = FastAPI(
    title="Neo4j Communication Dashboard API",
    description="Conversation browsing and cross-user communication analytics over a Neo4j graph",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

# Include routers
app.include_router(health.router)
app.include_router(client_errors.router)
app.include_router(conversations.router)
app.include_router(communications.router)
app.include_router(users.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


# Added last so it wraps the logging middleware and the request id is bound first
app.add_middleware(RequestContextMiddleware)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
