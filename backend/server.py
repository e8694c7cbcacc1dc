"""
RepoDoc Backend - FastAPI Application Entry Point

Registers the routers, configures middleware, and starts/stops the cache
maintenance scheduler.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_LEVEL
from middleware.rate_limit import RateLimitMiddleware
from services.scheduler_service import start_scheduler, stop_scheduler

from routes.repositories import repos_router
from routes.documentation import docs_router
from routes.providers import providers_router

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting RepoDoc backend...")
    await start_scheduler()
    logger.info("RepoDoc backend is ready.")
    yield
    logger.info("Shutting down RepoDoc backend...")
    await stop_scheduler()


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

app = FastAPI(
    title="RepoDoc API",
    description="AI-generated documentation for GitHub repositories with provider fallback",
    version=APP_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitMiddleware)

# ---------------------------------------------------------------------------
# Register routers
# ---------------------------------------------------------------------------

app.include_router(repos_router)
app.include_router(docs_router)
app.include_router(providers_router)

# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "RepoDoc API", "version": APP_VERSION}


@app.get("/api/")
async def api_root():
    return {
        "service": "RepoDoc API",
        "version": APP_VERSION,
        "documentation": "/docs",
        "health": "/api/health",
    }


# ---------------------------------------------------------------------------
# Run with uvicorn
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001, log_level="info")
