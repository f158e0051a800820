"""
Resume Tailor Console - FastAPI Application

Hosts the Upload → Tailor → Export workflow against a remote tailoring
service and exposes its state to a front end.
"""
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env file at startup
from dotenv import load_dotenv
load_dotenv()

from .config import get_config, log_backend_status
from .routes import health_router, workflow_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    config = get_config()
    logger.info("=" * 60)
    logger.info("TAILOR CONSOLE STARTING")
    logger.info(f"Host: {config.host}")
    logger.info(f"Port: {config.port}")
    logger.info(f"PORT env var: {os.environ.get('PORT', 'not set')}")
    logger.info("=" * 60)
    log_backend_status(config)

    yield

    logger.info("Shutting down tailor console...")
    from .orchestrator import shutdown_orchestrator
    from .tailor_client import shutdown_tailor_client
    shutdown_orchestrator()
    await shutdown_tailor_client()
    logger.info("Cleanup complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_config()

    app = FastAPI(
        title="Resume Tailor Console",
        description="Upload a resume, tailor it to a job description, export an ATS-friendly version",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(workflow_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = get_config()

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "services.console.app:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )
