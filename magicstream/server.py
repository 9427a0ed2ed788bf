"""
Primary FastAPI application entry point
"""
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from magicstream.core.config import settings
from magicstream.api.deps import initialize_connections, close_connections
from magicstream.api.api import public_router, protected_router

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Define application lifespan
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Application startup: Initializing connections...")
    await initialize_connections()
    yield
    # Shutdown
    logger.info("Application shutdown: Closing connections...")
    await close_connections()


def create_app() -> FastAPI:
    """Builds the application: CORS, lifespan, then the public and protected route groups."""
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(public_router)
    application.include_router(protected_router)
    return application


app = create_app()
