"""FastAPI main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from . import __version__
from .config import settings
from .db import DatabaseConnection
from .utils.logger import init_app_logger
from .api.v1 import deps, messages_router, conversations_router, users_router


# Initialize logger
logger = init_app_logger(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    logger.info("=" * 70)
    logger.info("Starting EduShare messaging service...")
    logger.info("=" * 70)

    logger.info("Server Configuration:")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Debug: {settings.debug}")
    logger.info(f"  Log Level: {settings.log_level}")
    logger.info(f"  Log File: {settings.log_file}")

    logger.info("Messaging Configuration:")
    logger.info(f"  Database: {settings.database_path}")
    logger.info(f"  Poll Interval: {settings.poll_interval}s")
    logger.info(f"  Remote Store: {settings.store_base_url or 'Not set'}")

    db_conn = DatabaseConnection(settings.database_path)
    deps.db_conn = db_conn

    logger.info(f"EduShare started at http://{settings.host}:{settings.port}")

    yield

    logger.info("Shutting down EduShare messaging service...")
    deps.db_conn = None
    db_conn.close()
    logger.info("EduShare shut down successfully")


app = FastAPI(
    title="EduShare Messaging",
    description="Conversations between members exchanging educational materials",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(messages_router)
app.include_router(conversations_router)
app.include_router(users_router)


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "EduShare Messaging",
        "version": __version__
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "edushare.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
