from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Optional
import logging
import sys

from api import activity, products, users
from config.settings import Settings, load_settings
from constants import ServerConfig
from database import Database
from services.authenticators import build_authenticator
from services.image_transcoder import ImageTranscoder
from services.upload_pipeline import UploadPipeline
from services.upload_receiver import UploadReceiver
from utils.error_handlers import register_exception_handlers

logger = logging.getLogger(__name__)

_logging_configured = False


def configure_logging(settings: Settings) -> None:
    """Attach a rotating file handler and a stdout handler to the root logger (once)."""
    global _logging_configured
    if _logging_configured:
        return

    log_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    level = settings.log_level.upper()

    settings.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = settings.log_dir / "backend.log"

    # File handler with rotation (10MB per file, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(log_formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    _logging_configured = True
    logger.info(f"Logging initialized: {log_file}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API application.

    Long-lived collaborators (database, authenticator, upload pipeline) are
    created here and stored on app.state; the database connects when the
    app starts and is disposed when it shuts down.

    Raises:
        ConfigurationError: If required configuration (e.g. DATABASE_URL) is missing
    """
    settings = settings or load_settings()
    configure_logging(settings)

    database = Database(settings.database_url)
    upload_root = settings.upload_root
    upload_root.mkdir(parents=True, exist_ok=True)
    pipeline = UploadPipeline(
        UploadReceiver(upload_root),
        ImageTranscoder(upload_root, settings.public_upload_prefix),
        timeout_seconds=settings.upload_timeout_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan - startup and shutdown"""
        logger.info("Starting services...")
        database.connect()
        logger.info("Application startup complete")

        yield

        logger.info("Stopping services...")
        database.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=ServerConfig.TITLE,
        description="Product catalog, image upload and activity API",
        version=ServerConfig.VERSION,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = database
    app.state.authenticator = build_authenticator(settings)
    app.state.upload_pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Include API routers
    app.include_router(products.router, prefix="/api", tags=["products"])
    app.include_router(users.router, prefix="/users", tags=["users"])
    app.include_router(activity.router, prefix="/api/activity", tags=["activity"])

    # Transcoded images are served read-only from the upload root
    app.mount(settings.public_upload_prefix, StaticFiles(directory=str(upload_root)), name="uploads")

    @app.get("/")
    def root():
        """Root endpoint"""
        return {"message": ServerConfig.TITLE, "docs": "/docs", "health": "/api/health"}

    @app.get("/api/health")
    def health_check():
        """Health check endpoint"""
        return {
            "status": "ok",
            "service": ServerConfig.TITLE,
            "version": ServerConfig.VERSION
        }

    return app


if __name__ == "__main__":
    import uvicorn

    settings = load_settings()
    configure_logging(settings)
    logger.info(f"🚀 Starting {ServerConfig.TITLE} on http://{settings.host}:{settings.port}...")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
