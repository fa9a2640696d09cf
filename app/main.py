"""
Portfolio backend

Composes the projects and media routers into one FastAPI app.
"""
import os
import logging
from typing import Optional
from fastapi import FastAPI, Request

from apps.shared.config import Settings, load_settings, setup_logging
from apps.shared.cors import setup_cors
from apps.shared.errors import register_error_handlers
from apps.projects.store import ProjectStore
from apps.projects.main import router as projects_router
from apps.media.client import CloudinaryClient
from apps.media.main import router as media_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ProjectStore] = None,
    media: Optional[CloudinaryClient] = None,
) -> FastAPI:
    """
    Build the application.
    store and media default to instances built from settings; tests pass their own.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    media = media or CloudinaryClient.from_settings(settings)
    store = store or ProjectStore(settings.projects_file, media=media)

    app = FastAPI(
        title="Portfolio API",
        version="1.0.0",
        description="Portfolio projects with hosted image uploads",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.media = media

    setup_cors(app, settings)
    register_error_handlers(app)

    @app.get("/health")
    def health(request: Request):
        """Health check endpoint."""
        storage_dir = os.path.dirname(os.path.abspath(request.app.state.store.path))
        writable = os.access(storage_dir, os.W_OK) if os.path.isdir(storage_dir) else True
        return {
            "status": "ok" if writable else "degraded",
            "service": "portfolio",
            "storage": "writable" if writable else "read-only",
            "adminEnabled": request.app.state.settings.admin_enabled,
        }

    app.include_router(projects_router)
    app.include_router(media_router)

    if not media.configured:
        logger.warning("Cloudinary credentials not set - image uploads will fail")

    return app


app = create_app()
