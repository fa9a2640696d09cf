"""
Service configuration

Settings are read from the environment once at startup and handed to
create_app(). Handlers get them from request.app.state.settings.
"""

import os
import sys
import logging
from typing import Optional
from pydantic import BaseModel

TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime configuration for the portfolio backend."""
    admin_enabled: bool = False
    api_key: Optional[str] = None
    environment: str = "development"
    projects_file: str = os.path.join("data", "projects.json")
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    media_folder: str = "portfolio/projects"
    frontend_url: Optional[str] = None
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY


def load_settings() -> Settings:
    """Build Settings from environment variables."""
    return Settings(
        admin_enabled=_env_flag("ADMIN_ENABLED"),
        api_key=os.getenv("INTERNAL_API_KEY") or None,
        environment=os.getenv("ENVIRONMENT", "development"),
        projects_file=os.getenv("PROJECTS_FILE", os.path.join("data", "projects.json")),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME") or None,
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY") or None,
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET") or None,
        media_folder=os.getenv("MEDIA_FOLDER", "portfolio/projects"),
        frontend_url=os.getenv("FRONTEND_URL") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
    )
