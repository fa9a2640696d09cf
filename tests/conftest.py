"""
Shared fixtures for the portfolio backend tests.

Run with: pytest -v
Install test dependencies with: pip install -e ".[test]"
"""

import os

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from apps.shared.config import Settings
from apps.shared.errors import UpstreamMediaError
from apps.projects.store import ProjectStore

API_KEY = "test-key"
HOSTED_IMAGE = "https://res.cloudinary.com/demo/image/upload/v1712345678/portfolio/projects/old-shot.webp"


class FakeMedia:
    """Stands in for CloudinaryClient; records destroy calls."""

    configured = True

    def __init__(self, fail=False):
        self.fail = fail
        self.destroyed = []

    async def destroy(self, public_id):
        self.destroyed.append(public_id)
        if self.fail:
            raise UpstreamMediaError("Failed to delete image: not found")
        return {"result": "ok"}


def project_payload(**overrides):
    data = {
        "title": "Portfolio Site",
        "description": "Personal site with a project catalog",
        "category": "Web",
    }
    data.update(overrides)
    return data


@pytest.fixture
def projects_file(tmp_path):
    return os.path.join(tmp_path, "data", "projects.json")


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def store(projects_file, media):
    return ProjectStore(projects_file, media=media)


@pytest.fixture
def settings(projects_file):
    return Settings(
        admin_enabled=True,
        api_key=API_KEY,
        projects_file=projects_file,
        cloudinary_cloud_name="demo",
        cloudinary_api_key="123456",
        cloudinary_api_secret="shh",
    )


@pytest.fixture
def client(settings, store, media):
    app = create_app(settings, store=store, media=media)
    with TestClient(app) as c:
        c.headers.update({"X-API-Key": API_KEY})
        yield c
