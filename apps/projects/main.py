"""
Projects API

CRUD endpoints for portfolio projects backed by the JSON project store.
"""
import logging
from fastapi import APIRouter, Depends, Request

from apps.shared.auth import require_admin
from apps.projects.store import ProjectStore
from apps.projects.schemas import (
    ProjectCreate,
    ProjectUpdate,
    ProjectRecord,
    ProjectDeleteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


def get_store(request: Request) -> ProjectStore:
    """Dependency returning the store created at startup."""
    return request.app.state.store


# ──────────────────────────────────────────────────────────────────────────────
# Public endpoints (no auth required)
# ──────────────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[ProjectRecord])
async def list_projects(store: ProjectStore = Depends(get_store)):
    """List all projects, newest first."""
    return await store.list_projects()


@router.get("/{project_id}", response_model=ProjectRecord)
async def get_project(project_id: str, store: ProjectStore = Depends(get_store)):
    """Get a single project by id."""
    return await store.get_project(project_id)


# ──────────────────────────────────────────────────────────────────────────────
# Admin endpoints
# ──────────────────────────────────────────────────────────────────────────────

@router.post("", response_model=ProjectRecord, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    api_key: str = Depends(require_admin),
    store: ProjectStore = Depends(get_store),
):
    """Create a new project."""
    data = project_data.model_dump(by_alias=True, exclude_none=True)
    return await store.create_project(data)


@router.put("/{project_id}", response_model=ProjectRecord)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    api_key: str = Depends(require_admin),
    store: ProjectStore = Depends(get_store),
):
    """Update an existing project. Only provided fields change."""
    changes = project_data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    return await store.update_project(project_id, changes)


@router.delete("/{project_id}", response_model=ProjectDeleteResponse)
async def delete_project(
    project_id: str,
    api_key: str = Depends(require_admin),
    store: ProjectStore = Depends(get_store),
):
    """Delete a project and its hosted image."""
    project = await store.delete_project(project_id)
    return ProjectDeleteResponse(project=project)
