# devlog/api/routes/projects.py
"""
/projects

Project lookup and registration. Column mappings set here only relabel the
matrix report columns.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from devlog.api.deps import get_project_store
from devlog.db.models import SQL_INT_MAX
from devlog.schemas.logs import DeleteResponse
from devlog.schemas.projects import (
    ColumnMappingResponse,
    ProjectCreate,
    ProjectItem,
    ProjectsResponse,
    ProjectUpdate,
)
from devlog.services.project_store import ProjectStore

router = APIRouter(prefix="/projects")


@router.get("", response_model=ProjectsResponse)
async def list_projects(store: ProjectStore = Depends(get_project_store)):
    projects = await store.list_all()
    return ProjectsResponse(projects=[ProjectItem.from_record(p) for p in projects], total=len(projects))


@router.get("/{project_id}", response_model=ProjectItem)
async def get_project(
    project_id: int = Path(..., ge=0, le=SQL_INT_MAX),
    store: ProjectStore = Depends(get_project_store),
):
    return ProjectItem.from_record(await store.get_by_id(project_id))


@router.get("/{project_id}/column-mapping", response_model=ColumnMappingResponse)
async def get_column_mapping(
    project_id: int = Path(..., ge=0, le=SQL_INT_MAX),
    store: ProjectStore = Depends(get_project_store),
):
    project = await store.get_by_id(project_id)
    return ColumnMappingResponse(project_id=project.id, column_mapping=dict(project.column_mapping))


@router.post("", response_model=ProjectItem, status_code=201)
async def create_project(payload: ProjectCreate, store: ProjectStore = Depends(get_project_store)):
    project = await store.create(
        uuid=payload.uuid,
        name=payload.name,
        column_mapping=payload.column_mapping,
        project_id=payload.id,
    )
    return ProjectItem.from_record(project)


@router.put("/{project_id}", response_model=ProjectItem)
async def update_project(
    payload: ProjectUpdate,
    project_id: int = Path(..., ge=0, le=SQL_INT_MAX),
    store: ProjectStore = Depends(get_project_store),
):
    project = await store.update(
        project_id,
        uuid=payload.uuid,
        name=payload.name,
        column_mapping=payload.column_mapping,
    )
    return ProjectItem.from_record(project)


@router.delete("/{project_id}", response_model=DeleteResponse)
async def delete_project(
    project_id: int = Path(..., ge=0, le=SQL_INT_MAX),
    store: ProjectStore = Depends(get_project_store),
):
    """Remove the project; its log entries stay in place."""
    await store.delete(project_id)
    return DeleteResponse(success=True, deleted=1)
