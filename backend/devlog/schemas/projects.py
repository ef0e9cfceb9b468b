# devlog/schemas/projects.py
"""
Schemas for /projects.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field, field_validator

from devlog.db.models import SQL_INT_MAX
from devlog.schemas.base import CamelModel
from devlog.services.project_store import ProjectRecord
from devlog.utils.parsers import isoformat_z_or_none


class ProjectCreate(CamelModel):
    uuid: str = Field(..., min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=100)
    column_mapping: Dict[str, str] = Field(default_factory=dict, description="key -> display label")
    id: Optional[int] = Field(default=None, ge=0, le=SQL_INT_MAX, description="Explicit project id (optional)")

    @field_validator("uuid", "name")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ProjectUpdate(CamelModel):
    """Body of PUT /projects/{id}. Omitted fields are left unchanged."""
    uuid: Optional[str] = Field(default=None, min_length=1, max_length=36)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    column_mapping: Optional[Dict[str, str]] = Field(default=None, description="Replaces the whole mapping")

    @field_validator("uuid", "name")
    @classmethod
    def _strip(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ProjectItem(CamelModel):
    id: int
    uuid: str
    name: str
    column_mapping: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, p: ProjectRecord) -> "ProjectItem":
        return cls(
            id=p.id,
            uuid=p.uuid,
            name=p.name,
            column_mapping=dict(p.column_mapping),
            created_at=isoformat_z_or_none(p.created_at),
        )


class ProjectsResponse(CamelModel):
    projects: List[ProjectItem] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class ColumnMappingResponse(CamelModel):
    project_id: int
    column_mapping: Dict[str, str] = Field(default_factory=dict)
