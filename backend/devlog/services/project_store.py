# devlog/services/project_store.py
"""
Project lookup.

Projects are referenced by the matrix reports (existence check and column
mapping) and registered by administrators. Access control is out of scope.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devlog.core.config import settings
from devlog.core.errors import NotFoundError, StoreError, ValidationError
from devlog.db.models import Project, utcnow_naive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectRecord:
    id: int
    uuid: str
    name: str
    column_mapping: Dict[str, str] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Project) -> "ProjectRecord":
        return cls(
            id=int(row.id),
            uuid=row.uuid,
            name=row.name,
            column_mapping=dict(row.column_mapping or {}),
            created_at=row.created_at,
        )


class ProjectStore:
    """Request-scoped access to the `projects` table."""

    def __init__(self, session: AsyncSession, *, timeout_s: Optional[float] = None):
        self._session = session
        self._timeout_s = timeout_s if timeout_s is not None else settings.STORE_TIMEOUT_SECONDS

    async def _execute(self, op: str, stmt):
        try:
            return await asyncio.wait_for(self._session.execute(stmt), timeout=self._timeout_s)
        except asyncio.TimeoutError as e:
            logger.error("Project %s timed out after %ss", op, self._timeout_s)
            raise StoreError(f"project {op} timed out after {self._timeout_s}s") from e
        except SQLAlchemyError as e:
            logger.error("Project %s failed: %s", op, e)
            raise StoreError(f"project {op} failed") from e

    async def _commit(self, op: str) -> None:
        try:
            await asyncio.wait_for(self._session.commit(), timeout=self._timeout_s)
        except IntegrityError as e:
            await self._session.rollback()
            raise ValidationError("project already exists") from e
        except (asyncio.TimeoutError, SQLAlchemyError) as e:
            await self._session.rollback()
            logger.error("Project %s failed: %s", op, e)
            raise StoreError(f"project {op} failed") from e

    async def _get_row(self, project_id: int) -> Project:
        result = await self._execute("lookup", select(Project).where(Project.id == project_id))
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"Project {project_id} not found")
        return row

    async def _uuid_taken(self, uuid: str) -> bool:
        existing = await self._execute("lookup", select(Project.id).where(Project.uuid == uuid))
        return existing.scalar_one_or_none() is not None

    async def get_by_id(self, project_id: int) -> ProjectRecord:
        return ProjectRecord.from_row(await self._get_row(project_id))

    async def list_all(self) -> List[ProjectRecord]:
        result = await self._execute("list", select(Project).order_by(Project.name.asc(), Project.id.asc()))
        return [ProjectRecord.from_row(r) for r in result.scalars().all()]

    async def create(
        self,
        *,
        uuid: str,
        name: str,
        column_mapping: Optional[Dict[str, str]] = None,
        project_id: Optional[int] = None,
    ) -> ProjectRecord:
        if await self._uuid_taken(uuid):
            raise ValidationError("project uuid already exists")

        row = Project(uuid=uuid, name=name, column_mapping=column_mapping or None, created_at=utcnow_naive())
        if project_id is not None:
            row.id = project_id
        self._session.add(row)
        await self._commit("create")

        logger.info("Project created (id=%s, uuid=%s, name=%s)", row.id, row.uuid, row.name)
        return ProjectRecord.from_row(row)

    async def update(
        self,
        project_id: int,
        *,
        uuid: Optional[str] = None,
        name: Optional[str] = None,
        column_mapping: Optional[Dict[str, str]] = None,
    ) -> ProjectRecord:
        """
        Partial update; None leaves a field unchanged.

        An empty column_mapping clears the mapping. A new uuid must not belong
        to another project.
        """
        row = await self._get_row(project_id)

        if uuid is not None and uuid != row.uuid:
            if await self._uuid_taken(uuid):
                raise ValidationError("project uuid already exists")
            row.uuid = uuid
        if name is not None:
            row.name = name
        if column_mapping is not None:
            row.column_mapping = dict(column_mapping) or None

        await self._commit("update")

        logger.info("Project updated (id=%s, uuid=%s, name=%s)", row.id, row.uuid, row.name)
        return ProjectRecord.from_row(row)

    async def delete(self, project_id: int) -> None:
        """Remove a project. Its log entries are kept."""
        result = await self._execute("delete", delete(Project).where(Project.id == project_id))
        if not (result.rowcount or 0):
            raise NotFoundError(f"Project {project_id} not found")
        await self._commit("delete")
        logger.info("Project deleted (id=%s)", project_id)
