# devlog/api/routes/logs.py
"""
/logs

Ingest, browse and delete device log entries.

Supported filters (GET and DELETE):
- deviceUuid, projectId, sessionUuid, key, dataType
- startTime / endTime (ISO8601, inclusive, on server createdAt)
- page / pageSize (GET only; pageSize clamped to MAX_PAGE_SIZE)

Query values arrive as strings and go through the validation gate, so every
parameter error is reported the same way (400 VALIDATION_ERROR).
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from devlog.api.deps import get_log_service
from devlog.db.models import SQL_INT_MAX
from devlog.schemas.logs import DeleteResponse, LogCreate, LogItem, LogsResponse
from devlog.services.log_service import LogService

router = APIRouter()


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or None
    return request.client.host if request.client else None


def _filter_params(
    device_uuid: Optional[str] = Query(default=None, alias="deviceUuid", description="Filter by device"),
    project_id: Optional[str] = Query(default=None, alias="projectId", description="Filter by project id"),
    session_uuid: Optional[str] = Query(default=None, alias="sessionUuid", description="Filter by session"),
    key: Optional[str] = Query(default=None, description="Filter by log key"),
    data_type: Optional[str] = Query(default=None, alias="dataType", description="record|warning|error"),
    start_time: Optional[str] = Query(default=None, alias="startTime", description="ISO8601, inclusive"),
    end_time: Optional[str] = Query(default=None, alias="endTime", description="ISO8601, inclusive"),
) -> dict:
    return {
        "device_uuid": device_uuid,
        "project_id": project_id,
        "session_uuid": session_uuid,
        "key": key,
        "data_type": data_type,
        "start_time": start_time,
        "end_time": end_time,
    }


@router.post("/logs", response_model=LogItem, status_code=201)
async def create_log(
    payload: LogCreate,
    request: Request,
    service: LogService = Depends(get_log_service),
):
    """Store one entry; createdAt is assigned by the server."""
    return await service.ingest(payload, client_ip=_client_ip(request))


@router.get("/logs", response_model=LogsResponse)
async def list_logs(
    filters: dict = Depends(_filter_params),
    page: Optional[str] = Query(default=None, description="1-based page number"),
    page_size: Optional[str] = Query(default=None, alias="pageSize", description="Entries per page"),
    service: LogService = Depends(get_log_service),
):
    """
    Retrieve log entries (oldest first) with optional filters.

    Example:
      /logs?deviceUuid=abc&dataType=error&page=2&pageSize=50
    """
    return await service.list_logs({**filters, "page": page, "page_size": page_size})


@router.delete("/logs", response_model=DeleteResponse)
async def delete_logs(
    filters: dict = Depends(_filter_params),
    service: LogService = Depends(get_log_service),
):
    """Delete all entries matching the filter (at least one criterion is required)."""
    return await service.delete_logs(filters)


@router.get("/logs/{log_id}", response_model=LogItem)
async def get_log(
    log_id: int = Path(..., ge=0, le=SQL_INT_MAX),
    service: LogService = Depends(get_log_service),
):
    return await service.get_log(log_id)


@router.delete("/logs/{log_id}", response_model=DeleteResponse)
async def delete_log(
    log_id: int = Path(..., ge=0, le=SQL_INT_MAX),
    service: LogService = Depends(get_log_service),
):
    return await service.delete_log(log_id)
