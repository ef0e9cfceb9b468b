from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from devlog.api.routes.logs import router as logs_router
from devlog.api.routes.projects import router as projects_router
from devlog.api.routes.reports import router as reports_router
from devlog.api.routes.sessions import router as sessions_router
from devlog.core.config import settings
from devlog.core.errors import DevlogError
from devlog.core.logging import configure_logging

logger = logging.getLogger("devlog")


# -------------------------
# Response helpers
# -------------------------
def ok(data: Any = None, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"success": True, "data": data, "error": None, "meta": meta or {}}


def fail(
    code: str,
    message: str,
    details: Optional[Any] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "success": False,
        "data": None,
        "error": {"code": code, "message": message, "details": details},
        "meta": meta or {},
    }


def _request_meta(request: Request) -> Dict[str, Any]:
    request_id = getattr(request.state, "request_id", None)
    return {"request_id": request_id} if request_id else {}


# -------------------------
# App factory
# -------------------------
app = FastAPI(
    title="Device Log Reports API",
    version="0.1.0",
    default_response_class=ORJSONResponse,
)


# -------------------------
# Middleware
# -------------------------
app.add_middleware(GZipMiddleware, minimum_size=1024)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request-id + timing + body-size guard
@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.perf_counter()

    content_length = request.headers.get("content-length")
    if content_length is not None:
        try:
            if int(content_length) > settings.MAX_BODY_BYTES:
                return ORJSONResponse(
                    status_code=413,
                    content=fail(
                        code="PAYLOAD_TOO_LARGE",
                        message=f"Request body too large. Max is {settings.MAX_BODY_KB} KB.",
                        meta={"request_id": request_id},
                    ),
                )
        except ValueError:
            pass

    response = await call_next(request)

    response.headers["x-request-id"] = request_id
    response.headers["x-response-ms"] = f"{(time.perf_counter() - start) * 1000:.2f}"
    return response


# -------------------------
# Routes
# -------------------------
@app.get("/health", response_class=ORJSONResponse)
async def health():
    return ok({"status": "ok", "env": settings.ENV})


app.include_router(logs_router, tags=["logs"])
app.include_router(reports_router, tags=["reports"])
app.include_router(sessions_router, tags=["sessions"])
app.include_router(projects_router, tags=["projects"])


# -------------------------
# Error handling
# -------------------------
@app.exception_handler(DevlogError)
async def devlog_error_handler(request: Request, exc: DevlogError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return ORJSONResponse(
        status_code=exc.status_code,
        content=fail(code=exc.code, message=exc.message, details=exc.details, meta=_request_meta(request)),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return ORJSONResponse(
        status_code=400,
        content=fail(
            code="VALIDATION_ERROR",
            message="Request validation failed.",
            details={"errors": errors},
            meta=_request_meta(request),
        ),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    # Show minimal debug info only in dev
    details = None
    if settings.ENV == "dev":
        details = {"type": exc.__class__.__name__, "message": str(exc)}

    return ORJSONResponse(
        status_code=500,
        content=fail(
            code="INTERNAL_ERROR",
            message="An unexpected error occurred.",
            details=details,
            meta=_request_meta(request),
        ),
    )


# -------------------------
# Startup / shutdown
# -------------------------
@app.on_event("startup")
async def on_startup():
    configure_logging(settings.LOG_LEVEL)

    # Imported here so importing the app has no DB side effects.
    from devlog.db.session import init_db

    await init_db()
    logger.info(
        "Startup complete (env=%s, timezone=%s, conflict_policy=%s)",
        settings.ENV, settings.REPORT_TIMEZONE, settings.MATRIX_CONFLICT_POLICY,
    )


@app.on_event("shutdown")
async def on_shutdown():
    from devlog.db.session import engine

    await engine.dispose()
