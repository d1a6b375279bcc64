"""
╔══════════════════════════════════════════════════╗
║      YDA Portal                                    ║
║ Bilingual public site API + content admin for the  ║
║ Yemen Diabetes Association                         ║
║                                                   ║
║    Built with: FastAPI + PostgreSQL + Redis        ║
╚══════════════════════════════════════════════════╝
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from yda_portal.api.envelope import error_envelope
from yda_portal.core.config import get_settings
from yda_portal.core.correlation import (
    bind_request_context,
    clear_request_context,
    get_correlation_id,
    get_request_id,
    new_correlation_id,
    new_request_id,
)
from yda_portal.core.database import init_db
from yda_portal.core.logging import get_logger, setup_logging
from yda_portal.domain.localized import Locale
from yda_portal.schemas import HealthResponse, field_errors
from yda_portal.services.auth_service import AuthError
from yda_portal.services.cache_service import cache_service
from yda_portal.services.content_store import ContentConflict, ContentNotFound, ContentValidationError
from yda_portal.services.image_generation_service import ImageGenerationError
from yda_portal.services.storage_service import StorageError

# Import routers
from yda_portal.api.routes.admin_content import router as admin_content_router
from yda_portal.api.routes.analytics import router as analytics_router
from yda_portal.api.routes.auth import router as auth_router
from yda_portal.api.routes.feeds import router as feeds_router
from yda_portal.api.routes.live import router as live_router
from yda_portal.api.routes.media import router as media_router
from yda_portal.api.routes.public import LocaleRedirect, router as public_router
from yda_portal.api.routes.settings import router as settings_router
from yda_portal.api.routes.submissions import router as submissions_router
from yda_portal.api.routes.users import router as users_router

settings = get_settings()
logger = get_logger("main")

VERSION = "1.0.0"

# Track uptime
_start_time = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup & shutdown lifecycle."""

    # ── Startup ──
    setup_logging(debug=settings.app_debug)
    logger.info("app_starting", app=settings.app_name, env=settings.app_env)

    await init_db()
    logger.info("database_initialized")

    await cache_service.connect()

    logger.info("app_ready", port=settings.app_port)

    yield

    # ── Shutdown ──
    await cache_service.disconnect()
    logger.info("app_shutdown")


# ── Create FastAPI App ──

app = FastAPI(
    title="YDA Portal",
    description=(
        "Bilingual (Arabic/English) public content API and content-management admin "
        "for the Yemen Diabetes Association.\n\n"
        "- Public: programs, events, resources, videos, pages, KPIs per locale\n"
        "- Admin: role-gated CRUD, media library, AI image generation, activity log\n"
        "- Feeds: RSS and sitemap\n"
    ),
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS Middleware ──

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Logging Middleware ──

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    request_id = request.headers.get("x-request-id") or new_request_id()
    correlation_id = request.headers.get("x-correlation-id") or new_correlation_id()
    bind_request_context(request_id, correlation_id)
    start = time.time()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        elapsed = round((time.time() - start) * 1000, 2)
        if response is not None:
            response.headers["x-request-id"] = request_id
            response.headers["x-correlation-id"] = correlation_id
            status_code = response.status_code
        else:
            status_code = 500

        if request.url.path not in ["/health", "/docs", "/redoc", "/openapi.json"]:
            logger.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                elapsed_ms=elapsed,
                request_id=get_request_id(),
                correlation_id=get_correlation_id(),
            )

        clear_request_context()


# ── Exception Handlers ──

def not_found_fallbacks() -> list[dict[str, str]]:
    links = []
    for locale in Locale:
        links.append({"label": f"home_{locale.value}", "path": f"/{locale.value}"})
    for locale in Locale:
        links.append({"label": f"api_home_{locale.value}", "path": f"/api/v1/public/{locale.value}/home"})
    return links


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=str(exc.detail),
    )
    detail = exc.detail
    if isinstance(detail, dict) and "code" in detail:
        extra = {key: value for key, value in detail.items() if key not in ("code", "message")}
        return error_envelope(
            code=detail["code"],
            message=detail.get("message") or "Request failed",
            status_code=exc.status_code,
            details=extra or None,
            meta={"path": request.url.path},
        )
    if exc.status_code == 404:
        return error_envelope(
            code="not_found",
            message="Page not found",
            status_code=404,
            details={"fallbacks": not_found_fallbacks()},
            meta={"path": request.url.path},
        )
    return error_envelope(
        code="http_error",
        message="Request failed",
        status_code=exc.status_code,
        details=detail,
        meta={"path": request.url.path},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    fields = field_errors(exc.errors())
    logger.warning("validation_error", path=request.url.path, fields=sorted(fields))
    return error_envelope(
        code="validation_error",
        message="Validation failed",
        status_code=422,
        details={"fields": fields},
        meta={"path": request.url.path},
    )


@app.exception_handler(LocaleRedirect)
async def locale_redirect_handler(request: Request, exc: LocaleRedirect):
    return RedirectResponse(url=exc.url, status_code=307)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    return error_envelope(
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        meta={"path": request.url.path},
    )


@app.exception_handler(ContentNotFound)
async def content_not_found_handler(request: Request, exc: ContentNotFound):
    return error_envelope(
        code="not_found",
        message=f"{exc.table} not found",
        status_code=404,
        details={"key": str(exc.key), "fallbacks": not_found_fallbacks()},
        meta={"path": request.url.path},
    )


@app.exception_handler(ContentConflict)
async def content_conflict_handler(request: Request, exc: ContentConflict):
    return error_envelope(
        code="conflict",
        message=str(exc),
        status_code=409,
        details={"fields": {"slug": "Slug already in use"}},
        meta={"path": request.url.path},
    )


@app.exception_handler(ContentValidationError)
async def content_validation_handler(request: Request, exc: ContentValidationError):
    return error_envelope(
        code="validation_error",
        message="Validation failed",
        status_code=422,
        details={"fields": {exc.field: exc.message}},
        meta={"path": request.url.path},
    )


@app.exception_handler(ImageGenerationError)
async def image_generation_handler(request: Request, exc: ImageGenerationError):
    return error_envelope(
        code=exc.kind,
        message=exc.message,
        status_code=exc.status_code,
        meta={"path": request.url.path},
    )


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    logger.error("storage_error", path=request.url.path, error=str(exc))
    return error_envelope(
        code="storage_error",
        message=str(exc),
        status_code=502,
        meta={"path": request.url.path},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log and return an error envelope; never leak a traceback."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return error_envelope(
        code="internal_error",
        message="Internal server error",
        status_code=500,
        meta={"path": request.url.path},
    )


# ── Register Routers ──

app.include_router(auth_router, prefix="/api/v1")
app.include_router(public_router, prefix="/api/v1")
app.include_router(admin_content_router, prefix="/api/v1")
app.include_router(submissions_router, prefix="/api/v1")
app.include_router(media_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(settings_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")
app.include_router(live_router, prefix="/api/v1")
app.include_router(feeds_router)

# Public bucket files
Path(settings.storage_root).mkdir(parents=True, exist_ok=True)
app.mount("/storage", StaticFiles(directory=settings.storage_root), name="storage")


# ── Health Check ──

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """System health check endpoint."""
    uptime = round(time.time() - _start_time, 2)
    redis_status = "connected" if cache_service.connected else "disconnected"

    return HealthResponse(
        status="ok",
        version=VERSION,
        database="connected",
        redis=redis_status,
        uptime_seconds=uptime,
    )


@app.get("/", tags=["System"])
async def root():
    """Welcome endpoint."""
    return {
        "name": settings.site_title,
        "name_ar": "الجمعية اليمنية لمرضى السكري",
        "version": VERSION,
        "status": "operational",
        "docs": "/docs",
        "locales": [locale.value for locale in Locale],
    }
