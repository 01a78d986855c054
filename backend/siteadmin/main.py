"""
SiteAdmin Backend - FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) builds every component from one
       Settings value, stores them on app.state and wires middleware, routes,
       the /uploads static mount and the exception handlers.
Who:   uvicorn (uvicorn siteadmin.main:app, or python -m siteadmin) and the
       test suite, which builds one app per test with its own temp dirs.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain (outermost first):                     │
    │  HTTPS redirect → Security headers → CORS → Request ID   │
    │  → Logging → Unhandled errors → route                    │
    │                                                          │
    │  Routes:                                                 │
    │  ┌──────────────────┐ ┌──────────────┐ ┌──────────────┐  │
    │  │ content GET/POST │ │ upload-image │ │ send-email   │  │
    │  └──────────────────┘ └──────────────┘ └──────────────┘  │
    │  ┌──────────────────┐ ┌──────────────┐ ┌──────────────┐  │
    │  │ admin-login      │ │ GET / health │ │ /uploads/*   │  │
    │  └──────────────────┘ └──────────────┘ └──────────────┘  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  SiteAdminError→status_code │ body→400 │ Exception→500   │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    create_app:
    1. Build store, upload, mail and auth services and the rate limiters
    2. Create the data and upload directories (StaticFiles needs the latter)

    Startup:
    1. Initialize logging
    2. Log CORS origin, relay user, data directory contents
    3. Warn about missing mail settings (the server still starts)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from siteadmin import __version__
from siteadmin.config import Settings
from siteadmin.exceptions import FieldValidationError, SiteAdminError, ValidationError
from siteadmin.middleware.errors import UnhandledErrorMiddleware
from siteadmin.middleware.https_redirect import HTTPSRedirectMiddleware
from siteadmin.middleware.logging import RequestLoggingMiddleware
from siteadmin.middleware.rate_limit import email_limiter, login_limiter
from siteadmin.middleware.request_id import RequestIDMiddleware, request_id_var
from siteadmin.middleware.security_headers import SecurityHeadersMiddleware
from siteadmin.routes import admin, contact, health, upload
from siteadmin.routes.content import build_router
from siteadmin.services.auth_service import AuthService
from siteadmin.services.json_store import JsonStore
from siteadmin.services.mail_service import MailService
from siteadmin.services.upload_service import UploadService
from siteadmin.validation import INVALID_JSON_MESSAGE

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Ett okänt fel inträffade på servern."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Never logged: request bodies, the admin password or its hash, the relay
    password, uploaded file contents.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access log middleware already covers every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    store: JsonStore = app.state.store

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("SiteAdmin Backend %s starting up...", __version__)
    logger.info("CORS origin: %s", settings.cors_origin)
    logger.info("SMTP user: %s", settings.smtp_user or "(unset)")

    present = [key for key in store.keys() if store.path_for(key).exists()]
    absent = [key for key in store.keys() if key not in present]
    logger.info("Data directory: %s", store.data_dir)
    logger.info("Documents present: %s", ", ".join(present) or "(none)")
    if absent:
        logger.warning("Documents missing (reads will fail until saved): %s", ", ".join(absent))

    missing = settings.missing_mail_settings()
    if missing:
        logger.warning(
            "Mail settings missing: %s. /api/send-email will fail until they are set.",
            ", ".join(missing),
        )

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SiteAdmin Backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(exc: SiteAdminError, request: Request) -> JSONResponse:
    """
    Single mapping from error kind to HTTP response.

    Body:
        FieldValidationError  → {"errors": [...], "request_id": ...}
        other SiteAdminError  → {"error": message, "request_id": ...}

    The exception context is logged server-side and never returned.
    """
    rid = request_id_var.get("") or getattr(request.state, "request_id", "")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "[%s] %s %s → %d %s: %s | Context: %s",
        rid,
        request.method,
        request.url.path,
        exc.status_code,
        type(exc).__name__,
        exc.message,
        exc.context,
    )

    content: Dict[str, Any]
    if isinstance(exc, FieldValidationError):
        content = {"errors": exc.errors}
    else:
        content = {"error": exc.message}
    content["request_id"] = rid

    headers = {}
    retry_after = getattr(exc, "retry_after", None)
    if exc.status_code == 429 and retry_after is not None:
        headers["Retry-After"] = str(retry_after)

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def _body_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """FastAPI's own validation failures in the same entry format as the field checks."""
    entries = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        entries.append(
            {
                "type": "field",
                "value": err.get("input") if isinstance(err.get("input"), (str, int, float, bool)) else None,
                "msg": "Invalid value",
                "path": loc[-1] if len(loc) > 1 else "",
                "location": loc[0] if loc else "body",
            }
        )
    return entries


async def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Generic 500 for an exception nothing else mapped; the stack trace is only logged."""
    logger.error(
        "[%s] Unexpected error on %s %s: %s",
        request_id_var.get(""),
        request.method,
        request.url.path,
        str(exc),
        exc_info=exc,
    )
    return error_response(SiteAdminError(message=UNEXPECTED_ERROR_MESSAGE), request)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        SiteAdminError          → exc.status_code (400/401/429/500)
        RequestValidationError  → 400 (malformed JSON or multipart)
        Exception (fallback)    → 500 generic message, stack trace logged

    UnhandledErrorMiddleware catches the fallback case first, inside the
    middleware chain. The Exception handler only sees errors raised by the
    middleware itself.
    """

    @app.exception_handler(SiteAdminError)
    async def handle_siteadmin_error(request: Request, exc: SiteAdminError):
        return error_response(exc, request)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        if any(err.get("type") == "json_invalid" for err in exc.errors()):
            return error_response(ValidationError(message=INVALID_JSON_MESSAGE), request)
        return error_response(FieldValidationError(errors=_body_errors(exc)), request)

    app.add_exception_handler(Exception, unhandled_error_response)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to build from. None reads the environment.

    Returns:
        A fully configured app. Nothing is shared between two calls: each
        app has its own store locks and rate-limit counters.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="SiteAdmin API",
        description=(
            "Content backend for a small business website: JSON content documents, "
            "image uploads, a contact mailer and an admin password check."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Components ────────────────────────────────────────────────────────
    store = JsonStore(settings.data_dir, io_timeout=settings.file_io_timeout)
    uploads = UploadService(
        settings.upload_dir,
        max_size=settings.max_upload_size,
        io_timeout=settings.file_io_timeout,
    )
    store.ensure_directory()
    uploads.ensure_directory()

    app.state.settings = settings
    app.state.store = store
    app.state.upload_service = uploads
    app.state.mail_service = MailService(settings)
    app.state.auth_service = AuthService(store)
    app.state.limiters = {"login": login_limiter(), "email": email_limiter()}

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(UnhandledErrorMiddleware, handler=unhandled_error_response)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.is_production)
    if settings.is_production and settings.force_https:
        app.add_middleware(HTTPSRedirectMiddleware, trust_proxy=settings.trust_proxy)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(build_router())
    app.include_router(upload.router)
    app.include_router(contact.router)
    app.include_router(admin.router)
    app.include_router(health.router)
    app.mount(upload.UPLOADS_PATH, StaticFiles(directory=str(uploads.upload_dir)), name="uploads")

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `siteadmin.main:app` to be importable
app = create_app()
