"""
SiteAdmin Backend - Liveness and Health Routes
==============================================

What:  GET /        plain-text liveness string (used by the hosting platform)
       GET /health  JSON status of the directories and mail configuration
How:   Lightweight checks only: directory existence and write permission,
       presence of the mail settings. The relay itself is not contacted.

Status levels:
    healthy:   data and upload directories writable, mail configured
    degraded:  anything else (the API still serves what it can)
"""

import logging
import os
import time
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from siteadmin import __version__
from siteadmin.dependencies import get_mail_service, get_store, get_upload_service
from siteadmin.schemas.responses import HealthResponse
from siteadmin.services.json_store import JsonStore
from siteadmin.services.mail_service import MailService
from siteadmin.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

LIVENESS_TEXT = "Servern är igång! ✅"

_start_time = time.time()


def _directory_status(path: Path) -> str:
    if path.is_dir() and os.access(path, os.W_OK):
        return "ok"
    logger.warning("Health check: directory not writable: %s", path)
    return "unavailable"


@router.get("/", response_class=PlainTextResponse, summary="Liveness probe")
async def liveness() -> str:
    return LIVENESS_TEXT


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(
    store: JsonStore = Depends(get_store),
    uploads: UploadService = Depends(get_upload_service),
    mailer: MailService = Depends(get_mail_service),
) -> HealthResponse:
    data_status = _directory_status(store.data_dir)
    upload_status = _directory_status(uploads.upload_dir)
    mail_status = "not_configured" if mailer.missing_settings() else "configured"

    overall = "healthy"
    if data_status != "ok" or upload_status != "ok" or mail_status != "configured":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        data_dir=data_status,
        uploads=upload_status,
        mail=mail_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
