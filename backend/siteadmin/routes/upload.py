"""
SiteAdmin Backend - Image Upload Route
======================================

What:  POST /api/upload-image stores one image and returns its public URL.
How:   Receives multipart/form-data with an "image" field, delegates checks
       and storage to UploadService, builds the URL from the request's scheme
       and Host header.

Request Flow:
    1. FastAPI parses the multipart body into an UploadFile
    2. No file → 400 "Ingen fil mottagen."
    3. UploadService: content type → size → store
    4. 200 {"url": "https://host/uploads/<generated name>"}

The file becomes retrievable at once through the /uploads static mount.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from siteadmin.dependencies import get_upload_service
from siteadmin.exceptions import ValidationError
from siteadmin.middleware.https_redirect import request_is_secure
from siteadmin.schemas.responses import ErrorResponse, UploadResponse
from siteadmin.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])

UPLOADS_PATH = "/uploads"


def public_url(request: Request, filename: str) -> str:
    """scheme://host/uploads/<filename> as seen by the client."""
    trust_proxy = request.app.state.settings.trust_proxy
    scheme = "https" if request_is_secure(request, trust_proxy) else "http"
    host = request.headers.get("host") or request.url.netloc
    return f"{scheme}://{host}{UPLOADS_PATH}/{filename}"


@router.post(
    "/upload-image",
    response_model=UploadResponse,
    responses={400: {"description": "No file, not an image, or too large", "model": ErrorResponse}},
    summary="Upload an image",
)
async def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(default=None, description="Image file, max 5MB"),
    uploads: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    if image is None or not image.filename:
        raise ValidationError(message="Ingen fil mottagen.", field="image")

    logger.info(
        "Received upload: filename=%s, content_type=%s",
        image.filename,
        image.content_type,
    )

    try:
        filename = await uploads.validate_and_store(
            image,
            filename=image.filename,
            content_type=image.content_type,
            declared_size=image.size,
        )
    finally:
        await image.close()

    return UploadResponse(url=public_url(request, filename))
