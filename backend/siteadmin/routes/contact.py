"""
SiteAdmin Backend - Contact Mail Route
======================================

POST /api/send-email  {name, email, subject, message}

Order of checks:
    1. Email rate limiter (3 per minute per origin) → 429, even for bodies
       that are not valid JSON
    2. JSON parsing                                  → 400 "Ogiltig JSON i förfrågan."
    3. Field validation, all failing fields at once  → 400 {"errors": [...]}
    4. Relay delivery                                → 500 on failure
"""

import logging

from fastapi import APIRouter, Depends, Request

from siteadmin.dependencies import get_mail_service, rate_limited
from siteadmin.schemas.requests import ContactMessage
from siteadmin.schemas.responses import ErrorResponse, SendEmailResponse
from siteadmin.services.mail_service import MailService
from siteadmin.validation import read_json_body, validate_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Contact"])

# The body is read inside the handler, so OpenAPI gets its schema here
REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": ContactMessage.model_json_schema()}},
    }
}


@router.post(
    "/send-email",
    response_model=SendEmailResponse,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
        500: {"description": "Relay failure", "model": ErrorResponse},
    },
    summary="Send a contact-form message",
    dependencies=[Depends(rate_limited("email"))],
    openapi_extra=REQUEST_BODY,
)
async def send_email(
    request: Request,
    mailer: MailService = Depends(get_mail_service),
) -> SendEmailResponse:
    contact = validate_fields(ContactMessage, await read_json_body(request))
    await mailer.send_contact_message(contact)
    return SendEmailResponse(success=True, message="E-post skickat!")
