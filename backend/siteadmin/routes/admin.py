"""
SiteAdmin Backend - Admin Login Route
=====================================

POST /api/admin-login  {password}

Order of checks:
    1. Login rate limiter (5 per 15 minutes per origin) → 429
    2. JSON parsing                                      → 400 "Ogiltig JSON i förfrågan."
    3. password is a string of at least 3 characters    → 400 {"errors": [...]}
    4. Hash comparison                                   → 401 "Fel lösenord"

There is no session: a successful response only tells the admin frontend the
password was right.
"""

import logging

from fastapi import APIRouter, Depends, Request

from siteadmin.dependencies import get_auth_service, rate_limited
from siteadmin.exceptions import AuthenticationError
from siteadmin.schemas.requests import AdminLogin
from siteadmin.schemas.responses import ErrorResponse, LoginResponse
from siteadmin.services.auth_service import AuthService
from siteadmin.validation import read_json_body, validate_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Admin"])

# The body is read inside the handler, so OpenAPI gets its schema here
REQUEST_BODY = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": AdminLogin.model_json_schema()}},
    }
}


@router.post(
    "/admin-login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Invalid fields", "model": ErrorResponse},
        401: {"description": "Wrong password", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
        500: {"description": "Credential store unavailable", "model": ErrorResponse},
    },
    summary="Check the admin password",
    dependencies=[Depends(rate_limited("login"))],
    openapi_extra=REQUEST_BODY,
)
async def admin_login(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    login = validate_fields(AdminLogin, await read_json_body(request))
    if not await auth.verify(login.password):
        raise AuthenticationError()
    logger.info("Admin login succeeded")
    return LoginResponse(success=True)
