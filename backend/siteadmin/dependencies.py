"""
SiteAdmin Backend - Route Dependencies
======================================

What:  FastAPI dependencies that hand routes the components create_app()
       built for this app instance (stored on app.state).
"""

from typing import Awaitable, Callable

from fastapi import Request

from siteadmin.middleware.rate_limit import client_origin
from siteadmin.services.auth_service import AuthService
from siteadmin.services.json_store import JsonStore
from siteadmin.services.mail_service import MailService
from siteadmin.services.upload_service import UploadService


def get_store(request: Request) -> JsonStore:
    return request.app.state.store


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def rate_limited(limiter_name: str) -> Callable[[Request], Awaitable[None]]:
    """
    Dependency factory: count the request against app.state.limiters[limiter_name].

    Raises RateLimitExceededError (429) once the origin is over the limit.
    """

    async def dependency(request: Request) -> None:
        limiter = request.app.state.limiters[limiter_name]
        settings = request.app.state.settings
        limiter.hit(client_origin(request, settings.trust_proxy, settings.proxy_hops))

    return dependency
