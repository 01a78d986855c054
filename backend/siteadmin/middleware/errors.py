"""
SiteAdmin Backend - Unhandled Error Middleware
==============================================

What:  Turns an exception no route handler dealt with into a response while
       the request is still inside the middleware chain.
How:   Installed innermost. Whatever the handler returns then travels back
       through logging, request ID, CORS and security headers like any other
       response. An app-level Exception handler would run in Starlette's
       ServerErrorMiddleware instead, outside all of them.
"""

from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

ErrorHandler = Callable[[Request, Exception], Awaitable[Response]]


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, handler: ErrorHandler) -> None:
        super().__init__(app)
        self.handler = handler

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await self.handler(request, exc)
