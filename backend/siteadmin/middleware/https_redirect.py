"""
SiteAdmin Backend - HTTPS Redirect Middleware
=============================================

What:  Permanently redirects plain HTTP requests to the same URL over HTTPS.
When:  Installed by create_app() only when APP_ENV=production and
       FORCE_HTTPS=true.

Behind a TLS-terminating proxy the socket scheme is always "http"; with
TRUST_PROXY the X-Forwarded-Proto header decides instead.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response


def request_is_secure(request: Request, trust_proxy: bool) -> bool:
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-proto")
        if forwarded:
            return forwarded.split(",")[0].strip().lower() == "https"
    return request.url.scheme in ("https", "wss")


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, trust_proxy: bool = True) -> None:
        super().__init__(app)
        self._trust_proxy = trust_proxy

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request_is_secure(request, self._trust_proxy):
            return await call_next(request)

        host = request.headers.get("host") or request.url.netloc
        target = f"https://{host}{request.url.path}"
        if request.url.query:
            target += f"?{request.url.query}"
        return RedirectResponse(target, status_code=301)
