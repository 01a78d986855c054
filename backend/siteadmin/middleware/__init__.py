# Middleware package init
"""
SiteAdmin Backend - Middleware Package
======================================

Middleware Chain (outermost first):
    Request → [HTTPS redirect] → [Security headers] → [CORS]
            → [Request ID] → [Logging] → [Unhandled errors] → Route handler

    HTTPS redirect is installed only in production with FORCE_HTTPS=true.
    Responses travel back through the same chain in reverse, so security and
    CORS headers are added to error responses as well. Exceptions no handler
    maps are turned into the generic 500 by the innermost layer, so they get
    the same treatment.

rate_limit.py holds the fixed-window limiters. They run as route
dependencies of the login and send-email routes (see siteadmin.dependencies).
"""
