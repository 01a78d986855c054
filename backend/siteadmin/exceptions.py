"""
SiteAdmin Backend - Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for every error kind the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. The context is logged server-side and never returned to the
       client. siteadmin.main.error_response() maps each kind to a status code.
Who:   Raised by services, validators and rate limiters; caught by the global
       handlers registered in main.py.

Exception Hierarchy:
    SiteAdminError (base)
    ├── ValidationError            → 400 Bad Request   {"error": message}
    ├── FieldValidationError       → 400 Bad Request   {"errors": [...]}
    ├── AuthenticationError        → 401 Unauthorized
    ├── RateLimitExceededError     → 429 Too Many Requests
    ├── MailDeliveryError          → 500 Internal Server Error
    └── StoreError                 → 500 Internal Server Error
        └── DocumentNotFoundError  → 500 Internal Server Error

Messages are Swedish; they are shown verbatim by the admin frontend.
"""

from typing import Any, Dict, List, Optional


class SiteAdminError(Exception):
    """
    Base exception for all SiteAdmin application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Ett okänt fel inträffade på servern.",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SiteAdminError):
    """
    Raised when the request body or upload does not have the required shape.

    When:    A save route receives something other than an array/object under
             its property, an upload is missing, not an image, or too large.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Ogiltig förfrågan.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class FieldValidationError(SiteAdminError):
    """
    Raised when one or more declared request fields fail their checks.

    What:    Carries one diagnostic per failing field, all of them at once.
    HTTP:    400 Bad Request with body {"errors": [...]}

    Entry format:
        {"type": "field", "value": "x", "msg": "Invalid value",
         "path": "password", "location": "body"}
    """

    status_code = 400

    def __init__(
        self,
        errors: List[Dict[str, Any]],
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["fields"] = [error["path"] for error in errors]
        super().__init__(message="Valideringen misslyckades.", context=ctx)
        self.errors = errors


class AuthenticationError(SiteAdminError):
    """
    Raised when the submitted admin password does not verify.

    HTTP:    401 Unauthorized

    A missing credential record and a wrong password both end up here with
    the same message.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Fel lösenord",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(SiteAdminError):
    """
    Raised when a client origin exceeds a fixed-window limit.

    HTTP:    429 Too Many Requests, Retry-After header set to retry_after.
    """

    status_code = 429

    def __init__(
        self,
        message: str = "För många förfrågningar, försök igen senare.",
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class MailDeliveryError(SiteAdminError):
    """
    Raised when the mail relay could not accept the contact message.

    When:    Unknown relay, authentication failure, network failure, timeout
             or mailbox rejection. The cause goes into context only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Misslyckades att skicka e-post.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreError(SiteAdminError):
    """
    Raised when a JSON document cannot be read, parsed or written.

    When:    Permission denied, disk full, malformed JSON, I/O timeout.
    HTTP:    500 Internal Server Error

    The message names the resource key only; file paths and OS errors stay in
    context.
    """

    def __init__(
        self,
        message: str = "Fel vid åtkomst av data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DocumentNotFoundError(StoreError):
    """Raised when a resource's JSON file does not exist yet."""
