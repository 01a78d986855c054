"""
SiteAdmin Backend - Validation Layer
====================================

What:  Boundary checks applied to request bodies before any persistence or
       side effect happens.
How:   Two kinds of checks:
       - shape checks for the save routes: the body property must be an
         array (list resources) or an object (kontakt); element contents are
         not inspected
       - field checks for send-email and admin-login: the body is validated
         against a pydantic model and every failing field is reported at once

Bodies that are not JSON objects (arrays, scalars, an empty body or a
non-JSON content type) are treated as an empty object. Routes that count
attempts before looking at the body read it with read_json_body() from inside
the handler, so a malformed body is parsed only after the limiter has run.
"""

import json
from typing import Any, Dict, List, Type, TypeVar

import pydantic
from fastapi import Request
from pydantic import BaseModel

from siteadmin.exceptions import FieldValidationError, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

INVALID_JSON_MESSAGE = "Ogiltig JSON i förfrågan."


def as_object(body: Any) -> Dict[str, Any]:
    return body if isinstance(body, dict) else {}


def require_list(body: Any, prop: str, message: str = "") -> List[Any]:
    """Return body[prop] if it is a JSON array, else raise ValidationError (400)."""
    value = as_object(body).get(prop)
    if not isinstance(value, list):
        raise ValidationError(
            message=message or f"{prop} måste vara en array.",
            field=prop,
            context={"received": type(value).__name__},
        )
    return value


def require_object(body: Any, prop: str, message: str = "") -> Dict[str, Any]:
    """Return body[prop] if it is a JSON object, else raise ValidationError (400)."""
    value = as_object(body).get(prop)
    if not isinstance(value, dict):
        raise ValidationError(
            message=message or f"{prop} måste vara ett objekt.",
            field=prop,
            context={"received": type(value).__name__},
        )
    return value


def validate_fields(model: Type[ModelT], body: Any) -> ModelT:
    """
    Validate a JSON body against a request model.

    Returns:
        The model instance (string fields already trimmed where the model says so).

    Raises:
        FieldValidationError: with one entry per failing field, in model field order.
    """
    data = as_object(body)
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        failing = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        errors = [
            {
                "type": "field",
                "value": data.get(name),
                "msg": "Invalid value",
                "path": name,
                "location": "body",
            }
            for name in model.model_fields
            if name in failing
        ]
        raise FieldValidationError(errors=errors)


def _is_json_content_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def read_json_body(request: Request) -> Any:
    """
    Parse the request body as JSON.

    Returns:
        The decoded value, or None for an empty body or a non-JSON content type.

    Raises:
        ValidationError: the body claims to be JSON but does not parse (400).
    """
    raw = await request.body()
    if not raw or not _is_json_content_type(request.headers.get("content-type", "")):
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ValidationError(message=INVALID_JSON_MESSAGE, context={"json_error": str(exc)})
