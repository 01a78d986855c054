"""
SiteAdmin Backend - Content Routes
==================================

What:  GET and POST routes over the page-content JSON documents.
How:   build_router() walks the resource table once and registers, per
       resource, a GET route that returns the stored document as-is and a POST
       route that checks the body shape and overwrites the document.

    GET  /api/get-home-services   POST /api/save-homeServices   {homeServices: [...]}
    GET  /api/personal            POST /api/save-personal       {personal: [...]}
    GET  /api/get-services        POST /api/save-services       {services: [...]}
    GET  /api/get-projekt         POST /api/save-projekt        {projekt: [...]}
    GET  /api/get-kontakt         POST /api/save-kontakt        {kontakt: {...}}

Errors (formatted by the global handlers):
    400  body property has the wrong type; the stored file is left untouched
    500  document missing, unreadable, malformed or not writable
"""

import logging
from typing import Any, Iterable

from fastapi import APIRouter, Body, Depends

from siteadmin.dependencies import get_store
from siteadmin.resources import CONTENT_RESOURCES, LIST, ResourceSpec
from siteadmin.schemas.responses import ErrorResponse, SaveResponse
from siteadmin.services.json_store import JsonStore
from siteadmin.validation import require_list, require_object

logger = logging.getLogger(__name__)


def _make_reader(resource: ResourceSpec):
    async def read_resource(store: JsonStore = Depends(get_store)) -> Any:
        return await store.read(resource.key)

    read_resource.__name__ = f"get_{resource.key}"
    return read_resource


def _make_writer(resource: ResourceSpec):
    async def save_resource(
        payload: Any = Body(default=None),
        store: JsonStore = Depends(get_store),
    ) -> SaveResponse:
        if resource.shape == LIST:
            value = require_list(payload, resource.prop, resource.invalid_message)
        else:
            value = require_object(payload, resource.prop, resource.invalid_message)

        await store.write(resource.key, value)
        return SaveResponse(success=True, message=resource.saved_message)

    save_resource.__name__ = f"save_{resource.key}"
    return save_resource


def build_router(resources: Iterable[ResourceSpec] = CONTENT_RESOURCES) -> APIRouter:
    """One GET and one POST route per resource in the table."""
    router = APIRouter(tags=["Content"])
    for resource in resources:
        if resource.read_route:
            router.add_api_route(
                resource.read_route,
                _make_reader(resource),
                methods=["GET"],
                summary=f"Read {resource.key}",
                responses={500: {"model": ErrorResponse}},
            )
        if resource.write_route:
            router.add_api_route(
                resource.write_route,
                _make_writer(resource),
                methods=["POST"],
                response_model=SaveResponse,
                summary=f"Overwrite {resource.key}",
                responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
            )
    return router
