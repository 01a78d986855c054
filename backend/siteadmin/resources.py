"""
SiteAdmin Backend - Resource Table
==================================

What:  Declarative table of every JSON document the API serves.
How:   One ResourceSpec per document. The JSON store takes its file names from
       here and routes/content.py iterates CONTENT_RESOURCES once to register
       the GET and POST routes.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

LIST = "list"
OBJECT = "object"


@dataclass(frozen=True)
class ResourceSpec:
    """
    Attributes:
        key:            Resource name, also the store key
        filename:       File name under DATA_DIR
        shape:          LIST or OBJECT (expected top-level JSON type)
        read_route:     Path of the GET route (None: not exposed)
        write_route:    Path of the POST route (None: not exposed)
        prop:           Body property holding the new document
        saved_message:  Success message of the POST route
        invalid_message: 400 message when the body property has the wrong type
    """

    key: str
    filename: str
    shape: str
    read_route: Optional[str] = None
    write_route: Optional[str] = None
    prop: Optional[str] = None
    saved_message: str = ""
    invalid_message: str = ""


def _list_resource(key: str, filename: str, read_route: str) -> ResourceSpec:
    return ResourceSpec(
        key=key,
        filename=filename,
        shape=LIST,
        read_route=read_route,
        write_route=f"/api/save-{key}",
        prop=key,
        saved_message=f"{key} sparade!",
        invalid_message=f"{key} måste vara en array.",
    )


CONTENT_RESOURCES: Tuple[ResourceSpec, ...] = (
    _list_resource("homeServices", "homeservices.json", "/api/get-home-services"),
    _list_resource("personal", "personal.json", "/api/personal"),
    _list_resource("services", "services.json", "/api/get-services"),
    _list_resource("projekt", "projekt.json", "/api/get-projekt"),
    ResourceSpec(
        key="kontakt",
        filename="kontakt.json",
        shape=OBJECT,
        read_route="/api/get-kontakt",
        write_route="/api/save-kontakt",
        prop="kontakt",
        saved_message="Kontaktinfo sparad!",
        invalid_message="Kontakt måste vara ett objekt.",
    ),
)

# Read by the admin authenticator only; written by scripts/set_admin_password.py
ADMIN_CREDENTIAL = ResourceSpec(key="admin", filename="adminpassword.json", shape=OBJECT)

ALL_RESOURCES: Tuple[ResourceSpec, ...] = CONTENT_RESOURCES + (ADMIN_CREDENTIAL,)


def resource_filenames() -> Dict[str, str]:
    """Map of store key to file name for every known resource."""
    return {resource.key: resource.filename for resource in ALL_RESOURCES}
