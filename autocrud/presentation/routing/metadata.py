"""Route metadata types for generated CRUD routes.

Core types:
    HTTPMethod: HTTP method enum
    ActionTemplate: One action of the route set, relative to a resource base
    RouteEntry: One concrete route (method, path, controller, action, name, group)

The tables below are the complete CRUD route set. Static segments
(``trashed``, ``create``, ``files``) come before ``{id}`` routes so they are
matched first.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from autocrud.core.enums import RouteGroup


class HTTPMethod(str, Enum):
    """HTTP methods used by CRUD routes."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionTemplate:
    """Route shape shared by every resource.

    Attributes:
        method: HTTP method.
        suffix: Path after ``/<prefix>/<resource>`` (may contain ``{id}``).
        action: Action name used in route names (``forceDelete`` stays camelCase).
        handler: Controller method implementing the action.
    """

    method: HTTPMethod
    suffix: str
    action: str
    handler: str

    @property
    def has_id(self) -> bool:
        """Whether the path carries the ``{id}`` parameter."""
        return "{id}" in self.suffix


@dataclass(frozen=True, slots=True, kw_only=True)
class RouteEntry:
    """One registered route.

    Attributes:
        method: HTTP method.
        path: Full path including the group prefix.
        controller: Controller instance serving the route.
        action: Action name (``index``, ``forceDelete``, ...).
        handler: Controller method name.
        name: Route name, ``<prefix><resource>.<action>``.
        group: API or web.
    """

    method: HTTPMethod
    path: str
    controller: Any
    action: str
    handler: str
    name: str
    group: RouteGroup

    @property
    def has_id(self) -> bool:
        """Whether the path carries the ``{id}`` parameter."""
        return "{id}" in self.path


def _action(method: HTTPMethod, suffix: str, action: str, handler: str) -> ActionTemplate:
    return ActionTemplate(method=method, suffix=suffix, action=action, handler=handler)


API_ACTIONS: tuple[ActionTemplate, ...] = (
    _action(HTTPMethod.GET, "", "index", "index"),
    _action(HTTPMethod.POST, "", "store", "store"),
    _action(HTTPMethod.GET, "/trashed", "trashed", "trashed"),
    _action(HTTPMethod.GET, "/{id}", "show", "show"),
    _action(HTTPMethod.PUT, "/{id}", "update", "update"),
    _action(HTTPMethod.DELETE, "/{id}", "destroy", "destroy"),
    _action(HTTPMethod.POST, "/{id}/restore", "restore", "restore"),
    _action(HTTPMethod.DELETE, "/{id}/force", "forceDelete", "force_delete"),
)

WEB_ACTIONS: tuple[ActionTemplate, ...] = (
    _action(HTTPMethod.GET, "", "index", "index"),
    _action(HTTPMethod.GET, "/create", "create", "create"),
    _action(HTTPMethod.POST, "", "store", "store"),
    _action(HTTPMethod.GET, "/trashed", "trashed", "trashed"),
    _action(HTTPMethod.GET, "/{id}", "show", "show"),
    _action(HTTPMethod.GET, "/{id}/edit", "edit", "edit"),
    _action(HTTPMethod.PUT, "/{id}", "update", "update"),
    _action(HTTPMethod.DELETE, "/{id}", "destroy", "destroy"),
    _action(HTTPMethod.POST, "/{id}/restore", "restore", "restore"),
    _action(HTTPMethod.DELETE, "/{id}/force", "forceDelete", "force_delete"),
)

FILE_ACTIONS: tuple[ActionTemplate, ...] = (
    _action(HTTPMethod.POST, "/files", "uploadFile", "upload_file"),
    _action(HTTPMethod.POST, "/files/batch", "uploadMultipleFiles", "upload_multiple_files"),
    _action(HTTPMethod.PUT, "/{id}/file", "updateFile", "update_file"),
    _action(HTTPMethod.GET, "/{id}/file", "downloadFile", "download_file"),
    _action(HTTPMethod.DELETE, "/{id}/file", "deleteFile", "delete_file"),
)
