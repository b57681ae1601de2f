"""Route table construction, registration and controller discovery."""

from autocrud.presentation.routing.discovery import discover_controllers
from autocrud.presentation.routing.metadata import HTTPMethod, RouteEntry
from autocrud.presentation.routing.registrar import (
    build_route_table,
    register_routes,
)

__all__ = [
    "HTTPMethod",
    "RouteEntry",
    "build_route_table",
    "discover_controllers",
    "register_routes",
]
