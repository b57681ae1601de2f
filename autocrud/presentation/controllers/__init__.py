"""CRUD controllers and convention-based resolution."""

from autocrud.presentation.controllers.base import CrudController
from autocrud.presentation.controllers.files import FileCrudController
from autocrud.presentation.controllers.resolution import (
    resolve_model,
    resolve_transformer,
    route_base,
)

__all__ = [
    "CrudController",
    "FileCrudController",
    "resolve_model",
    "resolve_transformer",
    "route_base",
]
