"""AutoCRUD: convention-over-configuration CRUD endpoints for FastAPI.

Usage:
    from autocrud import CrudController, create_app

    class PostController(CrudController):
        rules = {"title": "required|string|max:255"}

    app = create_app(controllers=[PostController])
"""

from autocrud.core.config import Settings, get_settings
from autocrud.core.errors import ConfigurationError
from autocrud.infrastructure.persistence import (
    BaseModel,
    Database,
    SoftDeleteMixin,
    TimestampMixin,
)
from autocrud.main import create_app
from autocrud.presentation.controllers import CrudController, FileCrudController

__all__ = [
    "BaseModel",
    "ConfigurationError",
    "CrudController",
    "Database",
    "FileCrudController",
    "Settings",
    "SoftDeleteMixin",
    "TimestampMixin",
    "create_app",
    "get_settings",
]
