"""Application services."""

from autocrud.application.services.crud_service import CrudService

__all__ = ["CrudService"]
