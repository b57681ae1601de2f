"""Database persistence infrastructure.

This module provides database-related functionality including:
- Base model and mixins for CRUD models
- Database connection and session management
- The generic SQLAlchemy record store
"""

from autocrud.infrastructure.persistence.base import (
    BaseModel,
    SoftDeleteMixin,
    TimestampMixin,
    fillable_fields,
    supports_soft_delete,
)
from autocrud.infrastructure.persistence.database import Database
from autocrud.infrastructure.persistence.record_store import SQLAlchemyRecordStore

__all__ = [
    "BaseModel",
    "Database",
    "SQLAlchemyRecordStore",
    "SoftDeleteMixin",
    "TimestampMixin",
    "fillable_fields",
    "supports_soft_delete",
]
