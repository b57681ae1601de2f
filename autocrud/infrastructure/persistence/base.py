"""Declarative base and mixins for models served by AutoCRUD.

This module provides:
- BaseModel: Declarative base for host application models
- TimestampMixin: created_at / updated_at bookkeeping
- SoftDeleteMixin: deleted_at marker enabling trashed/restore/force delete
- fillable_fields(): mass-assignable attribute names of a model

Usage:
    class Post(SoftDeleteMixin, TimestampMixin, BaseModel):
        __tablename__ = "posts"
        __fillable__ = ("title", "body")

        id: Mapped[int] = mapped_column(primary_key=True)
        title: Mapped[str] = mapped_column(String(255))
        body: Mapped[str | None]

Models do not need to inherit from BaseModel: any SQLAlchemy mapped class
works. Soft-delete support is detected from SoftDeleteMixin.
"""

from datetime import UTC, datetime
from typing import Any, ClassVar

from sqlalchemy import DateTime, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

BOOKKEEPING_COLUMNS = frozenset({"created_at", "updated_at", "deleted_at"})


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BaseModel(DeclarativeBase):
    """Declarative base for CRUD models.

    Attributes:
        __fillable__: Mass-assignable attribute names. Empty means every
            column except primary keys and timestamp bookkeeping.
    """

    __abstract__ = True

    __fillable__: ClassVar[tuple[str, ...]] = ()

    def __repr__(self) -> str:
        """String representation showing class name and primary key."""
        identity = inspect(self).identity
        key = identity[0] if identity and len(identity) == 1 else identity
        return f"<{self.__class__.__name__}(id={key})>"


class TimestampMixin:
    """Adds created_at and updated_at, set on the Python side."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )


class SoftDeleteMixin:
    """Marks records inactive instead of removing them.

    A record is trashed while ``deleted_at`` is set. Default queries hide
    trashed records; restore clears the marker.
    """

    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    @property
    def trashed(self) -> bool:
        """Whether the record is currently soft deleted."""
        return self.deleted_at is not None


def supports_soft_delete(model: type[Any]) -> bool:
    """Capability check: can this model be soft deleted and restored?"""
    return isinstance(model, type) and issubclass(model, SoftDeleteMixin)


def fillable_fields(model: type[Any]) -> tuple[str, ...]:
    """Return the mass-assignable attribute names of a mapped class.

    Args:
        model: SQLAlchemy mapped class.

    Returns:
        ``model.__fillable__`` when declared, otherwise every column
        attribute that is neither a primary key nor bookkeeping.
    """
    declared = getattr(model, "__fillable__", ())
    if declared:
        return tuple(declared)

    mapper = inspect(model)
    primary = {column.key for column in mapper.primary_key}
    return tuple(
        attr.key
        for attr in mapper.column_attrs
        if attr.key not in primary and attr.key not in BOOKKEEPING_COLUMNS
    )
