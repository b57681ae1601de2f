"""RecordStoreProtocol - storage port used by CrudService.

The store is the only component that touches the database. It raises the
driver's exceptions (``sqlalchemy.exc.SQLAlchemyError``) on failure; the
service turns them into PersistenceError results.

Reference:
    - autocrud/infrastructure/persistence/record_store.py
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from autocrud.domain.value_objects.page import Page
from autocrud.domain.value_objects.query_spec import QuerySpec


class RecordStoreProtocol(Protocol):
    """Generic record storage for one model class."""

    @property
    def supports_soft_delete(self) -> bool:
        """Whether the model can be soft deleted and restored."""
        ...

    async def find(
        self,
        record_id: Any,
        relations: Sequence[str] = (),
        *,
        only_trashed: bool = False,
        with_trashed: bool = False,
    ) -> Any | None:
        """Find one record by primary key, or None."""
        ...

    async def list(
        self,
        relations: Sequence[str] = (),
        ordering: Mapping[str, str] | str | None = None,
        *,
        spec: QuerySpec | None = None,
        only_trashed: bool = False,
    ) -> list[Any]:
        """Fetch every matching record."""
        ...

    async def paginate(
        self,
        relations: Sequence[str] = (),
        ordering: Mapping[str, str] | str | None = None,
        *,
        spec: QuerySpec | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Page[Any]:
        """Fetch one page of matching records plus the total count."""
        ...

    async def create(self, data: Mapping[str, Any]) -> Any:
        """Insert and commit one record."""
        ...

    async def update(self, record: Any, data: Mapping[str, Any]) -> Any:
        """Apply data to a record and commit."""
        ...

    async def delete(self, record: Any) -> None:
        """Soft delete when supported, hard delete otherwise."""
        ...

    async def restore(self, record: Any) -> Any:
        """Clear the soft-delete marker and commit."""
        ...

    async def force_delete(self, record: Any) -> None:
        """Permanently remove a record."""
        ...
