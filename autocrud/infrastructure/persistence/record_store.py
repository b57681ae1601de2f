"""SQLAlchemyRecordStore - generic SQLAlchemy implementation of RecordStoreProtocol.

One store wraps one mapped class and one AsyncSession. Every mutating call
commits immediately; there is no multi-statement transaction, so a failure
partway through a fan-out leaves the earlier records committed.

SQLAlchemy exceptions propagate to the caller after the session has been
rolled back.

Reference:
    - autocrud/domain/protocols/record_store_protocol.py
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Select, false, func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.strategy_options import _AbstractLoad

from autocrud.domain.value_objects.page import Page
from autocrud.domain.value_objects.query_spec import QuerySpec
from autocrud.infrastructure.persistence.base import (
    fillable_fields,
    supports_soft_delete,
)


class SQLAlchemyRecordStore:
    """Record storage for one SQLAlchemy model.

    This class does NOT inherit from the protocol (structural typing).

    Attributes:
        model: Mapped class served by this store.

    Example:
        >>> store = SQLAlchemyRecordStore(session, Post)
        >>> post = await store.find(1, ["comments"])
    """

    def __init__(self, session: AsyncSession, model: type[Any]) -> None:
        """Initialize store with a session and a mapped class.

        Args:
            session: SQLAlchemy async session.
            model: Mapped class to operate on.
        """
        self._session = session
        self.model = model
        self._mapper = inspect(model)
        self._pk = self._mapper.primary_key[0]
        self._fillable = set(fillable_fields(model))

    @property
    def supports_soft_delete(self) -> bool:
        """Whether the model can be soft deleted and restored."""
        return supports_soft_delete(self.model)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find(
        self,
        record_id: Any,
        relations: Sequence[str] = (),
        *,
        only_trashed: bool = False,
        with_trashed: bool = False,
    ) -> Any | None:
        """Find one record by primary key.

        Args:
            record_id: Primary key value (strings are coerced to the column type).
            relations: Relation names to eager-load (dotted for nesting).
            only_trashed: Match soft-deleted records only.
            with_trashed: Match records regardless of soft-delete state.

        Returns:
            The record if found, None otherwise.
        """
        key = self._coerce_key(record_id)
        if key is None:
            return None

        stmt = self._scoped_select(only_trashed=only_trashed, with_trashed=with_trashed)
        stmt = stmt.where(self._pk == key).options(*self._load_options(relations))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self,
        relations: Sequence[str] = (),
        ordering: Mapping[str, str] | str | None = None,
        *,
        spec: QuerySpec | None = None,
        only_trashed: bool = False,
    ) -> list[Any]:
        """Fetch every matching record.

        Args:
            relations: Relation names to eager-load.
            ordering: Column -> direction mapping, a single column ordered
                descending, or None for primary key descending.
            spec: Optional filters/sorts/includes from the request.
            only_trashed: Match soft-deleted records only.

        Returns:
            List of records.
        """
        stmt = self._filtered_select(spec, only_trashed=only_trashed)
        stmt = self._apply_ordering(stmt, ordering, spec)
        stmt = stmt.options(*self._load_options(self._relations(relations, spec)))
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def paginate(
        self,
        relations: Sequence[str] = (),
        ordering: Mapping[str, str] | str | None = None,
        *,
        spec: QuerySpec | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Page[Any]:
        """Fetch one page of matching records plus the total count.

        Args:
            relations: Relation names to eager-load.
            ordering: See list().
            spec: Optional filters/sorts/includes from the request.
            page: 1-based page number (values below 1 are treated as 1).
            per_page: Page size.

        Returns:
            Page with items and total.
        """
        page = max(page, 1)
        filtered = self._filtered_select(spec)

        count_stmt = select(func.count()).select_from(filtered.subquery())
        total = (await self._session.execute(count_stmt)).scalar_one()

        stmt = self._apply_ordering(filtered, ordering, spec)
        stmt = stmt.options(*self._load_options(self._relations(relations, spec)))
        stmt = stmt.offset((page - 1) * per_page).limit(per_page)
        result = await self._session.execute(stmt)

        return Page(
            items=list(result.scalars().all()),
            total=total,
            page=page,
            per_page=per_page,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, data: Mapping[str, Any]) -> Any:
        """Insert and commit one record built from mass-assignable fields.

        Args:
            data: Attribute values; keys outside the fillable set are ignored.

        Returns:
            The persisted record.
        """
        record = self.model(**self._assignable(data))
        self._session.add(record)
        await self._commit(record)
        return record

    async def update(self, record: Any, data: Mapping[str, Any]) -> Any:
        """Apply mass-assignable fields to a record and commit.

        Args:
            record: Record previously loaded through this store.
            data: Attribute values; keys outside the fillable set are ignored.

        Returns:
            The updated record.
        """
        for key, value in self._assignable(data).items():
            setattr(record, key, value)
        await self._commit(record)
        return record

    async def delete(self, record: Any) -> None:
        """Soft delete when the model supports it, hard delete otherwise."""
        if self.supports_soft_delete:
            record.deleted_at = datetime.now(UTC)
            await self._commit(record)
            return
        await self.force_delete(record)

    async def restore(self, record: Any) -> Any:
        """Clear the soft-delete marker and commit."""
        record.deleted_at = None
        await self._commit(record)
        return record

    async def force_delete(self, record: Any) -> None:
        """Permanently remove a record."""
        try:
            await self._session.delete(record)
            await self._session.commit()
        except SQLAlchemyError:
            await self._session.rollback()
            raise

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _commit(self, record: Any) -> None:
        try:
            await self._session.commit()
            await self._session.refresh(record)
        except SQLAlchemyError:
            await self._session.rollback()
            raise

    def _assignable(self, data: Mapping[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in data.items() if key in self._fillable}

    def _coerce_key(self, value: Any) -> Any:
        """Convert a path parameter to the primary key's Python type."""
        if isinstance(value, str):
            return self._coerce_value(self._pk, value)
        return value

    @staticmethod
    def _coerce_value(column: Any, value: str) -> Any:
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value
        if python_type is bool:
            return value.lower() in {"1", "true", "yes", "on"}
        if isinstance(value, python_type):
            return value
        try:
            return python_type(value)
        except (TypeError, ValueError):
            return None

    def _scoped_select(
        self, *, only_trashed: bool = False, with_trashed: bool = False
    ) -> Select[Any]:
        stmt = select(self.model)
        if not self.supports_soft_delete or with_trashed:
            return stmt
        deleted_at = self.model.deleted_at
        if only_trashed:
            return stmt.where(deleted_at.is_not(None))
        return stmt.where(deleted_at.is_(None))

    def _filtered_select(
        self, spec: QuerySpec | None, *, only_trashed: bool = False
    ) -> Select[Any]:
        stmt = self._scoped_select(only_trashed=only_trashed)
        if spec is None:
            return stmt
        for name, values in spec.filters.items():
            column = self._mapper.columns[name]
            # Values that cannot take the column's type match no row
            coerced = [
                converted
                for converted in (self._coerce_value(column, value) for value in values)
                if converted is not None
            ]
            if not coerced:
                stmt = stmt.where(false())
            elif len(coerced) == 1:
                stmt = stmt.where(column == coerced[0])
            else:
                stmt = stmt.where(column.in_(coerced))
        return stmt

    def _apply_ordering(
        self,
        stmt: Select[Any],
        ordering: Mapping[str, str] | str | None,
        spec: QuerySpec | None,
    ) -> Select[Any]:
        # Requested sorts come first, the resource's default ordering breaks ties
        if spec is not None:
            for name, direction in spec.sorts:
                column = self._mapper.columns[name]
                stmt = stmt.order_by(column.desc() if direction == "desc" else column.asc())

        if isinstance(ordering, Mapping):
            for name, direction in ordering.items():
                column = self._mapper.columns[name]
                descending = str(direction).lower() == "desc"
                stmt = stmt.order_by(column.desc() if descending else column.asc())
        elif isinstance(ordering, str):
            stmt = stmt.order_by(self._mapper.columns[ordering].desc())
        else:
            stmt = stmt.order_by(self._pk.desc())
        return stmt

    @staticmethod
    def _relations(relations: Sequence[str], spec: QuerySpec | None) -> list[str]:
        names = list(relations)
        if spec is not None:
            names.extend(name for name in spec.includes if name not in names)
        return names

    def _load_options(self, relations: Sequence[str]) -> list[_AbstractLoad]:
        """Build selectinload chains for (optionally dotted) relation names."""
        options: list[_AbstractLoad] = []
        for path in relations:
            owner: Any = self.model
            loader: Any = None
            for name in path.split("."):
                attribute = getattr(owner, name)
                loader = (
                    selectinload(attribute)
                    if loader is None
                    else loader.selectinload(attribute)
                )
                owner = attribute.property.mapper.class_
            if loader is not None:
                options.append(loader)
        return options
