"""CrudService - generic create/read/update/delete over one record store.

Architecture:
- Application layer service (no HTTP, no SQL)
- Talks to storage through RecordStoreProtocol and to validation through
  ValidatorProtocol
- Returns Result types; SQLAlchemy failures become PersistenceError

List fan-out:
    When a validated field holds a list, create/update run once per element
    with every other field held constant. Only the first list-valued field
    (in payload order) drives the fan-out. For update, element i is paired
    with ids[i] when several ids are given, otherwise the single id is reused;
    elements without an existing record are skipped.

Each record is committed on its own, so a failure midway through a fan-out
leaves the records written before it in place.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from autocrud.core.errors import (
    PersistenceError,
    UnsupportedOperationError,
    ValidationError,
)
from autocrud.core.result import Failure, Result, Success
from autocrud.domain.protocols import (
    LoggerProtocol,
    RecordStoreProtocol,
    ValidatorProtocol,
)
from autocrud.domain.value_objects import Page, QuerySpec

type Ordering = Mapping[str, str] | str | None


def first_list_field(
    validated: Mapping[str, Any], order: Sequence[str]
) -> str | None:
    """Return the first key (following ``order``) whose value is a list."""
    for key in order:
        if key in validated and isinstance(validated[key], list):
            return key
    for key, value in validated.items():
        if isinstance(value, list):
            return key
    return None


def expand(validated: Mapping[str, Any], key: str) -> list[dict[str, Any]]:
    """One payload per element of ``validated[key]``."""
    return [{**validated, key: element} for element in validated[key]]


class CrudService:
    """Generic CRUD operations for one resource.

    Dependencies (injected via constructor):
        - RecordStoreProtocol: storage for the resource's model
        - ValidatorProtocol: rule set applied before create/update
        - LoggerProtocol: structured logging

    Example:
        >>> service = CrudService(store, RuleValidator(rules), logger, resource_type="post")
        >>> match await service.create({"title": "Hello"}):
        ...     case Success(value=post):
        ...         ...
    """

    def __init__(
        self,
        store: RecordStoreProtocol,
        validator: ValidatorProtocol,
        logger: LoggerProtocol,
        *,
        resource_type: str = "record",
    ) -> None:
        self._store = store
        self._validator = validator
        self._logger = logger
        self._resource_type = resource_type

    @property
    def supports_soft_delete(self) -> bool:
        """Whether trashed/restore/force_delete are available."""
        return self._store.supports_soft_delete

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list(
        self,
        relations: Sequence[str] = (),
        ordering: Ordering = None,
        *,
        spec: QuerySpec | None = None,
    ) -> Result[list[Any], PersistenceError]:
        """Fetch every active record with relations eager-loaded."""
        try:
            records = await self._store.list(relations, ordering, spec=spec)
        except SQLAlchemyError as e:
            return self._persistence_failure("list", e)
        return Success(value=records)

    async def paginate(
        self,
        relations: Sequence[str] = (),
        ordering: Ordering = None,
        *,
        spec: QuerySpec | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Result[Page[Any], PersistenceError]:
        """Fetch one page of active records."""
        try:
            result = await self._store.paginate(
                relations, ordering, spec=spec, page=page, per_page=per_page
            )
        except SQLAlchemyError as e:
            return self._persistence_failure("paginate", e)
        return Success(value=result)

    async def find(
        self, record_id: Any, relations: Sequence[str] = ()
    ) -> Result[Any | None, PersistenceError]:
        """Fetch one active record, Success(None) when it does not exist."""
        try:
            record = await self._store.find(record_id, relations)
        except SQLAlchemyError as e:
            return self._persistence_failure("find", e, record_id=record_id)
        return Success(value=record)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self, data: Mapping[str, Any], *, attach: Mapping[str, Any] | None = None
    ) -> Result[Any, ValidationError | PersistenceError]:
        """Validate and insert one record, or one per list element.

        Args:
            data: Raw input.
            attach: Attributes merged in after validation (e.g. file metadata).

        Returns:
            Success(record) for a single payload, Success([records]) when
            the payload fanned out.
        """
        match self._validate(data):
            case Failure(error=error):
                return Failure(error=error)
            case Success(value=validated):
                pass

        validated = {**validated, **(attach or {})}
        fan_key = first_list_field(validated, list(data))
        try:
            if fan_key is None:
                return Success(value=await self._store.create(validated))

            created = [
                await self._store.create(payload)
                for payload in expand(validated, fan_key)
            ]
        except SQLAlchemyError as e:
            return self._persistence_failure("create", e)

        self._logger.info(
            "crud_fan_out_created",
            resource=self._resource_type,
            field=fan_key,
            count=len(created),
        )
        return Success(value=created)

    async def update(
        self,
        record_id: Any,
        data: Mapping[str, Any],
        *,
        attach: Mapping[str, Any] | None = None,
    ) -> Result[Any, ValidationError | PersistenceError]:
        """Validate and update one record, or several when the payload fans out.

        Args:
            record_id: Single id, or a list of ids paired with list elements.
            data: Raw input; may be empty when only ``attach`` is given.
            attach: Attributes merged in after validation.

        Returns:
            Success(record) for a single update (Success(None) when the record
            does not exist), Success([records]) after a fan-out.
        """
        if not data and attach:
            validated: dict[str, Any] = {}
        else:
            match self._validate(data):
                case Failure(error=error):
                    return Failure(error=error)
                case Success(value=validated):
                    pass
        validated = {**validated, **(attach or {})}

        fan_key = first_list_field(validated, list(data))
        try:
            if fan_key is None:
                single_id = record_id[0] if isinstance(record_id, list) else record_id
                record = await self._store.find(single_id)
                if record is None:
                    return Success(value=None)
                return Success(value=await self._store.update(record, validated))

            updated = []
            for index, payload in enumerate(expand(validated, fan_key)):
                if isinstance(record_id, list):
                    if index >= len(record_id):
                        continue
                    target_id = record_id[index]
                else:
                    target_id = record_id
                record = await self._store.find(target_id)
                if record is None:
                    continue
                updated.append(await self._store.update(record, payload))
        except SQLAlchemyError as e:
            return self._persistence_failure("update", e, record_id=record_id)

        return Success(value=updated)

    async def delete(self, record_id: Any) -> Result[bool, PersistenceError]:
        """Soft delete (or hard delete) a record; Success(False) if absent."""
        try:
            record = await self._store.find(record_id)
            if record is None:
                return Success(value=False)
            await self._store.delete(record)
        except SQLAlchemyError as e:
            return self._persistence_failure("delete", e, record_id=record_id)
        return Success(value=True)

    # ------------------------------------------------------------------
    # Soft-delete lifecycle
    # ------------------------------------------------------------------

    async def trashed(
        self, relations: Sequence[str] = (), ordering: Ordering = None
    ) -> Result[list[Any], UnsupportedOperationError | PersistenceError]:
        """Fetch soft-deleted records."""
        if not self.supports_soft_delete:
            return self._unsupported()
        try:
            records = await self._store.list(relations, ordering, only_trashed=True)
        except SQLAlchemyError as e:
            return self._persistence_failure("trashed", e)
        return Success(value=records)

    async def restore(
        self, record_id: Any
    ) -> Result[Any | None, UnsupportedOperationError | PersistenceError]:
        """Bring a soft-deleted record back; Success(None) if not trashed."""
        if not self.supports_soft_delete:
            return self._unsupported()
        try:
            record = await self._store.find(record_id, only_trashed=True)
            if record is None:
                return Success(value=None)
            restored = await self._store.restore(record)
        except SQLAlchemyError as e:
            return self._persistence_failure("restore", e, record_id=record_id)
        return Success(value=restored)

    async def force_delete(
        self, record_id: Any
    ) -> Result[bool, UnsupportedOperationError | PersistenceError]:
        """Permanently remove a record, trashed or not."""
        if not self.supports_soft_delete:
            return self._unsupported()
        try:
            record = await self._store.find(record_id, with_trashed=True)
            if record is None:
                return Success(value=False)
            await self._store.force_delete(record)
        except SQLAlchemyError as e:
            return self._persistence_failure("force_delete", e, record_id=record_id)
        return Success(value=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate(
        self, data: Mapping[str, Any]
    ) -> Result[dict[str, Any], ValidationError]:
        result = self._validator.validate(data)
        if isinstance(result, Failure):
            self._logger.warning(
                "crud_validation_failed",
                resource=self._resource_type,
                fields=sorted(result.error.errors),
            )
        return result

    def _unsupported(self) -> Failure[UnsupportedOperationError]:
        return Failure(error=UnsupportedOperationError(resource_type=self._resource_type))

    def _persistence_failure(
        self, operation: str, error: SQLAlchemyError, **context: Any
    ) -> Failure[PersistenceError]:
        message = str(getattr(error, "orig", None) or error)
        self._logger.error(
            "crud_persistence_failed",
            error=error,
            resource=self._resource_type,
            operation=operation,
            **context,
        )
        return Failure(
            error=PersistenceError(
                message=f"Failed to {operation.replace('_', ' ')} {self._resource_type}",
                details={"error": message},
            )
        )
