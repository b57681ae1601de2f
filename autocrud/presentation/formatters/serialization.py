"""Record serialization.

Turns SQLAlchemy records into JSON-ready dicts, either through a Pydantic
transformer (``Transformer.model_validate(record).model_dump(mode="json")``)
or from the mapped columns plus whatever relations are already loaded.
Unloaded relations are never touched, so serialization never triggers lazy
IO on an async session.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python
from sqlalchemy import inspect


def _columns(record: Any) -> dict[str, Any]:
    state = inspect(record)
    unloaded = state.unloaded
    values: dict[str, Any] = {}
    for attr in state.mapper.column_attrs:
        if attr.key in unloaded:
            continue
        value = getattr(record, attr.key)
        # Binary payloads (file contents) are served through dedicated routes
        if isinstance(value, bytes | bytearray | memoryview):
            continue
        values[attr.key] = to_jsonable_python(value)
    return values


def _record_to_dict(record: Any, seen: frozenset[int]) -> dict[str, Any]:
    data = _columns(record)
    state = inspect(record)
    unloaded = state.unloaded
    seen = seen | {id(record)}

    for relationship in state.mapper.relationships:
        if relationship.key in unloaded:
            continue
        related = getattr(record, relationship.key)
        if related is None:
            data[relationship.key] = None
        elif isinstance(related, Iterable):
            data[relationship.key] = [
                _record_to_dict(child, seen) for child in related if id(child) not in seen
            ]
        elif id(related) not in seen:
            data[relationship.key] = _record_to_dict(related, seen)
    return data


def serialize_record(
    record: Any,
    transformer: type[BaseModel] | None = None,
    fields: Sequence[str] = (),
) -> dict[str, Any]:
    """Serialize one record.

    Args:
        record: SQLAlchemy mapped instance.
        transformer: Optional Pydantic model used as the output shape.
        fields: Attribute names to keep (the primary key is always kept).

    Returns:
        JSON-compatible dict.
    """
    if transformer is not None:
        data = transformer.model_validate(record, from_attributes=True).model_dump(
            mode="json"
        )
    else:
        data = _record_to_dict(record, frozenset())

    if fields:
        keep = set(fields)
        keep.update(column.key for column in inspect(record).mapper.primary_key)
        data = {key: value for key, value in data.items() if key in keep}
    return data


def serialize(
    data: Any,
    transformer: type[BaseModel] | None = None,
    fields: Sequence[str] = (),
) -> Any:
    """Serialize a record, a list of records, or pass anything else through."""
    if data is None:
        return None
    if isinstance(data, list | tuple):
        return [serialize(item, transformer, fields) for item in data]
    if hasattr(data, "__mapper__"):
        return serialize_record(data, transformer, fields)
    return data
