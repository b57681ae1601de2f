"""Listing query parameters.

Parses ``filter[col]=a,b``, ``sort=-col,col2``, ``include=rel``,
``fields[<type>]=a,b`` and the pagination parameters, checking each family
against the configured allow-lists. An empty allow-list permits nothing.
"""

from collections.abc import Collection, Mapping
from typing import Any

from starlette.datastructures import QueryParams

from autocrud.core.config import ApiSettings
from autocrud.core.errors import InvalidQueryError
from autocrud.core.result import Failure, Result, Success
from autocrud.domain.value_objects import QuerySpec


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _bracketed(key: str, family: str) -> str | None:
    """``filter[title]`` with family ``filter`` -> ``title``."""
    prefix = f"{family}["
    if key.startswith(prefix) and key.endswith("]"):
        return key[len(prefix) : -1]
    return None


def _rejected(family: str, names: list[str], allowed: Collection[str]) -> Failure[InvalidQueryError]:
    allowed_text = ", ".join(allowed) if allowed else "none"
    return Failure(
        error=InvalidQueryError(
            message=(
                f"Requested {family}(s) `{', '.join(names)}` are not allowed. "
                f"Allowed {family}(s) are `{allowed_text}`."
            ),
            parameter=family,
            details={"error": {family: names}},
        )
    )


def parse_query_spec(
    params: QueryParams | Mapping[str, Any],
    *,
    resource_type: str,
    settings: ApiSettings,
    columns: Collection[str],
    relations: Collection[str],
) -> Result[QuerySpec, InvalidQueryError]:
    """Build a QuerySpec from request parameters.

    Args:
        params: Request query parameters.
        resource_type: Key accepted in ``fields[...]`` (the route base).
        settings: API settings carrying the allow-lists.
        columns: Column names of the model.
        relations: Relationship names of the model.

    Returns:
        Success(QuerySpec) or Failure(InvalidQueryError) naming the
        offending parameters.
    """
    items = params.multi_items() if isinstance(params, QueryParams) else list(params.items())

    filters: dict[str, list[str]] = {}
    sorts: list[tuple[str, str]] = []
    includes: list[str] = []
    fields: list[str] = []

    for key, value in items:
        if (column := _bracketed(key, "filter")) is not None:
            filters.setdefault(column, []).extend(_csv(str(value)))
        elif key == "sort":
            for item in _csv(str(value)):
                name = item.lstrip("-")
                sorts.append((name, "desc" if item.startswith("-") else "asc"))
        elif key == "include":
            includes.extend(_csv(str(value)))
        elif _bracketed(key, "fields") == resource_type:
            fields.extend(_csv(str(value)))

    allowed_filters = set(settings.allowed_filter_fields)
    bad = [name for name in filters if name not in allowed_filters or name not in columns]
    if bad:
        return _rejected("filter", bad, settings.allowed_filter_fields)

    allowed_sorts = set(settings.allowed_sort_fields)
    bad = [name for name, _ in sorts if name not in allowed_sorts or name not in columns]
    if bad:
        return _rejected("sort", bad, settings.allowed_sort_fields)

    allowed_includes = set(settings.allowed_include_relations)
    bad = [
        name
        for name in includes
        if name not in allowed_includes or name.split(".")[0] not in relations
    ]
    if bad:
        return _rejected("include", bad, settings.allowed_include_relations)

    allowed_fields = set(settings.allowed_output_fields)
    bad = [name for name in fields if name not in allowed_fields]
    if bad:
        return _rejected("field", bad, settings.allowed_output_fields)

    return Success(
        value=QuerySpec(
            filters=filters,
            sorts=sorts,
            includes=tuple(dict.fromkeys(includes)),
            fields=tuple(dict.fromkeys(fields)),
        )
    )


def _positive_int(value: Any) -> int | None:
    try:
        number = int(str(value))
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def page_params(
    params: QueryParams | Mapping[str, Any],
    default_size: int,
    *,
    allow_size_override: bool = True,
) -> tuple[int, int]:
    """Return ``(page, per_page)``.

    Page size comes from ``page[size]``, then ``per_page``, then the
    default; the page number from ``page[number]``, then ``page``. Values
    that are not positive integers are ignored.
    """
    per_page = default_size
    if allow_size_override:
        per_page = (
            _positive_int(params.get("page[size]"))
            or _positive_int(params.get("per_page"))
            or default_size
        )
    page = _positive_int(params.get("page[number]")) or _positive_int(params.get("page")) or 1
    return page, per_page
