"""ResponseFormatter protocol and shared pagination helpers."""

from collections.abc import Mapping
from typing import Any, Protocol

from starlette.requests import Request
from starlette.responses import Response

from autocrud.domain.value_objects import Page


class ResponseFormatter(Protocol):
    """Shapes success and error payloads into HTTP responses."""

    media_type: str

    def success(
        self,
        data: Any = None,
        message: str = "Success",
        status: int = 200,
        request: Request | None = None,
        *,
        resource_type: str | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> Response:
        """Build a success response (``data`` is already serialized).

        ``meta`` entries are added next to ``meta.message``.
        """
        ...

    def error(
        self,
        message: str = "Error",
        status: int = 400,
        errors: Any = None,
    ) -> Response:
        """Build an error response."""
        ...


def page_url(request: Request | None, number: int) -> str | None:
    """URL of page ``number``, keeping every other query parameter."""
    if request is None:
        return None
    url = request.url.remove_query_params("page[number]")
    return str(url.include_query_params(page=number))


def pagination_meta(page: Page[Any]) -> dict[str, Any]:
    """Length-aware pagination block for ``meta.pagination``."""
    return {
        "current_page": page.page,
        "from": page.from_item,
        "last_page": page.last_page,
        "per_page": page.per_page,
        "to": page.to_item,
        "total": page.total,
    }


def pagination_links(page: Page[Any], request: Request | None) -> dict[str, str | None]:
    """first/last/prev/next links; prev and next are None at the boundaries."""
    return {
        "first": page_url(request, 1),
        "last": page_url(request, page.last_page),
        "prev": page_url(request, page.page - 1) if page.page > 1 else None,
        "next": page_url(request, page.page + 1) if page.has_more else None,
    }


def error_document(message: str, status: int, errors: Any = None) -> dict[str, Any]:
    """``{"errors": [{"status", "detail", "meta"?}]}``."""
    item: dict[str, Any] = {"status": str(status), "detail": message}
    if errors is not None:
        item["meta"] = {"errors": errors}
    return {"errors": [item]}
