"""EnvelopeFormatter - ``{data, meta, links?}`` responses (default)."""

from collections.abc import Mapping
from typing import Any

from fastapi.responses import JSONResponse
from starlette.requests import Request
from starlette.responses import Response

from autocrud.domain.value_objects import Page
from autocrud.presentation.formatters.base import (
    error_document,
    pagination_links,
    pagination_meta,
)


class EnvelopeFormatter:
    """Plain JSON envelope.

    Example:
        >>> EnvelopeFormatter().success({"id": 1}, "Post retrieved successfully.")
        # {"data": {"id": 1}, "meta": {"message": "Post retrieved successfully."}}
    """

    media_type = "application/json"

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
        if status == 204:
            return Response(status_code=204)

        info: dict[str, Any] = {"message": message, **(meta or {})}
        body: dict[str, Any] = {"data": data, "meta": info}

        if isinstance(data, Page):
            body["data"] = data.items
            info["pagination"] = pagination_meta(data)
            body["links"] = pagination_links(data, request)

        return JSONResponse(body, status_code=status, media_type=self.media_type)

    def error(self, message: str = "Error", status: int = 400, errors: Any = None) -> Response:
        return JSONResponse(
            error_document(message, status, errors),
            status_code=status,
            media_type=self.media_type,
        )
