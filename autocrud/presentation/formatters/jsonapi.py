"""JsonApiFormatter - JSON:API documents served as application/vnd.api+json.

Resource objects are ``{type, id, attributes}``; the primary key moves out of
``attributes`` into ``id`` (as a string).
"""

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


def resource_object(item: Any, resource_type: str) -> Any:
    """Wrap one serialized record as a JSON:API resource object."""
    if not isinstance(item, dict):
        return item
    attributes = dict(item)
    identifier = attributes.pop("id", None)
    return {
        "type": resource_type,
        "id": None if identifier is None else str(identifier),
        "attributes": attributes,
    }


class JsonApiFormatter:
    """JSON:API document formatter."""

    media_type = "application/vnd.api+json"

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

        kind = resource_type or "resources"
        info: dict[str, Any] = {"message": message, **(meta or {})}
        document: dict[str, Any] = {"meta": info}

        if isinstance(data, Page):
            document["data"] = [resource_object(item, kind) for item in data.items]
            info["pagination"] = pagination_meta(data)
            document["links"] = pagination_links(data, request)
        elif isinstance(data, list):
            document["data"] = [resource_object(item, kind) for item in data]
        else:
            document["data"] = resource_object(data, kind)

        if request is not None and "links" not in document:
            document["links"] = {"self": str(request.url)}

        return JSONResponse(document, status_code=status, media_type=self.media_type)

    def error(self, message: str = "Error", status: int = 400, errors: Any = None) -> Response:
        return JSONResponse(
            error_document(message, status, errors),
            status_code=status,
            media_type=self.media_type,
        )
