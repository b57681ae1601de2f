"""CrudController - base class for auto-generated CRUD endpoints.

Subclasses only declare what differs from the conventions:

    class PostController(CrudController):
        rules = {"title": "required|string|max:255", "body": "nullable|string"}
        with_ = ("comments",)
        order_by = "created_at"

The model, transformer, route base and labels are resolved once when the
controller is constructed (during app creation) and frozen in a
ResourceDefinition. Each action receives the request and a request-scoped
session; it never raises for expected failures, every error is rendered
through the configured ResponseFormatter (API) or flashed back to the
previous page (web).
"""

from collections.abc import Mapping, Sequence
from dataclasses import replace
from types import MappingProxyType
from typing import Any, ClassVar

from fastapi import HTTPException, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request
from starlette.responses import Response

from autocrud.application.services import CrudService
from autocrud.core.config import Settings
from autocrud.core.enums import IndexMode, RouteGroup
from autocrud.core.errors import (
    DomainError,
    EmptyPayloadError,
    MalformedPayloadError,
    NotFoundError,
    ValidationError,
)
from autocrud.core.result import Failure, Result, Success
from autocrud.domain.protocols import LoggerProtocol
from autocrud.domain.resource import ResourceDefinition
from autocrud.domain.value_objects import Page, QuerySpec
from autocrud.infrastructure.persistence import (
    SQLAlchemyRecordStore,
    fillable_fields,
    supports_soft_delete,
)
from autocrud.infrastructure.validation import RuleValidator
from autocrud.presentation.controllers.query import page_params, parse_query_spec
from autocrud.presentation.controllers.resolution import (
    resolve_model,
    resolve_transformer,
    resource_label,
    resource_name,
    route_base,
)
from autocrud.presentation.errors import ErrorResponseBuilder
from autocrud.presentation.formatters import ResponseFormatter, serialize

RESERVED_INPUT = frozenset({"_token", "_method"})
FLASH_KEY = "_autocrud_flash"


class CrudController:
    """Generic CRUD controller.

    Class attributes (all optional):
        model: SQLAlchemy model; resolved by naming convention when omitted.
        transformer: Pydantic model shaping output; resolved by convention.
        rules: Validation rule set; empty accepts any field.
        with_: Relations always eager-loaded.
        order_by: Column (descending) or {column: direction}; None orders by
            primary key descending.
        resource_name: Name used in messages; defaults to the camelCase model name.
        web_fields: Fields shown in HTML views; defaults to the fillable fields.
        index_mode: Per-controller override of Settings.index_mode.
    """

    model: ClassVar[type[Any] | None] = None
    transformer: ClassVar[type[Any] | None] = None
    rules: ClassVar[Mapping[str, Any]] = {}
    with_: ClassVar[Sequence[str]] = ()
    order_by: ClassVar[Mapping[str, str] | str | None] = None
    resource_name: ClassVar[str | None] = None
    web_fields: ClassVar[Sequence[str]] = ()
    index_mode: ClassVar[IndexMode | None] = None

    def __init__(
        self,
        *,
        settings: Settings,
        formatter: ResponseFormatter,
        logger: LoggerProtocol,
        templates: Jinja2Templates | None = None,
    ) -> None:
        """Resolve the resource definition and compile the rule set.

        Raises:
            ConfigurationError: If the model cannot be resolved or a rule is unknown.
        """
        cls = type(self)
        model = resolve_model(cls, settings.app_package)
        base = route_base(cls)

        self.resource = ResourceDefinition(
            name=cls.resource_name or resource_name(model),
            route_base=base,
            label=resource_label(base),
            model=model,
            transformer=resolve_transformer(cls, model, settings.app_package),
            rules=MappingProxyType(dict(cls.rules)),
            with_=tuple(cls.with_),
            order_by=cls.order_by,
            web_fields=tuple(cls.web_fields) or fillable_fields(model),
            supports_soft_delete=supports_soft_delete(model),
            index_mode=cls.index_mode or settings.index_mode,
        )
        self.settings = settings
        self.formatter = formatter
        self.templates = templates
        self.logger = logger.bind(resource=self.resource.route_base)
        self._validator = RuleValidator(self.resource.rules)

        mapper = inspect(model)
        self._columns = frozenset(attr.key for attr in mapper.column_attrs)
        self._relations = frozenset(mapper.relationships.keys())
        self._primary_key = mapper.get_property_by_column(mapper.primary_key[0]).key

    # ------------------------------------------------------------------
    # Wiring helpers
    # ------------------------------------------------------------------

    def service(self, session: AsyncSession) -> CrudService:
        """CrudService bound to a request-scoped session."""
        return CrudService(
            SQLAlchemyRecordStore(session, self.resource.model),
            self._validator,
            self.logger,
            resource_type=self.resource.name,
        )

    @property
    def title(self) -> str:
        """Resource name with an upper-case first letter, used in messages."""
        name = self.resource.name
        return name[:1].upper() + name[1:]

    def prefers_json(self, request: Request) -> bool:
        """True for API routes, Accept: *json*, or XMLHttpRequest callers."""
        if getattr(request.state, "route_group", None) == RouteGroup.API:
            return True
        if "json" in request.headers.get("accept", "").lower():
            return True
        if request.headers.get("x-requested-with", "") == "XMLHttpRequest":
            return True
        prefix = self.settings.api.url_prefix
        path = request.url.path.strip("/")
        return bool(prefix) and (path == prefix or path.startswith(f"{prefix}/"))

    def route_name(self, action: str, group: RouteGroup = RouteGroup.WEB) -> str:
        """Full route name, e.g. ``web.blog-posts.index``."""
        prefix = (
            self.settings.web.route_name_prefix
            if group == RouteGroup.WEB
            else self.settings.api.route_name_prefix
        )
        return f"{prefix}{self.resource.route_base}.{action}"

    def present(self, data: Any, spec: QuerySpec | None = None) -> Any:
        """Serialize records (or a Page of records) for the formatter."""
        fields = spec.fields if spec is not None else ()
        if isinstance(data, Page):
            return replace(data, items=serialize(data.items, self.resource.transformer, fields))
        return serialize(data, self.resource.transformer, fields)

    def respond(
        self, request: Request, data: Any, message: str, status_code: int = 200
    ) -> Response:
        """Success response through the configured formatter."""
        return self.formatter.success(
            data,
            message,
            status_code,
            request,
            resource_type=self.resource.route_base,
        )

    def fail(self, error: DomainError) -> Response:
        """Error envelope for a domain error."""
        return ErrorResponseBuilder.from_domain_error(error, self.formatter)

    def not_found(self, request: Request, record_id: Any, message: str = "Not found") -> Response:
        """404 envelope for API callers; HTTPException for web callers."""
        if not self.prefers_json(request):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)
        return self.fail(
            NotFoundError(
                message=message,
                resource_type=self.resource.name,
                resource_id=str(record_id),
            )
        )

    async def read_input(
        self, request: Request
    ) -> Result[dict[str, Any], MalformedPayloadError]:
        """Request payload without framework-reserved keys.

        JSON objects are used as-is. Form fields named ``x[]`` or repeated
        keys become lists. A body that is not valid JSON is a Failure.
        """
        content_type = request.headers.get("content-type", "")
        if "json" in content_type:
            try:
                body = await request.json()
            except ValueError as e:
                self.logger.warning("malformed_payload", error=str(e))
                return Failure(
                    error=MalformedPayloadError(details={"error": "Body is not valid JSON."})
                )
            data = dict(body) if isinstance(body, dict) else {}
        else:
            form = await request.form()
            data = {}
            for key, value in form.multi_items():
                is_list = key.endswith("[]")
                name = key[:-2] if is_list else key
                if name in data:
                    current = data[name]
                    data[name] = [*current, value] if isinstance(current, list) else [current, value]
                else:
                    data[name] = [value] if is_list else value
        return Success(
            value={key: value for key, value in data.items() if key not in RESERVED_INPUT}
        )

    async def read_payload(
        self, request: Request
    ) -> Result[dict[str, Any], MalformedPayloadError | EmptyPayloadError]:
        """``read_input`` that also rejects a payload with no usable fields."""
        match await self.read_input(request):
            case Failure() as failure:
                return failure
            case Success(value=data) if not data:
                return Failure(error=EmptyPayloadError())
            case Success(value=data):
                return Success(value=data)

    # ------------------------------------------------------------------
    # Web helpers
    # ------------------------------------------------------------------

    def flash(self, request: Request, **values: Any) -> None:
        """Store values for the next rendered page (no-op without sessions)."""
        if "session" in request.scope:
            request.session[FLASH_KEY] = {**request.session.get(FLASH_KEY, {}), **values}

    def pop_flash(self, request: Request) -> dict[str, Any]:
        if "session" not in request.scope:
            return {}
        return request.session.pop(FLASH_KEY, {})

    def redirect_to(self, request: Request, action: str, **path_params: Any) -> RedirectResponse:
        url = request.url_for(self.route_name(action), **path_params)
        return RedirectResponse(str(url), status_code=status.HTTP_303_SEE_OTHER)

    def redirect_back(
        self,
        request: Request,
        fallback: str,
        *,
        errors: Mapping[str, list[str]],
        old: Mapping[str, Any] | None = None,
        **path_params: Any,
    ) -> RedirectResponse:
        """Redirect to the referring page with errors and old input flashed."""
        old_input = {
            key: value for key, value in (old or {}).items() if isinstance(value, str | list)
        }
        self.flash(request, errors=dict(errors), old=old_input)
        target = request.headers.get("referer") or str(
            request.url_for(self.route_name(fallback), **path_params)
        )
        return RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)

    def render(self, request: Request, template: str, **context: Any) -> Response:
        """Render a CRUD template with the shared view context."""
        if self.templates is None:
            raise RuntimeError("Web views need templates; enable the web route group")
        flashed = self.pop_flash(request)
        view = {
            "items": [],
            "item": None,
            "fields": list(self.resource.web_fields),
            "resourceLabel": self.resource.label,
            "routeBase": self.resource.route_base,
            "routeNamePrefix": self.settings.web.route_name_prefix,
            "primaryKey": self._primary_key,
            "status": flashed.get("status"),
            "errors": flashed.get("errors", {}),
            "old": flashed.get("old", {}),
            **context,
        }
        return self.templates.TemplateResponse(request, f"crud/{template}", view)

    def _failure_redirect(
        self,
        request: Request,
        error: DomainError,
        fallback: str,
        data: Mapping[str, Any],
        **path_params: Any,
    ) -> RedirectResponse:
        if isinstance(error, ValidationError):
            errors = error.errors
        else:
            errors = {"error": [error.message]}
        return self.redirect_back(request, fallback, errors=errors, old=data, **path_params)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def index(self, request: Request, session: AsyncSession) -> Response:
        """List records: paginated envelope for JSON callers, HTML otherwise."""
        service = self.service(session)
        api_only = self.resource.index_mode == IndexMode.API_ONLY

        if not api_only and not self.prefers_json(request):
            match await service.list(self.resource.with_, self.resource.order_by):
                case Failure(error=error):
                    return self.fail(error)
                case Success(value=records):
                    return self.render(request, "index.html", items=records)

        match parse_query_spec(
            request.query_params,
            resource_type=self.resource.route_base,
            settings=self.settings.api,
            columns=self._columns,
            relations=self._relations,
        ):
            case Failure(error=error):
                return self.fail(error)
            case Success(value=spec):
                pass

        page, per_page = page_params(
            request.query_params,
            self.settings.api.page_size,
            allow_size_override=not api_only,
        )
        result = await service.paginate(
            self.resource.with_,
            self.resource.order_by,
            spec=spec,
            page=page,
            per_page=per_page,
        )
        if isinstance(result, Failure):
            return self.fail(result.error)
        return self.respond(
            request,
            self.present(result.value, spec),
            f"{self.title}s fetched successfully.",
        )

    async def show(self, request: Request, session: AsyncSession, record_id: str) -> Response:
        """Show one record."""
        result = await self.service(session).find(record_id, self.resource.with_)
        if isinstance(result, Failure):
            return self.fail(result.error)
        if result.value is None:
            return self.not_found(request, record_id)

        if not self.prefers_json(request):
            return self.render(request, "show.html", item=result.value)
        return self.respond(
            request, self.present(result.value), f"{self.title} retrieved successfully."
        )

    async def create(self, request: Request, session: AsyncSession) -> Response:
        """HTML form for a new record."""
        return self.render(request, "create.html", item=self.resource.model())

    async def edit(self, request: Request, session: AsyncSession, record_id: str) -> Response:
        """HTML form for an existing record."""
        result = await self.service(session).find(record_id)
        if isinstance(result, Failure):
            return self.fail(result.error)
        if result.value is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
        return self.render(request, "edit.html", item=result.value)

    async def store(self, request: Request, session: AsyncSession) -> Response:
        """Create one record, or several when a field carries a list."""
        payload = await self.read_payload(request)
        if isinstance(payload, Failure):
            if not self.prefers_json(request):
                return self._failure_redirect(request, payload.error, "create", {})
            return self.fail(payload.error)
        data = payload.value

        result = await self.service(session).create(data)
        if isinstance(result, Failure):
            if not self.prefers_json(request):
                return self._failure_redirect(request, result.error, "create", data)
            return self.fail(result.error)

        message = f"{self.title} created successfully."
        if not self.prefers_json(request):
            self.flash(request, status=message)
            return self.redirect_to(request, "index")
        return self.respond(request, self.present(result.value), message, status.HTTP_201_CREATED)

    async def update(self, request: Request, session: AsyncSession, record_id: str) -> Response:
        """Update a record (fan-out payloads update it once per element)."""
        service = self.service(session)
        found = await service.find(record_id)
        if isinstance(found, Failure):
            return self.fail(found.error)
        if found.value is None:
            return self.not_found(request, record_id)

        payload = await self.read_payload(request)
        if isinstance(payload, Failure):
            if not self.prefers_json(request):
                return self._failure_redirect(
                    request, payload.error, "edit", {}, id=record_id
                )
            return self.fail(payload.error)
        data = payload.value

        result = await service.update(record_id, data)
        if isinstance(result, Failure):
            if not self.prefers_json(request):
                return self._failure_redirect(request, result.error, "edit", data, id=record_id)
            return self.fail(result.error)
        if result.value is None:
            return self.not_found(request, record_id)

        message = f"{self.title} updated successfully."
        if not self.prefers_json(request):
            self.flash(request, status=message)
            return self.redirect_to(request, "index")
        return self.respond(request, self.present(result.value), message)

    async def destroy(self, request: Request, session: AsyncSession, record_id: str) -> Response:
        """Delete a record (soft delete when the model supports it)."""
        result = await self.service(session).delete(record_id)
        if isinstance(result, Failure):
            if not self.prefers_json(request):
                return self._failure_redirect(request, result.error, "index", {})
            return self.fail(result.error)
        if not result.value:
            return self.not_found(request, record_id)

        message = f"{self.title} deleted successfully."
        if not self.prefers_json(request):
            self.flash(request, status=message)
            return self.redirect_to(request, "index")
        return self.respond(request, None, message, status.HTTP_204_NO_CONTENT)

    async def trashed(self, request: Request, session: AsyncSession) -> Response:
        """List soft-deleted records."""
        result = await self.service(session).trashed(
            self.resource.with_, self.resource.order_by
        )
        if isinstance(result, Failure):
            return self.fail(result.error)
        return self.respond(
            request,
            self.present(result.value),
            f"Trashed {self.resource.name} fetched successfully.",
        )

    async def restore(self, request: Request, session: AsyncSession, record_id: str) -> Response:
        """Restore a soft-deleted record."""
        result = await self.service(session).restore(record_id)
        if isinstance(result, Failure):
            return self.fail(result.error)
        if result.value is None:
            return self.fail(
                NotFoundError(
                    message="Trashed item not found",
                    resource_type=self.resource.name,
                    resource_id=record_id,
                )
            )
        return self.respond(
            request, self.present(result.value), f"{self.title} restored successfully."
        )

    async def force_delete(
        self, request: Request, session: AsyncSession, record_id: str
    ) -> Response:
        """Permanently delete a record, trashed or not."""
        result = await self.service(session).force_delete(record_id)
        if isinstance(result, Failure):
            return self.fail(result.error)
        if not result.value:
            return self.fail(
                NotFoundError(resource_type=self.resource.name, resource_id=record_id)
            )
        return self.respond(
            request, None, f"{self.title} permanently deleted.", status.HTTP_204_NO_CONTENT
        )
