"""Route registrar for CRUD controllers.

Builds the immutable route table for a set of controllers and turns it into
FastAPI routes at application startup. Runs once inside create_app(), before
the app serves traffic.

Functions:
    build_route_table: RouteEntry tuple for every enabled group and controller
    register_routes: Add the route table to a FastAPI app
    resolve_dependencies: ``module:callable`` strings to FastAPI dependencies

Usage:
    table = build_route_table(controllers, settings)
    register_routes(app, table, settings)
"""

from collections.abc import Awaitable, Callable, Iterable, Sequence
from importlib import import_module
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import Response

from autocrud.core.config import Settings
from autocrud.core.container import get_db_session
from autocrud.core.enums import RouteGroup
from autocrud.core.errors import ConfigurationError
from autocrud.domain.protocols import LoggerProtocol
from autocrud.presentation.controllers.base import CrudController
from autocrud.presentation.controllers.files import FileCrudController
from autocrud.presentation.routing.metadata import (
    API_ACTIONS,
    FILE_ACTIONS,
    WEB_ACTIONS,
    ActionTemplate,
    RouteEntry,
)


def _join(*segments: str) -> str:
    parts = [segment.strip("/") for segment in segments if segment.strip("/")]
    return "/" + "/".join(parts)


def _templates_for(controller: CrudController, group: RouteGroup) -> list[ActionTemplate]:
    templates = list(API_ACTIONS if group == RouteGroup.API else WEB_ACTIONS)
    if group == RouteGroup.API and isinstance(controller, FileCrudController):
        templates.extend(FILE_ACTIONS)
    # Static segments first so they are not captured by {id}
    return sorted(templates, key=lambda template: template.has_id)


def build_route_table(
    controllers: Sequence[CrudController], settings: Settings
) -> tuple[RouteEntry, ...]:
    """Build the route table.

    Args:
        controllers: Constructed controller instances.
        settings: Settings carrying group switches, prefixes and name prefixes.

    Returns:
        Immutable tuple of RouteEntry, API group first.

    Raises:
        ConfigurationError: If two controllers share a route base.

    Example:
        >>> table = build_route_table([PostController(...)], settings)
        >>> [entry.name for entry in table][:2]
        ['posts.index', 'posts.store']
    """
    seen: dict[str, str] = {}
    for controller in controllers:
        base = controller.resource.route_base
        owner = type(controller).__qualname__
        if base in seen:
            raise ConfigurationError(
                f"Controllers {seen[base]} and {owner} both map to '/{base}'"
            )
        seen[base] = owner

    groups = [
        (RouteGroup.API, settings.api.enabled, settings.api.url_prefix, settings.api.route_name_prefix),
        (RouteGroup.WEB, settings.web.enabled, settings.web.url_prefix, settings.web.route_name_prefix),
    ]

    entries: list[RouteEntry] = []
    for group, enabled, url_prefix, name_prefix in groups:
        if not enabled:
            continue
        for controller in controllers:
            base = controller.resource.route_base
            for template in _templates_for(controller, group):
                entries.append(
                    RouteEntry(
                        method=template.method,
                        path=_join(url_prefix, base) + template.suffix,
                        controller=controller,
                        action=template.action,
                        handler=template.handler,
                        name=f"{name_prefix}{base}.{template.action}",
                        group=group,
                    )
                )
    return tuple(entries)


def resolve_dependencies(paths: Iterable[str]) -> list[Any]:
    """Turn ``module:callable`` strings into FastAPI dependencies.

    Raises:
        ConfigurationError: If a path is malformed or cannot be imported.
    """
    dependencies = []
    for path in paths:
        module_path, _, attribute = path.partition(":")
        if not module_path or not attribute:
            raise ConfigurationError(f"Middleware '{path}' must look like 'module:callable'")
        try:
            dependency = getattr(import_module(module_path), attribute)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(f"Cannot import middleware '{path}'") from e
        dependencies.append(Depends(dependency))
    return dependencies


def _make_endpoint(entry: RouteEntry) -> Callable[..., Awaitable[Response]]:
    """Bind a controller action into a FastAPI endpoint function."""
    handler = getattr(entry.controller, entry.handler)
    group = entry.group

    if entry.has_id:

        async def member_endpoint(
            request: Request,
            id: str,
            session: AsyncSession = Depends(get_db_session),
        ) -> Response:
            request.state.route_group = group
            return await handler(request, session, id)

        return member_endpoint

    async def collection_endpoint(
        request: Request,
        session: AsyncSession = Depends(get_db_session),
    ) -> Response:
        request.state.route_group = group
        return await handler(request, session)

    return collection_endpoint


def register_routes(
    app: FastAPI,
    table: Sequence[RouteEntry],
    settings: Settings,
    logger: LoggerProtocol | None = None,
) -> None:
    """Register the route table on ``app``.

    Each group gets its own APIRouter carrying the group's dependencies
    (``api_middleware`` / ``web_middleware``). Web routes are excluded from
    the OpenAPI schema.
    """
    routers = {
        RouteGroup.API: APIRouter(dependencies=resolve_dependencies(settings.api.middleware)),
        RouteGroup.WEB: APIRouter(
            dependencies=resolve_dependencies(settings.web.middleware),
            include_in_schema=False,
        ),
    }

    for entry in table:
        routers[entry.group].add_api_route(
            path=entry.path,
            endpoint=_make_endpoint(entry),
            methods=[entry.method.value],
            name=entry.name,
            tags=[entry.controller.resource.route_base],
            operation_id=entry.name if entry.group == RouteGroup.API else None,
        )

    for group, router in routers.items():
        if router.routes:
            app.include_router(router)
            if logger is not None:
                logger.info(
                    "crud_routes_registered",
                    group=group.value,
                    count=len(router.routes),
                )
