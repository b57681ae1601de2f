"""Application factory.

create_app() wires configuration, logging, the database, controllers and
routes into a FastAPI application. The route table is built here, once,
before the app object is returned to the ASGI server.

Usage:
    from autocrud import create_app
    from app.controllers import PostController

    app = create_app(controllers=[PostController])
"""

from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from autocrud.core.config import Settings, get_settings
from autocrud.core.container import build_database, build_logger
from autocrud.infrastructure.persistence.database import Database
from autocrud.presentation.controllers.base import CrudController
from autocrud.presentation.errors import register_exception_handlers
from autocrud.presentation.formatters import resolve_formatter
from autocrud.presentation.middleware import MethodOverrideMiddleware, TraceMiddleware
from autocrud.presentation.routing import (
    build_route_table,
    discover_controllers,
    register_routes,
)

TEMPLATES_DIR = Path(__file__).parent / "presentation" / "web" / "templates"


def create_app(
    settings: Settings | None = None,
    controllers: Sequence[type[CrudController]] = (),
    database: Database | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
        controllers: Controller classes to register explicitly. Controllers
            found under ``settings.controller_search_paths`` are added after them.
        database: Database manager; built from ``settings.database_url`` when omitted.

    Returns:
        Configured FastAPI application with every CRUD route registered.

    Raises:
        ConfigurationError: If a controller cannot be resolved, two
            controllers share a route base, or a configured import path fails.
    """
    settings = settings or get_settings()
    logger = build_logger(settings)
    database = database or build_database(settings)
    formatter = resolve_formatter(settings.response_formatter)
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR)) if settings.web.enabled else None

    classes = list(
        dict.fromkeys(
            [*controllers, *discover_controllers(settings.controller_search_paths)]
        )
    )
    instances = [
        cls(settings=settings, formatter=formatter, logger=logger, templates=templates)
        for cls in classes
    ]
    logger.info(
        "crud_controllers_resolved",
        controllers=[
            f"{type(c).__name__}->{c.resource.model_name}" for c in instances
        ],
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Dispose of the engine on shutdown."""
        yield
        await database.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.formatter = formatter
    app.state.logger = logger

    if settings.web.enabled:
        app.add_middleware(SessionMiddleware, secret_key=settings.session_secret_key)
        app.add_middleware(MethodOverrideMiddleware)

    # Wire trace middleware (request correlation)
    app.add_middleware(TraceMiddleware)

    register_exception_handlers(app)

    route_table = build_route_table(instances, settings)
    register_routes(app, route_table, settings, logger)
    app.state.route_table = route_table

    return app
