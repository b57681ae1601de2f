"""Controller discovery.

Walks the packages named in ``controller_search_paths`` with pkgutil and
collects every concrete CrudController subclass defined there. Modules are
imported, never globbed from the filesystem.
"""

import inspect
import pkgutil
from collections.abc import Iterable
from importlib import import_module
from types import ModuleType

from autocrud.core.errors import ConfigurationError
from autocrud.presentation.controllers.base import CrudController
from autocrud.presentation.controllers.files import FileCrudController

BASE_CONTROLLERS = (CrudController, FileCrudController)


def _modules(package_path: str) -> list[ModuleType]:
    try:
        root = import_module(package_path)
    except ModuleNotFoundError as e:
        raise ConfigurationError(f"Controller search path '{package_path}' not found") from e

    modules = [root]
    if hasattr(root, "__path__"):
        for info in pkgutil.walk_packages(root.__path__, prefix=f"{root.__name__}."):
            modules.append(import_module(info.name))
    return modules


def controllers_in(module: ModuleType) -> list[type[CrudController]]:
    """Concrete controllers defined in ``module`` (imports are ignored).

    A class sets ``__abstract__ = True`` in its own body to opt out.
    """
    found = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if obj.__module__ != module.__name__:
            continue
        if not issubclass(obj, CrudController) or obj in BASE_CONTROLLERS:
            continue
        if obj.__dict__.get("__abstract__", False):
            continue
        found.append(obj)
    return found


def discover_controllers(search_paths: Iterable[str]) -> list[type[CrudController]]:
    """Collect controller classes from the given packages, in import order.

    Raises:
        ConfigurationError: If a search path cannot be imported.
    """
    discovered: dict[type[CrudController], None] = {}
    for package_path in search_paths:
        for module in _modules(package_path):
            for controller in controllers_in(module):
                discovered.setdefault(controller, None)
    return list(discovered)
