"""Convention-based resolution of models, transformers and route names.

Runs once per controller class while the app is being built. Explicit
declarations on the controller (``model = Post``, ``transformer = ...``)
always win; the probes below only fill gaps.

Model probe order for ``app.blog.controllers.post_controller.PostController``:
    1. ``app.blog``          attribute ``Post``
    2. ``app.blog.models``   attribute ``Post``
    3. ``<app_package>.models``
    4. ``<app_package>``

Transformer probe order for model ``app.blog.models.Post``:
    1. ``app.blog.resources``      attribute ``PostResource``
    2. ``<app_package>.resources``
"""

import re
import sys
from importlib import import_module
from types import ModuleType
from typing import Any

from autocrud.core.errors import ConfigurationError

CONTROLLER_SUFFIX = "Controller"

_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
}
_IRREGULAR_SINGULARS = {plural: singular for singular, plural in _IRREGULAR_PLURALS.items()}
_UNCOUNTABLE = frozenset({"data", "media", "news", "series", "species", "information"})


def base_name(controller: type) -> str:
    """Controller class name without the ``Controller`` suffix."""
    name = controller.__name__
    if name.endswith(CONTROLLER_SUFFIX) and name != CONTROLLER_SUFFIX:
        return name[: -len(CONTROLLER_SUFFIX)]
    return name


def kebab(name: str) -> str:
    """``BlogPost`` -> ``blog-post``; ``HTTPLog`` -> ``http-log``."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name)
    return name.replace("_", "-").lower()


def _match_case(source: str, word: str) -> str:
    return word.capitalize() if source[:1].isupper() else word


def pluralize(word: str) -> str:
    """English plural of a single word."""
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        return _match_case(word, _IRREGULAR_PLURALS[lower])
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """English singular of a single word (inverse of pluralize)."""
    lower = word.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_SINGULARS:
        return _match_case(word, _IRREGULAR_SINGULARS[lower])
    if lower.endswith("ies") and len(lower) > 3:
        return word[:-3] + "y"
    if lower.endswith(("sses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]
    return word


def route_base(controller: type) -> str:
    """Plural kebab-case URL segment: ``BlogPostController`` -> ``blog-posts``."""
    words = kebab(base_name(controller)).split("-")
    words[-1] = pluralize(words[-1])
    return "-".join(words)


def resource_label(base: str) -> str:
    """Headline singular label: ``blog-posts`` -> ``Blog Post``."""
    words = base.split("-")
    words[-1] = singularize(words[-1])
    return " ".join(word.capitalize() for word in words)


def resource_name(model: type) -> str:
    """camelCase model name: ``BlogPost`` -> ``blogPost``."""
    name = model.__name__
    return name[:1].lower() + name[1:]


def _import_optional(path: str) -> ModuleType | None:
    """Import ``path`` or return None when that module (or a parent) is missing.

    Import errors raised from inside an existing module propagate.
    """
    try:
        return import_module(path)
    except ModuleNotFoundError as e:
        if e.name and (path == e.name or path.startswith(e.name + ".")):
            return None
        raise


def _class_from(path: str, name: str) -> type | None:
    module = _import_optional(path)
    if module is None:
        return None
    candidate = getattr(module, name, None)
    return candidate if isinstance(candidate, type) else None


def _package_before(module_path: str, segment: str) -> str | None:
    """``app.blog.controllers.x`` with segment ``controllers`` -> ``app.blog``."""
    parts = module_path.split(".")
    if segment not in parts:
        return None
    index = len(parts) - 1 - parts[::-1].index(segment)
    return ".".join(parts[:index]) or None


def model_candidates(controller: type, app_package: str) -> list[str]:
    """Module paths probed for the controller's model, in order."""
    candidates: list[str] = []
    package = _package_before(controller.__module__, "controllers")
    if package:
        candidates += [package, f"{package}.models"]
    candidates += [f"{app_package}.models", app_package]
    return list(dict.fromkeys(candidates))


def resolve_model(controller: type, app_package: str = "app") -> type[Any]:
    """Return the model class served by ``controller``.

    Args:
        controller: CrudController subclass.
        app_package: Root package of the host application.

    Returns:
        The explicit ``controller.model`` or the first class found by probing.

    Raises:
        ConfigurationError: If no model can be found.
    """
    explicit = getattr(controller, "model", None)
    if explicit is not None:
        return explicit

    name = base_name(controller)
    candidates = model_candidates(controller, app_package)
    for path in candidates:
        found = _class_from(path, name)
        if found is not None:
            return found

    raise ConfigurationError(
        f"Model {name} not found for {controller.__qualname__} "
        f"(looked in {', '.join(candidates)}). "
        "Ensure the model exists or declare `model = ...` on the controller."
    )


def _resources_package(model: type) -> str:
    module_path = model.__module__
    package = _package_before(module_path, "models")
    if package:
        return package
    module = sys.modules.get(module_path)
    if module is not None and hasattr(module, "__path__"):
        return module_path
    return module_path.rpartition(".")[0] or module_path


def resolve_transformer(
    controller: type, model: type, app_package: str = "app"
) -> type[Any] | None:
    """Return the Pydantic transformer for ``model``, or None when there is none.

    Args:
        controller: CrudController subclass (checked for an explicit transformer).
        model: Resolved model class.
        app_package: Root package of the host application.
    """
    explicit = getattr(controller, "transformer", None)
    if explicit is not None:
        return explicit

    name = f"{model.__name__}Resource"
    for path in dict.fromkeys(
        [f"{_resources_package(model)}.resources", f"{app_package}.resources"]
    ):
        found = _class_from(path, name)
        if found is not None:
            return found
    return None
