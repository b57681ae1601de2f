"""Response formatters.

Selected through ``Settings.response_formatter``: ``envelope`` (default),
``jsonapi``, or a ``module:Class`` import path to a custom formatter.
"""

from importlib import import_module

from autocrud.core.errors import ConfigurationError
from autocrud.presentation.formatters.base import ResponseFormatter
from autocrud.presentation.formatters.envelope import EnvelopeFormatter
from autocrud.presentation.formatters.jsonapi import JsonApiFormatter
from autocrud.presentation.formatters.serialization import serialize, serialize_record

FORMATTERS: dict[str, type[ResponseFormatter]] = {
    "envelope": EnvelopeFormatter,
    "jsonapi": JsonApiFormatter,
}


def resolve_formatter(name: str) -> ResponseFormatter:
    """Instantiate the formatter named by configuration.

    Raises:
        ConfigurationError: If the name is unknown or the import path fails.
    """
    if name in FORMATTERS:
        return FORMATTERS[name]()

    module_path, _, class_name = name.partition(":")
    if not class_name:
        raise ConfigurationError(f"Unknown response formatter '{name}'")
    try:
        formatter_class = getattr(import_module(module_path), class_name)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot import response formatter '{name}'") from e
    return formatter_class()


__all__ = [
    "EnvelopeFormatter",
    "JsonApiFormatter",
    "ResponseFormatter",
    "resolve_formatter",
    "serialize",
    "serialize_record",
]
