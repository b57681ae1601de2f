"""Domain value objects."""

from autocrud.domain.value_objects.page import Page
from autocrud.domain.value_objects.query_spec import QuerySpec

__all__ = ["Page", "QuerySpec"]
