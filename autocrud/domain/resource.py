"""ResourceDefinition - the resolved description of one CRUD resource.

Computed once per controller at construction (startup) and never mutated.
Requests only read it, so no per-request class probing happens.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from autocrud.core.enums import IndexMode


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceDefinition:
    """Everything a controller needs to serve one resource.

    Attributes:
        name: Resource name used in messages (e.g. "blogPost").
        route_base: Plural kebab-case URL segment (e.g. "blog-posts").
        label: Human-readable singular label (e.g. "Blog Post").
        model: SQLAlchemy mapped class.
        transformer: Optional Pydantic model used to serialize records.
        rules: Validation rule set (empty means accept anything).
        with_: Relation names always eager-loaded.
        order_by: Column -> direction mapping, a column ordered descending,
            or None for primary key descending.
        web_fields: Field list shown in HTML views (empty means fillable).
        supports_soft_delete: Capability flag for trashed/restore/force.
        index_mode: Index behavior for this resource.
    """

    name: str
    route_base: str
    label: str
    model: type[Any]
    transformer: type[Any] | None = None
    rules: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    with_: tuple[str, ...] = ()
    order_by: Mapping[str, str] | str | None = None
    web_fields: tuple[str, ...] = ()
    supports_soft_delete: bool = False
    index_mode: IndexMode = IndexMode.NEGOTIATED

    @property
    def model_name(self) -> str:
        """Class name of the underlying model."""
        return self.model.__name__
