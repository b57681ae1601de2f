"""QuerySpec value object - parsed, allow-listed listing parameters."""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, kw_only=True)
class QuerySpec:
    """Listing parameters that survived allow-list checks.

    Attributes:
        filters: Column name mapped to accepted values (OR within a column,
            AND across columns).
        sorts: (column, "asc" | "desc") pairs applied in order.
        includes: Relation names to eager-load and serialize.
        fields: Attribute names to keep in the output (empty keeps all).
    """

    filters: dict[str, list[str]] = field(default_factory=dict)
    sorts: list[tuple[str, str]] = field(default_factory=list)
    includes: tuple[str, ...] = ()
    fields: tuple[str, ...] = ()
