"""Page value object - one slice of a paginated result set.

Mirrors length-aware pagination: the total row count is known, so the last
page and item positions can be derived.

Example:
    >>> page = Page(items=list(range(10)), total=37, page=1, per_page=10)
    >>> page.last_page, page.from_item, page.to_item
    (4, 1, 10)
"""

from dataclasses import dataclass
from math import ceil
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True, kw_only=True)
class Page(Generic[T]):
    """One page of records.

    Attributes:
        items: Records on this page.
        total: Total number of matching records across all pages.
        page: 1-based page number.
        per_page: Page size.
    """

    items: list[T]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        """Number of the last page (at least 1, even for an empty set)."""
        return max(1, ceil(self.total / self.per_page))

    @property
    def from_item(self) -> int | None:
        """1-based position of the first item on this page, None if empty."""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def to_item(self) -> int | None:
        """1-based position of the last item on this page, None if empty."""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + len(self.items)

    @property
    def has_more(self) -> bool:
        """Whether a following page exists."""
        return self.page < self.last_page
