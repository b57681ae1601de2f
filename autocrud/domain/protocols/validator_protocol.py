"""ValidatorProtocol - validation engine port.

A validator receives the raw payload and either returns the validated data
(only the fields named in the rule set) or a field -> messages mapping.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from autocrud.core.errors import ValidationError
from autocrud.core.result import Result


class ValidatorProtocol(Protocol):
    """Validation engine bound to one rule set."""

    @property
    def is_empty(self) -> bool:
        """True when the rule set has no rules (validation is a no-op)."""
        ...

    def validate(
        self, data: Mapping[str, Any]
    ) -> Result[dict[str, Any], ValidationError]:
        """Validate a payload against the rule set."""
        ...
