"""RuleValidator - pipe-delimited rule sets evaluated with Pydantic.

A rule set maps field names to constraint descriptors, either
``"required|string|max:255"`` or ``["required", "string", "max:255"]``.
Each field is compiled once into an ``Annotated`` Pydantic type and checked
with a ``TypeAdapter``; failures are collected as ``field -> [messages]``.

Supported rules:
    required, nullable, string, integer, numeric, boolean, array, email,
    date, min:<n>, max:<n>, in:<a>,<b>,...

A list value on a field that is not declared ``array`` is validated element
by element, so the payload can fan out into several records later.

Reference:
    - autocrud/domain/protocols/validator_protocol.py
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Annotated, Any

from pydantic import AfterValidator, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from autocrud.core.errors import ConfigurationError, ValidationError
from autocrud.core.result import Failure, Result, Success

EMAIL_PATTERN = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

TYPE_RULES = {"string", "integer", "numeric", "boolean", "array", "date"}
FLAG_RULES = {"required", "nullable", "email"}
PARAM_RULES = {"min", "max", "in"}


def validate_email(v: str) -> str:
    """Validate email format.

    Raises:
        ValueError: If the address does not look like an email.
    """
    if not re.match(EMAIL_PATTERN, v):
        raise ValueError("must be a valid email address.")
    return v


def one_of(options: tuple[str, ...]) -> Callable[[Any], Any]:
    """Build a validator accepting only the listed values (compared as text)."""

    def check(v: Any) -> Any:
        if str(v) not in options:
            raise ValueError("has an invalid selection.")
        return v

    return check


@dataclass(frozen=True, slots=True)
class FieldRules:
    """Parsed rules for one field."""

    name: str
    required: bool
    nullable: bool
    kind: str | None
    params: dict[str, str]
    email: bool


def parse_rules(name: str, descriptor: str | list[str] | tuple[str, ...]) -> FieldRules:
    """Parse one field's descriptor into FieldRules.

    Raises:
        ConfigurationError: On an unknown rule or a malformed parameter.
    """
    parts = descriptor.split("|") if isinstance(descriptor, str) else list(descriptor)
    required = nullable = email = False
    kind: str | None = None
    params: dict[str, str] = {}

    for part in (p.strip() for p in parts):
        if not part:
            continue
        rule, _, argument = part.partition(":")
        if rule in TYPE_RULES:
            kind = rule
        elif rule == "required":
            required = True
        elif rule == "nullable":
            nullable = True
        elif rule == "email":
            email = True
        elif rule in PARAM_RULES:
            if not argument:
                raise ConfigurationError(f"Rule '{rule}' on '{name}' needs a parameter")
            params[rule] = argument
        else:
            raise ConfigurationError(f"Unknown validation rule '{rule}' on '{name}'")

    for bound in ("min", "max"):
        if bound in params:
            try:
                float(params[bound])
            except ValueError as e:
                raise ConfigurationError(
                    f"Rule '{bound}' on '{name}' must be numeric"
                ) from e

    return FieldRules(
        name=name,
        required=required,
        nullable=nullable,
        kind=kind,
        params=params,
        email=email,
    )


def _number(value: str) -> int | float:
    number = float(value)
    return int(number) if number.is_integer() else number


def build_type(rules: FieldRules) -> Any:
    """Compile FieldRules into an Annotated type for a TypeAdapter."""
    base: Any = {
        "string": str,
        "integer": int,
        "numeric": float,
        "boolean": bool,
        "array": list[Any],
        "date": date,
        None: Any,
    }[rules.kind]

    metadata: list[Any] = []
    lower = rules.params.get("min")
    upper = rules.params.get("max")
    if rules.kind in ("integer", "numeric"):
        if lower is not None:
            metadata.append(Field(ge=_number(lower)))
        if upper is not None:
            metadata.append(Field(le=_number(upper)))
    elif rules.kind in ("string", "array"):
        if lower is not None:
            metadata.append(Field(min_length=int(_number(lower))))
        if upper is not None:
            metadata.append(Field(max_length=int(_number(upper))))
    if rules.email:
        metadata.append(AfterValidator(validate_email))
    if "in" in rules.params:
        options = tuple(option.strip() for option in rules.params["in"].split(","))
        metadata.append(AfterValidator(one_of(options)))

    annotated = Annotated[base, *metadata] if metadata else base
    if rules.nullable and rules.kind is not None:
        return annotated | None
    return annotated


def _label(field: str) -> str:
    return field.replace("_", " ")


def _message(field: str, error: Mapping[str, Any]) -> str:
    """Turn one Pydantic error into a readable sentence about ``field``."""
    kind = error["type"]
    ctx = error.get("ctx") or {}
    reason = {
        "string_type": "must be a string.",
        "int_type": "must be an integer.",
        "int_parsing": "must be an integer.",
        "int_from_float": "must be an integer.",
        "float_type": "must be a number.",
        "float_parsing": "must be a number.",
        "bool_type": "must be true or false.",
        "bool_parsing": "must be true or false.",
        "list_type": "must be an array.",
        "date_type": "must be a valid date.",
        "date_parsing": "must be a valid date.",
        "date_from_datetime_parsing": "must be a valid date.",
        "date_from_datetime_inexact": "must be a valid date.",
        "string_too_short": f"must be at least {ctx.get('min_length')} characters.",
        "string_too_long": f"must not be greater than {ctx.get('max_length')} characters.",
        "too_short": f"must have at least {ctx.get('min_length')} items.",
        "too_long": f"must not have more than {ctx.get('max_length')} items.",
        "greater_than_equal": f"must be at least {ctx.get('ge')}.",
        "less_than_equal": f"must not be greater than {ctx.get('le')}.",
        "value_error": str(ctx.get("error", "is invalid.")),
    }.get(kind, "is invalid.")
    return f"The {_label(field)} field {reason}"


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return isinstance(value, list | tuple | dict) and len(value) == 0


class RuleValidator:
    """Validation engine bound to one rule set.

    Implements ValidatorProtocol structurally.

    Example:
        >>> validator = RuleValidator({"title": "required|string|max:255"})
        >>> validator.validate({"title": "Hello", "extra": 1})
        Success(value={'title': 'Hello'})
    """

    def __init__(self, rules: Mapping[str, Any] | None = None) -> None:
        """Compile the rule set.

        Raises:
            ConfigurationError: If a descriptor names an unknown rule.
        """
        self._fields: dict[str, FieldRules] = {}
        self._scalar: dict[str, TypeAdapter[Any]] = {}
        for name, descriptor in (rules or {}).items():
            parsed = parse_rules(name, descriptor)
            self._fields[name] = parsed
            self._scalar[name] = TypeAdapter(build_type(parsed))

    @property
    def is_empty(self) -> bool:
        """True when no field has rules."""
        return not self._fields

    @property
    def fields(self) -> tuple[str, ...]:
        """Field names named by the rule set."""
        return tuple(self._fields)

    def validate(
        self, data: Mapping[str, Any]
    ) -> Result[dict[str, Any], ValidationError]:
        """Validate a payload.

        Args:
            data: Raw input (already stripped of framework-reserved keys).

        Returns:
            Success with the validated subset (every field when the rule set is
            empty), or Failure with field -> messages.
        """
        if self.is_empty:
            return Success(value=dict(data))

        validated: dict[str, Any] = {}
        errors: dict[str, list[str]] = {}

        for name, rules in self._fields.items():
            present = name in data
            value = data.get(name)

            if _is_blank(value):
                # Empty input counts as absent; nullable fields keep an explicit null
                if rules.required:
                    errors[name] = [f"The {_label(name)} field is required."]
                elif present and rules.nullable:
                    validated[name] = None
                continue

            adapter = self._scalar[name]
            try:
                if isinstance(value, list) and rules.kind != "array":
                    validated[name] = [adapter.validate_python(item) for item in value]
                else:
                    validated[name] = adapter.validate_python(value)
            except PydanticValidationError as e:
                messages = [_message(name, err) for err in e.errors()]
                errors[name] = list(dict.fromkeys(messages))

        if errors:
            return Failure(error=ValidationError(errors=errors))
        return Success(value=validated)
