"""Input validation infrastructure."""

from autocrud.infrastructure.validation.rule_validator import RuleValidator, parse_rules

__all__ = ["RuleValidator", "parse_rules"]
