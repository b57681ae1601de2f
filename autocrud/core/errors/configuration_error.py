"""Startup configuration errors.

Unlike DomainError these are raised: a controller that cannot be bound to a
model is a deployment mistake, and the application must refuse to start.
"""


class ConfigurationError(Exception):
    """Raised when a controller or setting cannot be resolved at startup."""
