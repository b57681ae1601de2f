"""Domain layer: resource definitions, value objects and ports."""
