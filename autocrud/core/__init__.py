"""Core layer: configuration, result types, errors and the composition root."""
