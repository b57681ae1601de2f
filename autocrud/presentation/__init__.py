"""Presentation layer: controllers, routing, formatters, middleware and views."""
