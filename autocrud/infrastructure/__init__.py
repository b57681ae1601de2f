"""Infrastructure adapters: logging, persistence, validation."""
