"""HTML views for the web route group."""
