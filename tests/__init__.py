"""Test suite for AutoCRUD.

Test structure follows the test pyramid:
- unit/: Unit tests - naming, rules, query parsing, formatters, routing
- integration/: Integration tests - record store and service against SQLite
- api/: API endpoint tests - HTTP endpoints end-to-end through create_app()

The sample host application lives in fixtures/app.
"""
