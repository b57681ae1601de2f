"""Unit tests for the structlog console adapter.

Tests cover:
- Structured key/value context
- Exception details on error()
- Bound context
- Level filtering
"""

from structlog.testing import capture_logs

from autocrud.infrastructure.logging import ConsoleAdapter


class TestConsoleAdapter:
    """ConsoleAdapter behavior."""

    def test_info_with_context(self):
        adapter = ConsoleAdapter(use_json=True)
        with capture_logs() as logs:
            adapter.info("crud_fan_out_created", resource="posts", count=2)

        assert logs == [
            {
                "event": "crud_fan_out_created",
                "resource": "posts",
                "count": 2,
                "log_level": "info",
            }
        ]

    def test_error_adds_exception_details(self):
        adapter = ConsoleAdapter(use_json=True)
        with capture_logs() as logs:
            adapter.error("crud_persistence_failed", error=ValueError("boom"))

        assert logs[0]["error_type"] == "ValueError"
        assert logs[0]["error_message"] == "boom"
        assert "error" not in logs[0]

    def test_bind_keeps_context(self):
        adapter = ConsoleAdapter(use_json=True)
        with capture_logs() as logs:
            adapter.bind(resource="posts").warning("crud_validation_failed")

        assert logs[0]["resource"] == "posts"
        assert logs[0]["log_level"] == "warning"

    def test_level_filtering(self):
        adapter = ConsoleAdapter(use_json=True, level="WARNING")
        with capture_logs() as logs:
            adapter.info("ignored")
            adapter.warning("kept")

        assert [entry["event"] for entry in logs] == ["kept"]
