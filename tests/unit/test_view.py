"""Tests for panel rendering."""

from task_trigger.models.result import InvalidTaskId
from task_trigger.testing.factories import (
    EmptyResultFactory,
    ErrorResultFactory,
    ExecutionResultFactory,
)
from task_trigger.view import (
    CONFIG_WARNING,
    REPORT_HEADER,
    SUPPORT,
    PanelView,
    render_item,
    render_network_error,
    render_report,
)


class TestRenderItem:
    """Tests for render_item."""

    def test_finished_execution(self) -> None:
        """Shows status, times and duration of a finished execution."""
        result = ExecutionResultFactory.build(task_name="Reload Sales")

        assert render_item(result) == (
            "• Reload Sales\n"
            "  Status: Succeeded\n"
            "  Started: 01/01/2099, 12:00:00\n"
            "  Completed: 01/01/2099, 12:05:30\n"
            "  Duration: 0h 5m 30s"
        )

    def test_running_execution_hides_completion(self) -> None:
        """Leaves out completion time and duration while running."""
        result = ExecutionResultFactory.build(
            task_name="Reload Sales",
            status_code=2,
            status_text="Started/Running",
            stop_time=None,
            is_running=True,
            duration="0h 2m 0s",
        )

        rendered = render_item(result)

        assert rendered == (
            "• Reload Sales\n"
            "  Status: Started/Running\n"
            "  Started: 01/01/2099, 12:00:00"
        )
        assert "Completed" not in rendered
        assert "Duration" not in rendered

    def test_missing_times_render_unknown(self) -> None:
        """Absent timestamps render as unknown."""
        result = ExecutionResultFactory.build(
            task_name="t", start_time=None, stop_time=None, duration="unknown"
        )

        rendered = render_item(result)

        assert "  Started: unknown" in rendered
        assert "  Completed: unknown" in rendered
        assert "  Duration: unknown" in rendered

    def test_empty_result(self) -> None:
        """Reports a task that never ran."""
        result = EmptyResultFactory.build(task_name="Nightly")

        assert render_item(result) == "• Nightly\n  ℹ️ No previous execution found."

    def test_error_result(self) -> None:
        """Shows the HTTP status line and raw body."""
        result = ErrorResultFactory.build(task_name="abc", body="Task not found")

        assert render_item(result) == (
            "• abc\n  ⚠️ Read error:\n  HTTP 404 Not Found\nTask not found"
        )

    def test_invalid_task_id(self) -> None:
        """Explains where to copy a valid id from."""
        rendered = render_item(InvalidTaskId(task_id="not-a-guid"))

        assert rendered.startswith("• not-a-guid\n")
        assert "Invalid Task ID" in rendered


def test_render_report_joins_in_order() -> None:
    """Concatenates blocks in input order under the header."""
    first = EmptyResultFactory.build(task_name="first")
    second = InvalidTaskId(task_id="second")

    report = render_report([first, second])

    assert report.startswith(f"{REPORT_HEADER}\n• first\n")
    assert report.index("first") < report.index("second")
    assert "\n\n• second" in report


def test_render_network_error() -> None:
    """Prefixes the error message."""
    assert (
        render_network_error(ConnectionError("refused")) == "❌ Network error: refused"
    )


class TestPanelView:
    """Tests for PanelView."""

    def test_regions_are_independent(self) -> None:
        """Log and status regions are written separately."""
        view = PanelView(start_label="Start", check_label="Check")

        view.set_log("started")
        view.set_status("checked")
        view.set_log(None)

        assert view.log == ""
        assert view.status == "checked"

    def test_html_escapes_text(self) -> None:
        """Escapes labels and region text."""
        view = PanelView(start_label="<b>Go</b>", check_label="Check & see")
        view.set_status("• <script>")

        markup = view.to_html("obj1")

        assert 'id="dtt_obj1_start"' in markup
        assert "&lt;b&gt;Go&lt;/b&gt;" in markup
        assert "Check &amp; see" in markup
        assert "• &lt;script&gt;" in markup
        assert "<script>" not in markup
        assert "disabled" not in markup

    def test_html_disabled_buttons(self) -> None:
        """Disabled panels render disabled buttons and the warning."""
        view = PanelView(start_label="Start", check_label="Check")
        view.disable()
        view.set_log(CONFIG_WARNING)

        markup = view.to_html("obj1")

        assert markup.count(" disabled>") == 2
        assert "Please set the Primary Task ID" in markup


def test_support_flags() -> None:
    """Declares no snapshot or export support to the host."""
    assert SUPPORT == {"snapshot": False, "export": False, "exportData": False}
