"""Text and markup rendering of the panel."""

import html
from collections.abc import Sequence
from dataclasses import dataclass

from task_trigger.formatting import format_timestamp
from task_trigger.models.result import (
    EmptyResult,
    ErrorResult,
    ExecutionResult,
    InvalidTaskId,
    StatusItem,
)

CONFIG_WARNING = "⚠️ Please set the Primary Task ID in the object properties."
REPORT_HEADER = "📊 Tasks status:"

SUPPORT = {"snapshot": False, "export": False, "exportData": False}


@dataclass(kw_only=True)
class PanelView:
    """Mounted panel state: two buttons, a log region and a status region.

    The start flow writes only ``log`` and the check flow writes only
    ``status``.
    """

    start_label: str
    check_label: str
    log: str = ""
    status: str = ""
    start_enabled: bool = True
    check_enabled: bool = True

    def set_log(self, text: str | None) -> None:
        """Replace the start flow region."""
        self.log = text or ""

    def set_status(self, text: str | None) -> None:
        """Replace the check flow region."""
        self.status = text or ""

    def disable(self) -> None:
        """Disable both buttons."""
        self.start_enabled = False
        self.check_enabled = False

    def to_html(self, panel_id: str) -> str:
        """Render the panel markup the host mounts into its element."""
        dom_id = f"dtt_{html.escape(panel_id)}"
        start_disabled = "" if self.start_enabled else " disabled"
        check_disabled = "" if self.check_enabled else " disabled"
        return f"""
<div style="font:14px/1.4 system-ui,Segoe UI,Arial;min-height:110px">
  <div style="display:flex;gap:8px;flex-wrap:wrap;margin-bottom:8px">
    <button id="{dom_id}_start" style="padding:8px 12px;border:0;border-radius:8px;background:#0a7c2f;color:#fff;cursor:pointer"{start_disabled}>{html.escape(self.start_label)}</button>
    <button id="{dom_id}_check" style="padding:8px 12px;border:1px solid #ccc;border-radius:8px;background:#fff;cursor:pointer"{check_disabled}>{html.escape(self.check_label)}</button>
  </div>
  <pre id="{dom_id}_log" style="margin:0 0 6px 0;white-space:pre-wrap">{html.escape(self.log)}</pre>
  <pre id="{dom_id}_status" style="margin:0;white-space:pre-wrap">{html.escape(self.status)}</pre>
</div>
""".strip()


def render_item(item: StatusItem) -> str:
    """Render one task's block of the status report."""
    if isinstance(item, InvalidTaskId):
        return (
            f"• {item.task_id}\n"
            "  ⚠️ Invalid Task ID. Copy it from QMC → Tasks → Copy ID."
        )
    if isinstance(item, ErrorResult):
        return (
            f"• {item.task_name}\n"
            "  ⚠️ Read error:\n"
            f"  HTTP {item.status} {item.reason}\n{item.body}"
        )
    if isinstance(item, EmptyResult):
        return f"• {item.task_name}\n  ℹ️ No previous execution found."

    return "\n".join(_execution_lines(item))


def _execution_lines(result: ExecutionResult) -> list[str]:
    lines = [
        f"• {result.task_name}",
        f"  Status: {result.status_text}",
        f"  Started: {format_timestamp(result.start_time)}",
    ]
    if not result.is_running:
        lines.append(f"  Completed: {format_timestamp(result.stop_time)}")
        lines.append(f"  Duration: {result.duration}")
    return lines


def render_report(items: Sequence[StatusItem]) -> str:
    """Concatenate the per-task blocks in order under one header."""
    return f"{REPORT_HEADER}\n" + "\n\n".join(render_item(item) for item in items)


def render_network_error(error: BaseException) -> str:
    """Render a transport failure for either region."""
    return f"❌ Network error: {error}"
