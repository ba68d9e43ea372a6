"""Panel paint and the two button-triggered flows."""

import json
import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

from task_trigger.client import NetworkError, QrsClient
from task_trigger.models.config import ConfigurationError, StatusEndpoint, TriggerConfig
from task_trigger.models.result import (
    EmptyResult,
    ExecutionResult,
    InvalidTaskId,
    RawResponse,
    StatusItem,
)
from task_trigger.normalizer import normalize
from task_trigger.view import (
    CONFIG_WARNING,
    PanelView,
    render_network_error,
    render_report,
)

log = logging.getLogger(__name__)

TASK_ID_PATTERN = re.compile(r"^[0-9a-fA-F-]{36}$")

StartOutcome: TypeAlias = Literal["succeeded", "failed", "network_error"]


def is_valid_task_id(task_id: str) -> bool:
    """Whether the id is shaped like a repository GUID."""
    return TASK_ID_PATTERN.match(task_id) is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_succeeded(response: RawResponse, task_id: str) -> bool:
    """Whether a start response means the task was started.

    A 2xx status counts as success; so does a body echoing the started id
    as ``{"value": "<task id>"}``, whatever the status.
    """
    if response.ok:
        return True
    try:
        body = json.loads(response.body) if response.body else None
    except (ValueError, RecursionError):
        return False
    if not isinstance(body, dict):
        return False
    value = body.get("value")
    return isinstance(value, str) and value.lower() == task_id.lower()


def check_succeeded(items: Sequence[StatusItem] | None) -> bool:
    """Whether a check flow read every task without error.

    A network abort, a read error or an invalid task id all count as
    failures; a task that never ran does not.
    """
    if items is None:
        return False
    return all(isinstance(item, ExecutionResult | EmptyResult) for item in items)


@dataclass(frozen=True, kw_only=True)
class ActionController:
    """Runs the start and check flows of one painted panel.

    The flows share no state beyond the view and each writes its own region
    when it finishes. Overlapping runs are not de-duplicated, so the run that
    finishes last wins the region.
    """

    config: TriggerConfig
    client: QrsClient
    view: PanelView
    status_endpoint: StatusEndpoint = "reloadtask"
    clock: Callable[[], datetime] = field(default=_utcnow, repr=False)

    async def start_primary_task(self) -> StartOutcome:
        """Start the primary task and report the outcome in the log region."""
        task_id = self.config.task_id
        self.view.set_log("Starting task 1…")
        log.info("Starting task %s", task_id)

        try:
            response = await self.client.start_task(task_id)
        except NetworkError as e:
            log.error("Network error starting task %s: %s", task_id, e)
            self.view.set_log(render_network_error(e))
            return "network_error"

        if start_succeeded(response, task_id):
            log.info("Task %s started", task_id)
            self.view.set_log("✅ Success: Task 1 has started.")
            return "succeeded"

        log.warning(
            "Failed to start task %s: %s %s", task_id, response.status, response.reason
        )
        self.view.set_log(
            "⚠️ Failed to start Task 1.\n"
            f"HTTP {response.status} {response.reason}\n{response.body}"
        )
        return "failed"

    async def check_status(self) -> str:
        """Read and render the last execution of each configured task.

        Tasks are read one after another. A network error aborts the rest
        and replaces the whole report.
        """
        await self.run_check()
        return self.view.status

    async def run_check(self) -> Sequence[StatusItem] | None:
        """Run the check flow and return the per-task items.

        Returns:
            The items in task order, or None if a network error aborted
            the flow

        """
        self.view.set_status("Fetching status…")

        try:
            items = [await self.fetch_status(task_id) for task_id in self.config.task_ids]
        except NetworkError as e:
            log.error("Network error checking task status: %s", e)
            self.view.set_status(render_network_error(e))
            return None

        self.view.set_status(render_report(items))
        return items

    async def fetch_status(self, task_id: str) -> StatusItem:
        """Read one task, skipping the request for malformed ids."""
        if not is_valid_task_id(task_id):
            log.warning("Skipping invalid task id %r", task_id)
            return InvalidTaskId(task_id=task_id)

        response = await self.client.read_task(task_id, self.status_endpoint)
        result = normalize(response, task_id, now=self.clock())
        log.info("Task %s: %s", task_id, type(result).__name__)
        return result


@dataclass(frozen=True, kw_only=True)
class Panel:
    """Result of a paint: the view and, when configured, its controller."""

    config: TriggerConfig
    view: PanelView
    controller: ActionController | None = None


def paint(
    layout: Mapping[str, Any],
    client: QrsClient,
    *,
    status_endpoint: StatusEndpoint = "reloadtask",
    clock: Callable[[], datetime] = _utcnow,
) -> Panel:
    """Build the panel for a host layout.

    Without a primary task id both buttons are disabled, the log shows a
    configuration warning and no controller is mounted.
    """
    config = TriggerConfig.from_layout(layout)
    view = PanelView(start_label=config.start_label, check_label=config.check_label)

    try:
        config.require_primary_task_id()
    except ConfigurationError as e:
        log.warning("Panel not configured: %s", e)
        view.disable()
        view.set_log(CONFIG_WARNING)
        return Panel(config=config, view=view)

    controller = ActionController(
        config=config,
        client=client.with_prefix(config.proxy_prefix),
        view=view,
        status_endpoint=status_endpoint,
        clock=clock,
    )
    return Panel(config=config, view=view, controller=controller)
