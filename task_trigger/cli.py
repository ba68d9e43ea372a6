"""CLI entry point that hosts the panel outside a dashboard."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from typing import Literal, TypeAlias

from task_trigger.client import QrsClient
from task_trigger.controller import Panel, check_succeeded, paint
from task_trigger.models.config import ServerConfig

Action: TypeAlias = Literal["start", "check", "render"]

ACTIONS: Sequence[Action] = ("start", "check", "render")


def parse_cookies(cookies: Sequence[str]) -> dict[str, str]:
    """Parse ``NAME=VALUE`` cookie arguments."""
    parsed: dict[str, str] = {}
    for cookie in cookies:
        name, sep, value = cookie.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Invalid cookie '{cookie}', expected NAME=VALUE")
        parsed[name.strip()] = value
    return parsed


async def run_action(
    panel: Panel, action: Action, panel_id: str = "panel"
) -> tuple[str, bool]:
    """Run one action on a painted panel and return its output and success."""
    if action == "render":
        return panel.view.to_html(panel_id), True

    if panel.controller is None:
        return panel.view.log, False

    if action == "start":
        outcome = await panel.controller.start_primary_task()
        return panel.view.log, outcome == "succeeded"

    items = await panel.controller.run_check()
    return panel.view.status, check_succeeded(items)


async def run(
    action: Action,
    layout_json: str,
    server_config: ServerConfig,
    panel_id: str = "panel",
) -> int:
    """Paint the panel, run the action and return an exit code."""
    log = logging.getLogger("task_trigger")

    layout = json.loads(layout_json)
    if not isinstance(layout, dict):
        raise ValueError("Layout must be a JSON object")

    log.info(
        "Connecting to %s (status endpoint: %s)",
        server_config.server_url,
        server_config.status_endpoint,
    )

    async with QrsClient.from_config(server_config) as client:
        panel = paint(layout, client, status_endpoint=server_config.status_endpoint)
        output, ok = await run_action(panel, action, panel_id)

    print(output)
    return 0 if ok else 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Start repository tasks and check their last execution"
    )
    parser.add_argument("action", choices=ACTIONS, help="Panel action to run")
    parser.add_argument(
        "--server-url",
        required=True,
        help="Origin of the repository service (e.g., https://qlik.example.com)",
    )
    parser.add_argument(
        "--layout",
        required=True,
        help='Host layout JSON, e.g. \'{"props": {"taskId": "..."}}\'',
    )
    parser.add_argument(
        "--legacy-status-endpoint",
        action="store_true",
        help="Read task status from /qrs/task/{id} instead of /qrs/reloadtask/{id}",
    )
    parser.add_argument(
        "--cookie",
        action="append",
        default=[],
        help="Session cookie as NAME=VALUE (repeatable)",
    )
    parser.add_argument(
        "--panel-id",
        default="panel",
        help="Element id suffix used by the render action",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        cookies = parse_cookies(args.cookie)
    except ValueError as e:
        parser.error(str(e))

    server_config = ServerConfig(
        server_url=args.server_url,
        status_endpoint="task" if args.legacy_status_endpoint else "reloadtask",
        cookies=cookies,
    )

    exit_code = asyncio.run(
        run(
            action=args.action,
            layout_json=args.layout,
            server_config=server_config,
            panel_id=args.panel_id,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
