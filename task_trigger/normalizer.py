"""Normalization of task records into execution results.

The repository service reports the last execution of a task under different
field names depending on its version, so each logical value is looked up
through an ordered list of candidate fields where the first present one wins.
"""

import json
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

from task_trigger.formatting import (
    UNKNOWN,
    elapsed_milliseconds,
    format_duration,
    parse_timestamp,
)
from task_trigger.models.result import (
    EmptyResult,
    ErrorResult,
    ExecutionResult,
    RawResponse,
    TaskStatus,
)

log = logging.getLogger(__name__)

ExecutionField: TypeAlias = Literal["last_execution", "start_time", "stop_time"]

FIELD_CANDIDATES: Mapping[ExecutionField, Sequence[str]] = {
    "last_execution": ("lastExecutionResult", "lastExecution"),
    "start_time": ("executionStartTime", "startTime"),
    "stop_time": ("executionStopTime", "stopTime"),
}
RECORD_FIELDS: frozenset[ExecutionField] = frozenset(["last_execution"])

STATUS_LABELS: Mapping[int, str] = {
    0: "Unknown",
    1: "Triggered",
    2: "Started/Running",
    3: "Queued",
    6: "Aborted",
    7: "Succeeded",
    8: "Failed",
    9: "Skipped",
    10: "Retrying",
}

RUNNING_STATUS = 2
RUNNING_PATTERN = re.compile("running", re.IGNORECASE)


@dataclass(frozen=True, kw_only=True)
class ParseFailure:
    """A response body that does not hold a task record."""

    reason: str


def parse_record(body: str) -> Mapping[str, Any] | ParseFailure:
    """Parse a response body into a JSON object."""
    if not body:
        return ParseFailure(reason="empty body")
    try:
        record = json.loads(body)
    except (ValueError, RecursionError) as e:
        return ParseFailure(reason=f"malformed JSON: {e}")
    if not isinstance(record, dict):
        return ParseFailure(reason=f"expected an object, got {type(record).__name__}")
    return record


def first_present(record: Mapping[str, Any], field: ExecutionField) -> Any | None:
    """Return the first candidate value for ``field`` that is present.

    Missing keys, ``None`` and empty strings count as absent, and so does
    anything but an object for fields that hold a sub-record.
    """
    for name in FIELD_CANDIDATES[field]:
        value = record.get(name)
        if value is None or value == "":
            continue
        if field in RECORD_FIELDS and not isinstance(value, Mapping):
            continue
        return value
    return None


def resolve_status_text(code: int | None, text: str | None = None) -> str:
    """Resolve the display text for a status.

    An explicit text wins, then the known label for the code, then
    ``"Status #<code>"``; with neither code nor text the result is ``"-"``.
    """
    if text:
        return text
    if code is None:
        return "-"
    return STATUS_LABELS.get(code, f"Status #{code}")


def _status_code(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _timestamp(value: Any) -> str | None:
    return None if value is None else str(value)


def is_running(
    code: int | None, start: str | None, stop: str | None, status_text: str
) -> bool:
    """Whether any of the service's running signals is set."""
    return (
        code == RUNNING_STATUS
        or (start is not None and stop is None)
        or RUNNING_PATTERN.search(status_text) is not None
    )


def derive_duration(
    start: str | None, stop: str | None, running: bool, now: datetime
) -> str:
    """Elapsed time of an execution, or ``"unknown"`` if it cannot be told."""
    try:
        if start is not None and stop is not None:
            return format_duration(
                elapsed_milliseconds(parse_timestamp(start), parse_timestamp(stop))
            )
        if running and start is not None:
            return format_duration(elapsed_milliseconds(parse_timestamp(start), now))
    except (ValueError, TypeError, OverflowError) as e:
        log.debug("Cannot derive duration from start=%r stop=%r: %s", start, stop, e)
    return UNKNOWN


def normalize(
    response: RawResponse,
    fallback_name: str,
    *,
    now: datetime | None = None,
) -> TaskStatus:
    """Map a task read response to a normalized result.

    Args:
        response: Response of the task read request
        fallback_name: Name to report when the record carries none
        now: Reference time for running executions (defaults to current UTC)

    Returns:
        An error result for non-2xx responses, an empty result when there is
        no last execution, otherwise the execution result. Never raises.

    """
    if not response.ok:
        return ErrorResult(
            task_name=fallback_name,
            status=response.status,
            reason=response.reason,
            body=response.body,
        )

    record = parse_record(response.body)
    if isinstance(record, ParseFailure):
        log.debug("No task record for %s: %s", fallback_name, record.reason)
        return EmptyResult(task_name=fallback_name)

    name = record.get("name") or fallback_name
    if not isinstance(name, str):
        name = str(name)

    operational = record.get("operational")
    last = (
        first_present(operational, "last_execution")
        if isinstance(operational, dict)
        else None
    )
    if not isinstance(last, dict):
        return EmptyResult(task_name=name)

    start = _timestamp(first_present(last, "start_time"))
    stop = _timestamp(first_present(last, "stop_time"))
    code = _status_code(last.get("status"))
    explicit_text = last.get("statusText")
    status_text = resolve_status_text(
        code, explicit_text if isinstance(explicit_text, str) else None
    )
    running = is_running(code, start, stop, status_text)
    duration = derive_duration(
        start, stop, running, now or datetime.now(timezone.utc)
    )

    return ExecutionResult(
        task_name=name,
        status_code=code,
        status_text=status_text,
        start_time=start,
        stop_time=stop,
        is_running=running,
        duration=duration,
    )
