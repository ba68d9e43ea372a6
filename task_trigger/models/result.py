"""Models for normalized task status results."""

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, kw_only=True)
class RawResponse:
    """Status line and body of a repository service response."""

    status: int
    reason: str
    body: str

    @property
    def ok(self) -> bool:
        """Whether the response has a 2xx status."""
        return 200 <= self.status < 300


@dataclass(frozen=True, kw_only=True)
class ExecutionResult:
    """Normalized view of a task's last execution.

    Built fresh on every status check and discarded after rendering.
    """

    task_name: str
    status_code: int | None
    status_text: str
    start_time: str | None
    stop_time: str | None
    is_running: bool
    duration: str


@dataclass(frozen=True, kw_only=True)
class EmptyResult:
    """A task with no previous execution record."""

    task_name: str


@dataclass(frozen=True, kw_only=True)
class ErrorResult:
    """A read request answered with a non-2xx status."""

    task_name: str
    status: int
    reason: str
    body: str


@dataclass(frozen=True, kw_only=True)
class InvalidTaskId:
    """A configured task id that is not shaped like a GUID."""

    task_id: str


TaskStatus: TypeAlias = ExecutionResult | EmptyResult | ErrorResult
StatusItem: TypeAlias = TaskStatus | InvalidTaskId
