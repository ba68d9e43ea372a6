"""Panel properties from the host layout and per-deployment server settings."""

from collections.abc import Mapping, Sequence
from typing import Any, Literal, TypeAlias

from pydantic import Field, SecretStr, ValidationInfo, field_validator

from task_trigger.models.base import Model

StatusEndpoint: TypeAlias = Literal["reloadtask", "task"]

DEFAULT_START_LABEL = "▶️ Start Reload"
DEFAULT_CHECK_LABEL = "📊 Check Status"


class ConfigurationError(Exception):
    """Raised when the layout does not carry enough to activate the panel."""


class TriggerConfig(Model):
    """Properties the host stores under ``layout["props"]``.

    The host re-reads them on every paint; an instance lives for one paint.
    """

    task_id: str = Field(
        default="",
        alias="taskId",
        title="Primary Task ID",
        json_schema_extra={"expression": "optional"},
    )
    second_task_id: str = Field(
        default="",
        alias="secondTaskId",
        title="Second Task ID – optional",
        json_schema_extra={"expression": "optional"},
    )
    proxy_prefix: str = Field(
        default="",
        alias="vpx",
        title="Virtual proxy prefix (e.g., /jwt or empty)",
    )
    start_label: str = Field(
        default=DEFAULT_START_LABEL,
        alias="startLabel",
        title="Start button label",
    )
    check_label: str = Field(
        default=DEFAULT_CHECK_LABEL,
        alias="checkLabel",
        title="Check status (both) button label",
    )

    @field_validator("task_id", "second_task_id", mode="before")
    @classmethod
    def _blank_task_id(cls, value: Any) -> str:
        return str(value) if value else ""

    @field_validator("proxy_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value: Any) -> str:
        prefix = str(value).strip().strip("/") if value else ""
        return f"/{prefix}" if prefix else ""

    @field_validator("start_label", "check_label", mode="before")
    @classmethod
    def _default_label(cls, value: Any, info: ValidationInfo) -> Any:
        if not value:
            return cls.model_fields[info.field_name].default
        return str(value)

    @classmethod
    def from_layout(cls, layout: Mapping[str, Any]) -> "TriggerConfig":
        """Build the config from a host layout object."""
        return cls.model_validate(layout.get("props") or {})

    @property
    def task_ids(self) -> Sequence[str]:
        """Task ids to check, primary first."""
        if self.second_task_id:
            return (self.task_id, self.second_task_id)
        return (self.task_id,)

    def require_primary_task_id(self) -> str:
        """Return the primary task id.

        Raises:
            ConfigurationError: If the primary task id is empty

        """
        if not self.task_id:
            raise ConfigurationError(
                "Please set the Primary Task ID in the object properties."
            )
        return self.task_id


class ServerConfig(Model):
    """Deployment settings for the repository service.

    ``status_endpoint`` selects ``/qrs/reloadtask/{id}`` or, for older
    deployments, ``/qrs/task/{id}`` when reading the last execution.
    """

    server_url: str = "https://localhost"
    status_endpoint: StatusEndpoint = "reloadtask"
    cookies: dict[str, SecretStr] = Field(default_factory=dict)


def property_panel() -> dict[str, Any]:
    """Return the host property-panel definition for :class:`TriggerConfig`."""
    items: dict[str, Any] = {}
    for field in TriggerConfig.model_fields.values():
        extra = field.json_schema_extra
        item: dict[str, Any] = {
            "ref": f"props.{field.alias}",
            "label": field.title,
            "type": "string",
        }
        if isinstance(extra, dict) and "expression" in extra:
            item["expression"] = extra["expression"]
        else:
            item["defaultValue"] = field.default
        items[str(field.alias)] = item

    return {
        "type": "items",
        "component": "accordion",
        "items": {
            "settings": {"uses": "settings"},
            "main": {"label": "TaskTrigger", "type": "items", "items": items},
        },
    }
