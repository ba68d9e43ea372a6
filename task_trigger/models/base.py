"""Base model configuration for host and deployment settings."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable settings model that accepts field names or host aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
