import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .core import POLL_INTERVAL_SECONDS
from .errors import ClientConnectionError


def load_credentials(value: Any) -> dict[str, Any]:
    """
    Accepts service-account credentials as a dict, a JSON string,
    or a path to a JSON key file.
    """
    if not value:
        raise ClientConnectionError("Must provide credentials")
    if isinstance(value, dict):
        return value
    if isinstance(value, Path) or (
        isinstance(value, str) and not value.lstrip().startswith("{")
    ):
        path = Path(value).expanduser()
        try:
            value = path.read_text()
        except OSError as e:
            raise ClientConnectionError(f"Could not read credentials file {path}: {e}") from e
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as e:
            raise ClientConnectionError(f"Credentials are not valid JSON: {e}") from e
        if isinstance(parsed, dict):
            return parsed
    raise ClientConnectionError("Credentials provided in a bad format")


class ServiceSettings(BaseModel):
    credentials: dict[str, Any]
    project_id: str | None = None
    poll_interval: float = Field(default=POLL_INTERVAL_SECONDS, ge=0)
    poll_timeout: float | None = Field(
        default=None, ge=0, description="Seconds; None waits indefinitely"
    )

    @field_validator("credentials", mode="before")
    @classmethod
    def _parse_credentials(cls, v: Any) -> dict[str, Any]:
        return load_credentials(v)

    @model_validator(mode="after")
    def _default_project(self) -> "ServiceSettings":
        if not self.project_id:
            self.project_id = self.credentials.get("project_id")
        if not self.project_id:
            raise ClientConnectionError(
                "No project id given and none found in the credentials"
            )
        return self
