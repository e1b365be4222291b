"""Error details domain model."""

from pydantic import BaseModel, ConfigDict


class ErrorDetails(BaseModel):
    """Details about an error: its kind plus the HTTP status or table involved."""

    model_config = ConfigDict(frozen=True)

    kind: str
    status_code: int | None = None
    table: str | None = None
    reason: str
