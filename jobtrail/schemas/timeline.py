"""Request schemas for user-created timeline events."""

from datetime import UTC, date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobtrail.core.dates import ensure_utc, parse_date_only


class CreateTimelineEventRequest(BaseModel):
    """Request body for creating a timeline event.

    ``event_date`` accepts a full ISO timestamp or a ``YYYY-MM-DD`` day
    (stored as noon UTC); it defaults to now.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    application_id: str = Field(..., min_length=1, max_length=36)
    type: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=50000)
    event_date: datetime | None = None
    is_completed: bool = False

    @field_validator("description", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("event_date", mode="before")
    @classmethod
    def normalize_event_date(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v.strip()) == 10:
            return parse_date_only(v)
        if isinstance(v, date) and not isinstance(v, datetime):
            return parse_date_only(v)
        return v

    @field_validator("event_date")
    @classmethod
    def as_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

    def resolved_event_date(self) -> datetime:
        """The event date, defaulting to the current time."""
        return self.event_date or datetime.now(UTC)
