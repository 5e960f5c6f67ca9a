"""Request schemas for applications.

``ApplicationPatch`` is the explicit partial-update type. Pydantic records
which fields the client actually sent in ``model_fields_set``:

- field absent            -> leave the stored value unchanged
- field present, empty    -> clear it (text/date -> None, flag -> False)
- field present, a value  -> set it

Creation reuses the same shape; absent fields take model defaults.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobtrail.core.dates import parse_date_only
from jobtrail.services.application_status import ApplicationStatus

_MAX_TEXT_LENGTH = 50000
"""Safety bound on free-text field lengths."""

_TRUTHY = frozenset({"true", "1", "on", "yes"})

DATE_FIELDS: tuple[str, ...] = (
    "applied_date",
    "initial_call_date",
    "first_interview_date",
    "second_interview_date",
    "third_interview_date",
    "negotiations_date",
)

FLAG_FIELDS: tuple[str, ...] = (
    "initial_call_completed",
    "first_interview_completed",
    "second_interview_completed",
    "third_interview_completed",
    "negotiations_completed",
)

STAGE_NOTE_FIELDS: tuple[str, ...] = (
    "initial_call_notes",
    "first_interview_notes",
    "second_interview_notes",
    "third_interview_notes",
    "negotiations_notes",
)

TEXT_FIELDS: tuple[str, ...] = (
    "company",
    "position",
    "pay",
    "notes",
    "resume_file",
    "cover_letter_file",
    *STAGE_NOTE_FIELDS,
)


def parse_flag(value: Any) -> bool | None:
    """Interpret JSON booleans and HTML form values ("on", "true", "1")."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return None
        return normalized in _TRUTHY
    return bool(value)


class ApplicationPatch(BaseModel):
    """Partial application state sent by the client.

    Unknown keys are ignored so that a full record echoed back from a GET
    (with ids, timestamps and children) is accepted as an update.
    """

    model_config = ConfigDict(extra="ignore")

    company: str | None = Field(default=None, max_length=255)
    position: str | None = Field(default=None, max_length=255)
    pay: str | None = Field(default=None, max_length=100)
    status: ApplicationStatus | None = None

    applied_date: datetime | None = None
    initial_call_date: datetime | None = None
    first_interview_date: datetime | None = None
    second_interview_date: datetime | None = None
    third_interview_date: datetime | None = None
    negotiations_date: datetime | None = None

    initial_call_completed: bool | None = None
    first_interview_completed: bool | None = None
    second_interview_completed: bool | None = None
    third_interview_completed: bool | None = None
    negotiations_completed: bool | None = None

    initial_call_notes: str | None = Field(default=None, max_length=_MAX_TEXT_LENGTH)
    first_interview_notes: str | None = Field(default=None, max_length=_MAX_TEXT_LENGTH)
    second_interview_notes: str | None = Field(default=None, max_length=_MAX_TEXT_LENGTH)
    third_interview_notes: str | None = Field(default=None, max_length=_MAX_TEXT_LENGTH)
    negotiations_notes: str | None = Field(default=None, max_length=_MAX_TEXT_LENGTH)

    notes: str | None = Field(default=None, max_length=_MAX_TEXT_LENGTH)
    resume_file: str | None = Field(default=None, max_length=500)
    cover_letter_file: str | None = Field(default=None, max_length=500)

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Empty or whitespace-only strings clear the field."""
        if isinstance(v, str):
            stripped = v.strip()
            return stripped or None
        return v

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v: Any) -> ApplicationStatus | None:
        """Unknown status strings become NOT_APPLIED; blank means absent."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return ApplicationStatus.coerce(v)

    @field_validator(*DATE_FIELDS, mode="before")
    @classmethod
    def normalize_date(cls, v: Any) -> datetime | None:
        """``YYYY-MM-DD`` -> noon UTC; malformed values are treated as unset."""
        if isinstance(v, str | date):
            return parse_date_only(v)
        return None

    @field_validator(*FLAG_FIELDS, mode="before")
    @classmethod
    def normalize_flag(cls, v: Any) -> bool | None:
        return parse_flag(v)

    def present(self) -> dict[str, Any]:
        """Fields the client sent, with their normalized values."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def stage_notes(self) -> dict[str, str]:
        """Non-empty stage notes carried by this patch, keyed by field name."""
        return {
            name: getattr(self, name)
            for name in STAGE_NOTE_FIELDS
            if name in self.model_fields_set and getattr(self, name)
        }


class MoveApplicationRequest(BaseModel):
    """Request body for moving an application to another board status."""

    model_config = ConfigDict(extra="forbid")

    status: ApplicationStatus

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v: Any) -> ApplicationStatus:
        return ApplicationStatus.coerce(v)
