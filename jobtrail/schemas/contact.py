"""Request schemas for contacts."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_OPTIONAL_TEXT = ("email", "phone", "position", "department", "notes")


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip() or None
    return v


class CreateContactRequest(BaseModel):
    """Request body for creating a contact."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    application_id: str = Field(..., min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    position: str | None = Field(default=None, max_length=255)
    department: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=50000)
    is_primary: bool = False

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class UpdateContactRequest(BaseModel):
    """Request body for partially updating a contact.

    All fields optional; only provided fields are updated. ``name`` may not
    be cleared.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    position: str | None = Field(default=None, max_length=255)
    department: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=50000)
    is_primary: bool | None = None

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)
