"""Application models - job applications and their timeline events.

Application is the root record; TimelineEvent, Contact and
ApplicationDocument are owned children deleted with it.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobtrail.models.base import Base, IdMixin, TimestampMixin, UTCDateTime, new_id
from jobtrail.services.application_status import ApplicationStatus

if TYPE_CHECKING:
    from jobtrail.models.contact import Contact
    from jobtrail.models.document import ApplicationDocument

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in ApplicationStatus)


def _stage_date() -> Mapped[datetime | None]:
    return mapped_column(UTCDateTime(), nullable=True)


def _stage_flag() -> Mapped[bool]:
    return mapped_column(
        Boolean,
        default=False,
        server_default=text("false"),
        nullable=False,
    )


def _stage_notes() -> Mapped[str | None]:
    return mapped_column(Text, nullable=True)


class Application(Base, IdMixin, TimestampMixin):
    """Job application record tracking pipeline stages and materials.

    Stage dates are stored as 12:00 UTC on the calendar day entered (see
    ``jobtrail.core.dates``). A stage's ``*_completed`` flag is only
    meaningful while its date is set.
    """

    __tablename__ = "applications"

    company: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(255), nullable=False)
    pay: Mapped[str | None] = mapped_column(String(100), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ApplicationStatus.NOT_APPLIED.value,
        server_default=text(f"'{ApplicationStatus.NOT_APPLIED.value}'"),
        nullable=False,
    )

    # Stage dates
    applied_date: Mapped[datetime | None] = _stage_date()
    initial_call_date: Mapped[datetime | None] = _stage_date()
    first_interview_date: Mapped[datetime | None] = _stage_date()
    second_interview_date: Mapped[datetime | None] = _stage_date()
    third_interview_date: Mapped[datetime | None] = _stage_date()
    negotiations_date: Mapped[datetime | None] = _stage_date()

    # Completion flags (no flag for the applied step)
    initial_call_completed: Mapped[bool] = _stage_flag()
    first_interview_completed: Mapped[bool] = _stage_flag()
    second_interview_completed: Mapped[bool] = _stage_flag()
    third_interview_completed: Mapped[bool] = _stage_flag()
    negotiations_completed: Mapped[bool] = _stage_flag()

    # Per-stage notes
    initial_call_notes: Mapped[str | None] = _stage_notes()
    first_interview_notes: Mapped[str | None] = _stage_notes()
    second_interview_notes: Mapped[str | None] = _stage_notes()
    third_interview_notes: Mapped[str | None] = _stage_notes()
    negotiations_notes: Mapped[str | None] = _stage_notes()

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Storage references ("/uploads/<application id>/<file>")
    resume_file: Mapped[str | None] = mapped_column(String(500), nullable=True)
    cover_letter_file: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint(
            f"status IN ({_STATUS_VALUES})",
            name="ck_application_status",
        ),
        Index("idx_application_created", "created_at"),
    )

    # Relationships
    contacts: Mapped[list["Contact"]] = relationship(
        "Contact",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="Contact.created_at.desc()",
    )
    timeline_events: Mapped[list["TimelineEvent"]] = relationship(
        "TimelineEvent",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="TimelineEvent.event_date.desc()",
    )
    documents: Mapped[list["ApplicationDocument"]] = relationship(
        "ApplicationDocument",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationDocument.created_at.desc()",
    )

    @property
    def status_enum(self) -> ApplicationStatus:
        """Stored status as the enum (unknown values read as NOT_APPLIED)."""
        return ApplicationStatus.coerce(self.status)


class TimelineEvent(Base, TimestampMixin):
    """Event in an application's history timeline.

    The id is either random or a deterministic system id
    (``<application id>-system-<stage>-<milestone>``) for events derived
    from stage dates, which is what lets the read-side projection skip
    duplicates.
    """

    __tablename__ = "timeline_events"

    id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        default=new_id,
    )
    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    is_completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=text("false"),
        nullable=False,
    )

    __table_args__ = (
        Index("idx_timelineevent_application", "application_id"),
        Index("idx_timelineevent_date", "application_id", "event_date"),
    )

    # Relationships
    application: Mapped["Application"] = relationship(
        "Application",
        back_populates="timeline_events",
    )
