"""Write-side timeline synchronization.

When an application is updated, the old and new states are compared and the
implied TimelineEvent rows are inserted:

1. Date arrival   - a stage date goes from unset to set -> <STAGE>_SCHEDULED
2. Completion     - a completion flag goes false -> true -> <STAGE>_COMPLETED
3. Status change  - status differs                        -> STATUS_CHANGED

The decision is the pure function ``derive_timeline_events``; the
transactional wrapper ``apply_application_update`` locks the row, writes the
application and the derived events in one transaction and re-reads the
application with its children.

Scheduled and completed events use the deterministic system ids of
``jobtrail.services.timeline_projection`` so the read-side projection does
not show them twice. An id already present is overwritten in place rather
than inserted again, and when a stage date moves the stored system rows of
that stage take the new date.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.core.dates import to_noon_utc, utc_today
from jobtrail.core.errors import NotFoundError, ValidationError
from jobtrail.models.application import Application
from jobtrail.repositories.application_repository import ApplicationRepository
from jobtrail.repositories.timeline_repository import TimelineEventRepository
from jobtrail.schemas.application import (
    DATE_FIELDS,
    FLAG_FIELDS,
    TEXT_FIELDS,
    ApplicationPatch,
)
from jobtrail.services.application_status import (
    TRACKED_STAGES,
    ApplicationStatus,
)
from jobtrail.services.timeline_projection import Milestone, system_event_id

logger = structlog.get_logger()

STATUS_CHANGED = "STATUS_CHANGED"

_SYSTEM_MILESTONES: tuple[Milestone, ...] = ("scheduled", "completed")

SNAPSHOT_FIELDS: tuple[str, ...] = (
    "id",
    "status",
    *TEXT_FIELDS,
    *DATE_FIELDS,
    *FLAG_FIELDS,
)


@dataclass(frozen=True)
class DerivedEvent:
    """A timeline event implied by an update, not yet persisted.

    ``id`` is None for events that get a random id on insert.
    """

    type: str
    title: str
    description: str
    event_date: datetime
    is_completed: bool
    id: str | None = None

    def row_values(self, application_id: str) -> dict[str, Any]:
        values: dict[str, Any] = {
            "application_id": application_id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "event_date": self.event_date,
            "is_completed": self.is_completed,
        }
        if self.id is not None:
            values["id"] = self.id
        return values

    def refresh_values(self) -> dict[str, Any]:
        """Columns overwritten when the system row already exists."""
        return {
            "title": self.title,
            "description": self.description,
            "event_date": self.event_date,
            "is_completed": self.is_completed,
        }


# =============================================================================
# Pure diff
# =============================================================================


def snapshot(application: Application) -> dict[str, Any]:
    """Capture the fields the diff looks at, with status as the enum."""
    state = {field: getattr(application, field) for field in SNAPSHOT_FIELDS}
    state["status"] = ApplicationStatus.coerce(application.status)
    return state


def derive_timeline_events(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
    notes_by_stage: Mapping[str, str],
    now: datetime,
) -> list[DerivedEvent]:
    """Decide which timeline events an update implies.

    Args:
        old: Snapshot before the update (see ``snapshot``).
        new: Snapshot after merging the update. ``new["id"]`` names the
            application for system ids.
        notes_by_stage: Non-empty stage notes sent with this update, keyed by
            notes field (e.g. "first_interview_notes").
        now: Timestamp for the status-change event.

    Returns:
        Derived events in a fixed order: per stage scheduled then completed,
        then the status change.
    """
    application_id = new["id"]
    events: list[DerivedEvent] = []

    for stage in TRACKED_STAGES:
        old_date = old.get(stage.date_field)
        new_date = new.get(stage.date_field)

        if old_date is None and new_date is not None:
            events.append(
                DerivedEvent(
                    id=system_event_id(application_id, stage, "scheduled"),
                    type=stage.scheduled_type,
                    title=stage.scheduled_title,
                    description=stage.scheduled_description,
                    event_date=new_date,
                    is_completed=False,
                )
            )

        was_completed = bool(old.get(stage.completed_field))
        is_completed = bool(new.get(stage.completed_field))
        # A completion without a date is rejected upstream; never crash on it
        if not was_completed and is_completed and new_date is not None:
            notes = notes_by_stage.get(stage.notes_field)
            events.append(
                DerivedEvent(
                    id=system_event_id(application_id, stage, "completed"),
                    type=stage.completed_type,
                    title=stage.completed_title,
                    description=(
                        stage.completed_with_notes(notes)
                        if notes
                        else stage.completed_description
                    ),
                    event_date=new_date,
                    is_completed=True,
                )
            )

    old_status = ApplicationStatus.coerce(old.get("status"))
    new_status = new.get("status")
    if new_status is not None:
        new_status = ApplicationStatus.coerce(new_status)
        if new_status != old_status:
            events.append(
                DerivedEvent(
                    type=STATUS_CHANGED,
                    title="Status Changed",
                    description=(
                        f"Application status changed from {old_status.label} "
                        f"to {new_status.label}"
                    ),
                    event_date=now,
                    is_completed=False,
                )
            )

    return events


def restamped_system_events(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
) -> dict[str, datetime]:
    """System event ids whose stage date moved, mapped to the new date.

    Only stages whose date was set before and after the update count; an
    arrival is handled by ``derive_timeline_events``.
    """
    application_id = new["id"]
    restamped: dict[str, datetime] = {}
    for stage in TRACKED_STAGES:
        old_date = old.get(stage.date_field)
        new_date = new.get(stage.date_field)
        if old_date is None or new_date is None or old_date == new_date:
            continue
        for milestone in _SYSTEM_MILESTONES:
            restamped[system_event_id(application_id, stage, milestone)] = new_date
    return restamped


# =============================================================================
# Validation
# =============================================================================


def column_values(patch: ApplicationPatch) -> dict[str, Any]:
    """Translate the fields present in a patch into column values."""
    values = patch.present()
    if values.get("status") is None:
        values.pop("status", None)
    else:
        values["status"] = values["status"].value
    for field in FLAG_FIELDS:
        if field in values and values[field] is None:
            values[field] = False
    return values


def validate_state(state: Mapping[str, Any]) -> None:
    """Check a merged application state before it is written.

    Raises:
        ValidationError: If company or position is empty, or a stage is
            marked completed without a date.
    """
    missing = [field for field in ("company", "position") if not state.get(field)]
    if missing:
        raise ValidationError(
            "Company and position are required",
            details=[{"field": field, "error": "REQUIRED"} for field in missing],
        )

    for stage in TRACKED_STAGES:
        if state.get(stage.completed_field) and state.get(stage.date_field) is None:
            raise ValidationError(
                f"{stage.label} cannot be completed without a date",
                details=[{"field": stage.completed_field, "error": "DATE_REQUIRED"}],
            )


# =============================================================================
# Transactional operations
# =============================================================================


async def load_application(db: AsyncSession, application_id: str) -> Application:
    """Load an application with its children or raise NotFoundError."""
    application = await ApplicationRepository.get_with_children(db, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)
    return application


async def _store_derived_events(
    db: AsyncSession,
    application_id: str,
    events: list[DerivedEvent],
    restamped: Mapping[str, datetime],
) -> tuple[int, int]:
    """Insert derived events, refreshing system rows that already exist.

    A system id that is already stored (a stage re-scheduled or re-completed
    after being cleared) has its row overwritten with the new event. Stored
    system rows of a stage whose date moved get the new date.

    Returns:
        Number of inserted rows and number of refreshed rows.
    """
    system_ids = {event.id for event in events if event.id is not None}
    stored = await TimelineEventRepository.get_by_ids(
        db, sorted(system_ids | set(restamped))
    )

    inserted = 0
    refreshed = 0
    for event in events:
        row = stored.get(event.id) if event.id is not None else None
        if row is None:
            await TimelineEventRepository.create(db, event.row_values(application_id))
            inserted += 1
            continue
        await TimelineEventRepository.update(db, row, event.refresh_values())
        refreshed += 1
        logger.debug(
            "Derived event refreshed",
            application_id=application_id,
            event_id=event.id,
        )

    for event_id, event_date in restamped.items():
        row = stored.get(event_id)
        if row is None or event_id in system_ids:
            continue
        await TimelineEventRepository.update(db, row, {"event_date": event_date})
        refreshed += 1
    return inserted, refreshed


async def create_application(db: AsyncSession, patch: ApplicationPatch) -> Application:
    """Create an application from a patch.

    No timeline rows are written; the projection derives the initial
    timeline from the stage fields.

    Raises:
        ValidationError: If company/position are missing or a stage is
            completed without a date.
    """
    values = column_values(patch)
    validate_state(values)

    application = await ApplicationRepository.create(db, values)
    await db.commit()

    logger.info(
        "Application created",
        application_id=application.id,
        status=application.status,
    )
    return await load_application(db, application.id)


async def apply_application_update(
    db: AsyncSession,
    application_id: str,
    patch: ApplicationPatch,
    *,
    now: datetime | None = None,
) -> Application:
    """Update an application and persist the timeline events it implies.

    The row is locked, the update and every derived event are committed
    together, then the application is re-read with its children.

    Args:
        db: Async database session.
        application_id: Application to update.
        patch: Partial update; absent fields are left unchanged.
        now: Timestamp for a status-change event (defaults to now, UTC).

    Returns:
        The updated application with contacts, timeline events and documents.

    Raises:
        NotFoundError: If the application does not exist.
        ValidationError: If the merged state is invalid.
    """
    application = await ApplicationRepository.get_by_id(
        db, application_id, for_update=True
    )
    if application is None:
        raise NotFoundError("Application", application_id)

    old = snapshot(application)
    values = column_values(patch)
    new = {**old, **values}
    validate_state(new)

    events = derive_timeline_events(
        old,
        new,
        patch.stage_notes(),
        now or datetime.now(UTC),
    )

    await ApplicationRepository.update(db, application, values)
    inserted, refreshed = await _store_derived_events(
        db, application_id, events, restamped_system_events(old, new)
    )
    await db.commit()

    logger.info(
        "Application updated",
        application_id=application_id,
        fields=sorted(values),
        derived_events=inserted,
        refreshed_events=refreshed,
    )
    return await load_application(db, application_id)


def move_patch(status: ApplicationStatus) -> ApplicationPatch:
    """Patch for dragging an application to ``status`` on the board.

    Staged statuses stamp their stage date with today (UTC) and reset the
    stage's completion flag.
    """
    values: dict[str, Any] = {"status": status}
    stage = status.stage
    if stage is not None:
        values[stage.date_field] = to_noon_utc(utc_today())
        if stage.completed_field in FLAG_FIELDS:
            values[stage.completed_field] = False
    return ApplicationPatch.model_validate(values)


async def move_application(
    db: AsyncSession,
    application_id: str,
    status: ApplicationStatus,
) -> Application:
    """Move an application to another status, deriving events as usual."""
    return await apply_application_update(db, application_id, move_patch(status))
