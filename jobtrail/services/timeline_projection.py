"""Read-side timeline projection.

Merges two producers into one chronological list:

- StoredEventSource      - TimelineEvent rows persisted for the application
- SynthesizedEventSource - events implied by the application's own stage
                           dates and completion flags

Deduplication invariant: every synthesized event carries a deterministic
system id (see ``system_event_id``). A synthesized event is suppressed when a
stored event with the same id exists, so a stage milestone that the
synchronizer already persisted appears exactly once.

Nothing here writes to the database; projecting the same application twice
yields identical output.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Protocol

from jobtrail.models.application import Application, TimelineEvent
from jobtrail.services.application_status import (
    APPLIED_STAGE,
    TRACKED_STAGES,
    PipelineStage,
)

Milestone = Literal["scheduled", "completed"]

APPLICATION_SUBMITTED = "APPLICATION_SUBMITTED"


def system_event_id(application_id: str, stage: PipelineStage, milestone: Milestone) -> str:
    """Deterministic id of a stage milestone event.

    Example: ``"3f2c...-system-first-interview-scheduled"``.
    """
    return f"{application_id}-system-{stage.slug}-{milestone}"


@dataclass(frozen=True)
class ProjectedEvent:
    """One entry of the projected timeline.

    Attributes:
        id: Stored row id, or the system id for synthesized events.
        application_id: Owning application.
        type: Event type, e.g. "FIRST_INTERVIEW_SCHEDULED".
        title: Display title.
        description: Optional description.
        event_date: When the event happened or is scheduled.
        is_completed: Whether the milestone is done.
        is_system: True for synthesized events.
    """

    id: str
    application_id: str
    type: str
    title: str
    description: str | None
    event_date: datetime
    is_completed: bool
    is_system: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "application_id": self.application_id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "event_date": self.event_date.isoformat(),
            "is_completed": self.is_completed,
            "is_system": self.is_system,
        }


class EventSource(Protocol):
    """Producer of timeline entries for one application."""

    def events(self, application: Application) -> Iterator[ProjectedEvent]: ...


# =============================================================================
# Sources
# =============================================================================


class StoredEventSource:
    """Yields persisted TimelineEvent rows unchanged."""

    def __init__(self, stored_events: Iterable[TimelineEvent]) -> None:
        self._stored_events = list(stored_events)

    def events(self, application: Application) -> Iterator[ProjectedEvent]:
        for row in self._stored_events:
            yield ProjectedEvent(
                id=row.id,
                application_id=row.application_id,
                type=row.type,
                title=row.title,
                description=row.description,
                event_date=row.event_date,
                is_completed=row.is_completed,
            )


class SynthesizedEventSource:
    """Yields events implied by the application's stage dates and flags.

    - applied date set         -> APPLICATION_SUBMITTED (completed)
    - stage date set           -> <STAGE>_SCHEDULED, completed iff the flag is
    - stage date set and flag  -> <STAGE>_COMPLETED

    A completion flag without a date produces nothing.
    """

    def events(self, application: Application) -> Iterator[ProjectedEvent]:
        if application.applied_date is not None:
            yield ProjectedEvent(
                id=system_event_id(application.id, APPLIED_STAGE, "completed"),
                application_id=application.id,
                type=APPLICATION_SUBMITTED,
                title=APPLIED_STAGE.scheduled_title,
                description=APPLIED_STAGE.completed_description,
                event_date=application.applied_date,
                is_completed=True,
                is_system=True,
            )

        for stage in TRACKED_STAGES:
            stage_date = getattr(application, stage.date_field)
            if stage_date is None:
                continue
            completed = bool(getattr(application, stage.completed_field))
            yield ProjectedEvent(
                id=system_event_id(application.id, stage, "scheduled"),
                application_id=application.id,
                type=stage.scheduled_type,
                title=stage.scheduled_title,
                description=stage.scheduled_description,
                event_date=stage_date,
                is_completed=completed,
                is_system=True,
            )
            if completed:
                notes = getattr(application, stage.notes_field)
                yield ProjectedEvent(
                    id=system_event_id(application.id, stage, "completed"),
                    application_id=application.id,
                    type=stage.completed_type,
                    title=stage.completed_title,
                    description=(
                        stage.completed_with_notes(notes)
                        if notes
                        else stage.completed_description
                    ),
                    event_date=stage_date,
                    is_completed=True,
                    is_system=True,
                )


# =============================================================================
# Projector
# =============================================================================


class TimelineProjector:
    """Merges stored and synthesized events into one sorted timeline."""

    def __init__(self, stored: EventSource, synthesized: EventSource) -> None:
        self._stored = stored
        self._synthesized = synthesized

    def project(self, application: Application) -> list[ProjectedEvent]:
        """Build the timeline for ``application``.

        Returns:
            Events sorted by event date descending, ties by id ascending.
        """
        merged: dict[str, ProjectedEvent] = {}
        for event in self._stored.events(application):
            merged.setdefault(event.id, event)
        for event in self._synthesized.events(application):
            # Stored rows win over synthesized ones with the same id
            merged.setdefault(event.id, event)

        by_id = sorted(merged.values(), key=lambda event: event.id)
        return sorted(by_id, key=lambda event: event.event_date, reverse=True)


def project_timeline(
    application: Application,
    stored_events: Sequence[TimelineEvent] | None = None,
) -> list[ProjectedEvent]:
    """Project the full timeline of an application.

    Args:
        application: Application whose stage fields are synthesized.
        stored_events: Persisted events; defaults to the application's
            loaded ``timeline_events`` relationship.

    Returns:
        Stored and synthesized events without duplicates, newest first.
    """
    if stored_events is None:
        stored_events = application.timeline_events
    projector = TimelineProjector(
        StoredEventSource(stored_events),
        SynthesizedEventSource(),
    )
    return projector.project(application)
