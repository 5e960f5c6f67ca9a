"""Application status and hiring-pipeline stages.

The one canonical definition of the nine statuses, their display labels and
the five tracked stages. Models, schemas, the timeline synchronizer, the
projector and the board all read from here.

Public API:
- ApplicationStatus - status enum with ``label``, ``coerce`` and ``stage``
- PipelineStage     - per-stage field names, event types and wording
- APPLIED_STAGE     - the submission step (date only, no flag or notes)
- TRACKED_STAGES    - initial call, three interviews, negotiations
- HIDDEN_STATUSES   - closed-out statuses left off the board by default
"""

from dataclasses import dataclass
from enum import Enum

# =============================================================================
# Pipeline Stages
# =============================================================================


@dataclass(frozen=True)
class PipelineStage:
    """One step of the hiring pipeline.

    Attributes:
        key: Snake-case prefix of the Application columns for this stage
            (``<key>_date``, ``<key>_completed``, ``<key>_notes``).
        event_prefix: Upper-case prefix of derived event types
            (``<prefix>_SCHEDULED`` / ``<prefix>_COMPLETED``).
        label: Title-case name, e.g. "First Interview".
        noun: Sentence-case name used in descriptions, e.g. "First interview".
        scheduled_title: Title of the "scheduled" timeline event.
        scheduled_description: Description of the "scheduled" timeline event.
        completed_description: Description of the "completed" event when no
            notes accompany it.
    """

    key: str
    event_prefix: str
    label: str
    noun: str
    scheduled_title: str
    scheduled_description: str
    completed_description: str

    @property
    def slug(self) -> str:
        """Kebab-case stage name used in system event ids."""
        return self.key.replace("_", "-")

    @property
    def date_field(self) -> str:
        return f"{self.key}_date"

    @property
    def completed_field(self) -> str:
        return f"{self.key}_completed"

    @property
    def notes_field(self) -> str:
        return f"{self.key}_notes"

    @property
    def scheduled_type(self) -> str:
        return f"{self.event_prefix}_SCHEDULED"

    @property
    def completed_type(self) -> str:
        return f"{self.event_prefix}_COMPLETED"

    @property
    def completed_title(self) -> str:
        return f"{self.label} Completed"

    def completed_with_notes(self, notes: str) -> str:
        """Description of the "completed" event when notes were supplied."""
        return f"{self.noun} completed with notes: {notes}"


APPLIED_STAGE = PipelineStage(
    key="applied",
    event_prefix="APPLICATION",
    label="Application",
    noun="Application",
    scheduled_title="Application Submitted",
    scheduled_description="Application has been submitted",
    completed_description="Application has been submitted",
)

INITIAL_CALL_STAGE = PipelineStage(
    key="initial_call",
    event_prefix="INITIAL_CALL",
    label="Initial Call",
    noun="Initial call",
    scheduled_title="Initial Call Scheduled",
    scheduled_description="Initial call has been scheduled",
    completed_description="Initial call has been completed",
)

FIRST_INTERVIEW_STAGE = PipelineStage(
    key="first_interview",
    event_prefix="FIRST_INTERVIEW",
    label="First Interview",
    noun="First interview",
    scheduled_title="First Interview Scheduled",
    scheduled_description="First interview has been scheduled",
    completed_description="First interview has been completed",
)

SECOND_INTERVIEW_STAGE = PipelineStage(
    key="second_interview",
    event_prefix="SECOND_INTERVIEW",
    label="Second Interview",
    noun="Second interview",
    scheduled_title="Second Interview Scheduled",
    scheduled_description="Second interview has been scheduled",
    completed_description="Second interview has been completed",
)

THIRD_INTERVIEW_STAGE = PipelineStage(
    key="third_interview",
    event_prefix="THIRD_INTERVIEW",
    label="Third Interview",
    noun="Third interview",
    scheduled_title="Third Interview Scheduled",
    scheduled_description="Third interview has been scheduled",
    completed_description="Third interview has been completed",
)

NEGOTIATIONS_STAGE = PipelineStage(
    key="negotiations",
    event_prefix="NEGOTIATIONS",
    label="Negotiations",
    noun="Negotiations",
    scheduled_title="Negotiations Started",
    scheduled_description="Salary negotiations have been scheduled",
    completed_description="Salary negotiations have been completed",
)

TRACKED_STAGES: tuple[PipelineStage, ...] = (
    INITIAL_CALL_STAGE,
    FIRST_INTERVIEW_STAGE,
    SECOND_INTERVIEW_STAGE,
    THIRD_INTERVIEW_STAGE,
    NEGOTIATIONS_STAGE,
)

# =============================================================================
# Status Enum
# =============================================================================


class ApplicationStatus(str, Enum):
    """Where an application sits in the hiring pipeline.

    Ordered by pipeline progression; transitions are not required to be
    monotonic.
    """

    NOT_APPLIED = "NOT_APPLIED"
    APPLIED = "APPLIED"
    INITIAL_CALL = "INITIAL_CALL"
    FIRST_INTERVIEW = "FIRST_INTERVIEW"
    SECOND_INTERVIEW = "SECOND_INTERVIEW"
    THIRD_INTERVIEW = "THIRD_INTERVIEW"
    NEGOTIATIONS = "NEGOTIATIONS"
    NOT_ACCEPTED = "NOT_ACCEPTED"
    LOST = "LOST"

    @property
    def label(self) -> str:
        """Human-readable label, e.g. "First Interview"."""
        return _STATUS_LABELS[self]

    @property
    def stage(self) -> PipelineStage | None:
        """Pipeline stage whose date belongs to this status, if any."""
        return _STATUS_STAGES.get(self)

    @property
    def is_hidden(self) -> bool:
        """True for closed-out statuses."""
        return self in HIDDEN_STATUSES

    @classmethod
    def coerce(cls, value: "str | ApplicationStatus | None") -> "ApplicationStatus":
        """Map any incoming value onto the enum.

        Unrecognized or missing values become NOT_APPLIED.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip())
            except ValueError:
                pass
        return cls.NOT_APPLIED


_STATUS_LABELS: dict[ApplicationStatus, str] = {
    ApplicationStatus.NOT_APPLIED: "Not Applied",
    ApplicationStatus.APPLIED: "Applied",
    ApplicationStatus.INITIAL_CALL: "Initial Call",
    ApplicationStatus.FIRST_INTERVIEW: "First Interview",
    ApplicationStatus.SECOND_INTERVIEW: "Second Interview",
    ApplicationStatus.THIRD_INTERVIEW: "Third Interview",
    ApplicationStatus.NEGOTIATIONS: "Negotiations",
    ApplicationStatus.NOT_ACCEPTED: "Not Accepted",
    ApplicationStatus.LOST: "Lost",
}

_STATUS_STAGES: dict[ApplicationStatus, PipelineStage] = {
    ApplicationStatus.APPLIED: APPLIED_STAGE,
    ApplicationStatus.INITIAL_CALL: INITIAL_CALL_STAGE,
    ApplicationStatus.FIRST_INTERVIEW: FIRST_INTERVIEW_STAGE,
    ApplicationStatus.SECOND_INTERVIEW: SECOND_INTERVIEW_STAGE,
    ApplicationStatus.THIRD_INTERVIEW: THIRD_INTERVIEW_STAGE,
    ApplicationStatus.NEGOTIATIONS: NEGOTIATIONS_STAGE,
}

HIDDEN_STATUSES: frozenset[ApplicationStatus] = frozenset(
    {ApplicationStatus.NOT_ACCEPTED, ApplicationStatus.LOST}
)
