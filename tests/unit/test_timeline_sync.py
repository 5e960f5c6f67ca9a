"""Tests for the write-side timeline diff.

Covers the pure derive function, the patch normalization and the merged
state validation. API-level behavior lives in test_api_applications.py.
"""

from datetime import UTC, datetime

import pytest

from jobtrail.core.errors import ValidationError
from jobtrail.schemas.application import ApplicationPatch
from jobtrail.services.application_status import ApplicationStatus
from jobtrail.services.timeline_sync import (
    STATUS_CHANGED,
    column_values,
    derive_timeline_events,
    move_patch,
    restamped_system_events,
    validate_state,
)

_APP_ID = "app-1"
_NOW = datetime(2024, 3, 20, 9, 30, tzinfo=UTC)
_MARCH_15 = datetime(2024, 3, 15, 12, tzinfo=UTC)


def _state(**fields) -> dict:
    state = {
        "id": _APP_ID,
        "company": "Acme",
        "position": "Engineer",
        "status": ApplicationStatus.APPLIED,
        "first_interview_date": None,
        "first_interview_completed": False,
        "negotiations_date": None,
        "negotiations_completed": False,
    }
    state.update(fields)
    return state


# =============================================================================
# derive_timeline_events
# =============================================================================


class TestDateArrival:
    def test_setting_a_stage_date_schedules_the_stage(self):
        events = derive_timeline_events(
            _state(), _state(first_interview_date=_MARCH_15), {}, _NOW
        )

        assert len(events) == 1
        event = events[0]
        assert event.type == "FIRST_INTERVIEW_SCHEDULED"
        assert event.title == "First Interview Scheduled"
        assert event.is_completed is False
        assert event.event_date == _MARCH_15
        assert event.id == "app-1-system-first-interview-scheduled"

    def test_changing_an_existing_date_produces_nothing(self):
        old = _state(first_interview_date=_MARCH_15)
        new = _state(first_interview_date=datetime(2024, 3, 18, 12, tzinfo=UTC))

        assert derive_timeline_events(old, new, {}, _NOW) == []

    def test_negotiations_use_started_title(self):
        events = derive_timeline_events(
            _state(), _state(negotiations_date=_MARCH_15), {}, _NOW
        )

        assert events[0].type == "NEGOTIATIONS_SCHEDULED"
        assert events[0].title == "Negotiations Started"


class TestCompletion:
    def test_completion_with_notes_in_same_update(self):
        old = _state(first_interview_date=_MARCH_15)
        new = _state(first_interview_date=_MARCH_15, first_interview_completed=True)

        events = derive_timeline_events(
            old, new, {"first_interview_notes": "Went well"}, _NOW
        )

        assert len(events) == 1
        event = events[0]
        assert event.type == "FIRST_INTERVIEW_COMPLETED"
        assert event.is_completed is True
        assert event.event_date == _MARCH_15
        assert event.description == "First interview completed with notes: Went well"
        assert event.id == "app-1-system-first-interview-completed"

    def test_completion_without_notes_uses_generic_sentence(self):
        old = _state(first_interview_date=_MARCH_15)
        new = _state(first_interview_date=_MARCH_15, first_interview_completed=True)

        events = derive_timeline_events(old, new, {}, _NOW)

        assert events[0].description == "First interview has been completed"

    def test_already_completed_stage_produces_nothing(self):
        state = _state(first_interview_date=_MARCH_15, first_interview_completed=True)

        assert derive_timeline_events(state, dict(state), {}, _NOW) == []

    def test_completion_without_date_is_skipped(self):
        new = _state(first_interview_completed=True)

        assert derive_timeline_events(_state(), new, {}, _NOW) == []

    def test_date_and_completion_in_one_update(self):
        new = _state(first_interview_date=_MARCH_15, first_interview_completed=True)

        events = derive_timeline_events(_state(), new, {}, _NOW)

        assert [e.type for e in events] == [
            "FIRST_INTERVIEW_SCHEDULED",
            "FIRST_INTERVIEW_COMPLETED",
        ]


class TestStatusChange:
    def test_status_change_names_both_labels(self):
        events = derive_timeline_events(
            _state(status=ApplicationStatus.APPLIED),
            _state(status=ApplicationStatus.INITIAL_CALL),
            {},
            _NOW,
        )

        assert len(events) == 1
        event = events[0]
        assert event.type == STATUS_CHANGED
        assert event.description == (
            "Application status changed from Applied to Initial Call"
        )
        assert event.event_date == _NOW
        assert event.is_completed is False
        assert event.id is None

    def test_same_status_produces_nothing(self):
        assert derive_timeline_events(_state(), _state(), {}, _NOW) == []

    def test_status_as_raw_string_is_compared_by_value(self):
        events = derive_timeline_events(
            _state(status=ApplicationStatus.APPLIED),
            _state(status="APPLIED"),
            {},
            _NOW,
        )

        assert events == []


class TestRestampedSystemEvents:
    def test_moved_date_restamps_both_milestones(self):
        moved = datetime(2024, 3, 18, 12, tzinfo=UTC)

        restamped = restamped_system_events(
            _state(first_interview_date=_MARCH_15),
            _state(first_interview_date=moved),
        )

        assert restamped == {
            "app-1-system-first-interview-scheduled": moved,
            "app-1-system-first-interview-completed": moved,
        }

    def test_arrival_clear_and_unchanged_dates_are_ignored(self):
        set_date = _state(first_interview_date=_MARCH_15)

        assert restamped_system_events(_state(), set_date) == {}
        assert restamped_system_events(set_date, _state()) == {}
        assert restamped_system_events(set_date, dict(set_date)) == {}


# =============================================================================
# Patch normalization
# =============================================================================


class TestApplicationPatch:
    def test_absent_fields_are_not_present(self):
        patch = ApplicationPatch.model_validate({"company": "Acme"})

        assert patch.present() == {"company": "Acme"}

    def test_empty_strings_clear_fields(self):
        patch = ApplicationPatch.model_validate({"pay": "", "first_interview_date": ""})

        assert patch.present() == {"pay": None, "first_interview_date": None}

    def test_null_flag_means_false(self):
        values = column_values(
            ApplicationPatch.model_validate({"first_interview_completed": None})
        )

        assert values == {"first_interview_completed": False}

    def test_blank_status_is_treated_as_absent(self):
        values = column_values(ApplicationPatch.model_validate({"status": ""}))

        assert "status" not in values

    def test_unknown_status_coerces_to_not_applied(self):
        patch = ApplicationPatch.model_validate({"status": "HIRED"})

        assert patch.status is ApplicationStatus.NOT_APPLIED

    def test_malformed_date_is_unset(self):
        patch = ApplicationPatch.model_validate({"applied_date": "yesterday"})

        assert patch.present() == {"applied_date": None}

    def test_form_flag_values(self):
        patch = ApplicationPatch.model_validate(
            {"initial_call_completed": "on", "negotiations_completed": "false"}
        )

        assert patch.initial_call_completed is True
        assert patch.negotiations_completed is False

    def test_unknown_keys_are_ignored(self):
        patch = ApplicationPatch.model_validate(
            {"company": "Acme", "id": "x", "contacts": [], "status_label": "Applied"}
        )

        assert patch.present() == {"company": "Acme"}

    def test_stage_notes_only_non_empty(self):
        patch = ApplicationPatch.model_validate(
            {"first_interview_notes": "Good", "second_interview_notes": "  "}
        )

        assert patch.stage_notes() == {"first_interview_notes": "Good"}


# =============================================================================
# validate_state / move_patch
# =============================================================================


class TestValidateState:
    def test_missing_company_is_rejected(self):
        with pytest.raises(ValidationError, match="Company and position are required"):
            validate_state({"company": None, "position": "Engineer"})

    def test_completed_without_date_is_rejected(self):
        with pytest.raises(ValidationError, match="cannot be completed without a date"):
            validate_state(
                {
                    "company": "Acme",
                    "position": "Engineer",
                    "second_interview_completed": True,
                    "second_interview_date": None,
                }
            )

    def test_valid_state_passes(self):
        validate_state(_state(first_interview_date=_MARCH_15, first_interview_completed=True))


class TestMovePatch:
    def test_staged_status_stamps_date_and_resets_flag(self):
        patch = move_patch(ApplicationStatus.FIRST_INTERVIEW)
        present = patch.present()

        assert present["status"] is ApplicationStatus.FIRST_INTERVIEW
        assert present["first_interview_date"].hour == 12
        assert present["first_interview_completed"] is False

    def test_applied_stamps_applied_date_only(self):
        present = move_patch(ApplicationStatus.APPLIED).present()

        assert set(present) == {"status", "applied_date"}

    def test_hidden_status_sets_status_only(self):
        present = move_patch(ApplicationStatus.LOST).present()

        assert set(present) == {"status"}
