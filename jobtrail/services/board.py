"""Kanban board view of applications.

Three columns: applied, interviews (initial call through third interview)
and negotiations. Closed-out statuses (NOT_ACCEPTED, LOST) are hidden unless
requested; NOT_APPLIED has no column.
"""

from collections.abc import Iterable
from typing import Any

from jobtrail.core.dates import format_display_date
from jobtrail.models.application import Application
from jobtrail.services.application_status import ApplicationStatus

BOARD_COLUMNS: dict[str, frozenset[ApplicationStatus]] = {
    "applied": frozenset({ApplicationStatus.APPLIED}),
    "interviews": frozenset(
        {
            ApplicationStatus.INITIAL_CALL,
            ApplicationStatus.FIRST_INTERVIEW,
            ApplicationStatus.SECOND_INTERVIEW,
            ApplicationStatus.THIRD_INTERVIEW,
        }
    ),
    "negotiations": frozenset({ApplicationStatus.NEGOTIATIONS}),
}


def column_for(status: ApplicationStatus) -> str | None:
    """Board column key of a status, or None if it has no column."""
    for key, statuses in BOARD_COLUMNS.items():
        if status in statuses:
            return key
    return None


def build_card(application: Application) -> dict[str, Any]:
    """Card for one application.

    ``display_date`` is the date of the stage matching the current status,
    e.g. the first interview date for FIRST_INTERVIEW.
    """
    status = application.status_enum
    stage = status.stage
    stage_date = getattr(application, stage.date_field) if stage else None
    return {
        "id": application.id,
        "company": application.company,
        "position": application.position,
        "pay": application.pay,
        "status": status.value,
        "status_label": status.label,
        "display_date": format_display_date(stage_date),
    }


def build_board(
    applications: Iterable[Application],
    include_hidden: bool = False,
) -> dict[str, Any]:
    """Group applications into board columns.

    Args:
        applications: Applications in display order.
        include_hidden: Also place hidden applications in a "hidden" column.

    Returns:
        Dict with ``columns`` (column key -> cards), ``stats`` (card count per
        column, visible applications only) and ``hidden_count``.
    """
    columns: dict[str, list[dict[str, Any]]] = {key: [] for key in BOARD_COLUMNS}
    hidden: list[dict[str, Any]] = []

    for application in applications:
        status = application.status_enum
        if status.is_hidden:
            hidden.append(build_card(application))
            continue
        key = column_for(status)
        if key is not None:
            columns[key].append(build_card(application))

    board: dict[str, Any] = {
        "columns": columns,
        "stats": {key: len(cards) for key, cards in columns.items()},
        "hidden_count": len(hidden),
    }
    if include_hidden:
        board["columns"] = {**columns, "hidden": hidden}
    return board
