"""Model -> API response dict conversion.

Stage dates go out as ``YYYY-MM-DD`` (UTC calendar day); timestamps as
ISO 8601.
"""

from typing import Any

from jobtrail.core.dates import to_date_string
from jobtrail.models import Application, ApplicationDocument, Contact, TimelineEvent
from jobtrail.schemas.application import DATE_FIELDS, FLAG_FIELDS, STAGE_NOTE_FIELDS


def contact_to_dict(contact: Contact) -> dict[str, Any]:
    return {
        "id": contact.id,
        "application_id": contact.application_id,
        "name": contact.name,
        "email": contact.email,
        "phone": contact.phone,
        "position": contact.position,
        "department": contact.department,
        "notes": contact.notes,
        "is_primary": contact.is_primary,
        "created_at": contact.created_at.isoformat(),
        "updated_at": contact.updated_at.isoformat(),
    }


def timeline_event_to_dict(event: TimelineEvent) -> dict[str, Any]:
    return {
        "id": event.id,
        "application_id": event.application_id,
        "type": event.type,
        "title": event.title,
        "description": event.description,
        "event_date": event.event_date.isoformat(),
        "is_completed": event.is_completed,
        "created_at": event.created_at.isoformat(),
        "updated_at": event.updated_at.isoformat(),
    }


def document_to_dict(document: ApplicationDocument) -> dict[str, Any]:
    return {
        "id": document.id,
        "application_id": document.application_id,
        "label": document.label,
        "file_path": document.file_path,
        "created_at": document.created_at.isoformat(),
        "updated_at": document.updated_at.isoformat(),
    }


def application_to_dict(
    application: Application,
    *,
    include_children: bool = True,
) -> dict[str, Any]:
    """Convert an Application to its API representation.

    Args:
        application: Application with ``documents`` loaded, and with
            ``contacts`` and ``timeline_events`` loaded when
            ``include_children`` is True.
        include_children: Include contacts and timeline events.

    Returns:
        Dict with application data for the API response.
    """
    status = application.status_enum
    data: dict[str, Any] = {
        "id": application.id,
        "company": application.company,
        "position": application.position,
        "pay": application.pay,
        "status": status.value,
        "status_label": status.label,
    }
    for field in DATE_FIELDS:
        data[field] = to_date_string(getattr(application, field))
    for field in FLAG_FIELDS:
        data[field] = getattr(application, field)
    for field in STAGE_NOTE_FIELDS:
        data[field] = getattr(application, field)
    data.update(
        {
            "notes": application.notes,
            "resume_file": application.resume_file,
            "cover_letter_file": application.cover_letter_file,
            "created_at": application.created_at.isoformat(),
            "updated_at": application.updated_at.isoformat(),
            "documents": [document_to_dict(d) for d in application.documents],
        }
    )
    if include_children:
        data["contacts"] = [contact_to_dict(c) for c in application.contacts]
        data["timeline_events"] = [
            timeline_event_to_dict(e) for e in application.timeline_events
        ]
    return data
