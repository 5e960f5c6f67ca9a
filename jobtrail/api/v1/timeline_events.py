"""Timeline events API router.

Manually recorded events (follow-ups, offers, notes). Events derived from
stage changes are written by the application update flow.
"""

import structlog
from fastapi import APIRouter

from jobtrail.api.deps import DbSession
from jobtrail.api.v1.serializers import timeline_event_to_dict
from jobtrail.core.errors import NotFoundError, ValidationError
from jobtrail.core.responses import DataResponse, ListResponse, PaginationMeta
from jobtrail.repositories.application_repository import ApplicationRepository
from jobtrail.repositories.timeline_repository import TimelineEventRepository
from jobtrail.schemas.timeline import CreateTimelineEventRequest

logger = structlog.get_logger()

router = APIRouter()


@router.get("")
async def list_timeline_events(
    db: DbSession,
    application_id: str | None = None,
) -> ListResponse[dict]:
    """List stored timeline events of one application, most recent first.

    Raises:
        ValidationError: If ``application_id`` is missing.
    """
    if not application_id:
        raise ValidationError(
            "application_id is required",
            details=[{"field": "application_id", "error": "REQUIRED"}],
        )
    events = await TimelineEventRepository.list_for_application(db, application_id)
    return ListResponse(
        data=[timeline_event_to_dict(e) for e in events],
        meta=PaginationMeta.single_page(len(events)),
    )


@router.post("", status_code=201)
async def create_timeline_event(
    request: CreateTimelineEventRequest,
    db: DbSession,
) -> DataResponse[dict]:
    """Record a timeline event.

    Raises:
        NotFoundError: If the application does not exist.
    """
    if await ApplicationRepository.get_by_id(db, request.application_id) is None:
        raise NotFoundError("Application", request.application_id)

    event = await TimelineEventRepository.create(
        db,
        {
            "application_id": request.application_id,
            "type": request.type,
            "title": request.title,
            "description": request.description,
            "event_date": request.resolved_event_date(),
            "is_completed": request.is_completed,
        },
    )
    await db.commit()
    logger.info(
        "Timeline event created",
        application_id=request.application_id,
        event_id=event.id,
        type=event.type,
    )
    return DataResponse(data=timeline_event_to_dict(event))


@router.delete("/{event_id}")
async def delete_timeline_event(event_id: str, db: DbSession) -> DataResponse[dict]:
    """Delete a timeline event.

    Raises:
        NotFoundError: If the event does not exist.
    """
    event = await TimelineEventRepository.get_by_id(db, event_id)
    if event is None:
        raise NotFoundError("Timeline event", event_id)
    await TimelineEventRepository.delete(db, event)
    await db.commit()
    return DataResponse(data={"message": "Timeline event deleted successfully"})
