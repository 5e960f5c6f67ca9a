"""Repository for TimelineEvent operations."""

from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.models.application import TimelineEvent


class TimelineEventRepository:
    """Stateless repository for TimelineEvent table operations.

    All methods are static. Pass an AsyncSession for every call so the
    caller controls transaction boundaries.
    """

    @staticmethod
    async def create(db: AsyncSession, values: dict[str, Any]) -> TimelineEvent:
        event = TimelineEvent(**values)
        db.add(event)
        await db.flush()
        return event

    @staticmethod
    async def get_by_id(db: AsyncSession, event_id: str) -> TimelineEvent | None:
        result = await db.execute(
            select(TimelineEvent).where(TimelineEvent.id == event_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_ids(
        db: AsyncSession, event_ids: Iterable[str]
    ) -> dict[str, TimelineEvent]:
        """Stored events among ``event_ids``, keyed by id."""
        ids = list(event_ids)
        if not ids:
            return {}
        result = await db.execute(
            select(TimelineEvent).where(TimelineEvent.id.in_(ids))
        )
        return {event.id: event for event in result.scalars().all()}

    @staticmethod
    async def list_for_application(
        db: AsyncSession,
        application_id: str,
    ) -> list[TimelineEvent]:
        """Events of one application, most recent event date first."""
        stmt = (
            select(TimelineEvent)
            .where(TimelineEvent.application_id == application_id)
            .order_by(TimelineEvent.event_date.desc(), TimelineEvent.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        event: TimelineEvent,
        values: dict[str, Any],
    ) -> TimelineEvent:
        for field, value in values.items():
            setattr(event, field, value)
        await db.flush()
        return event

    @staticmethod
    async def delete(db: AsyncSession, event: TimelineEvent) -> None:
        await db.delete(event)
        await db.flush()
