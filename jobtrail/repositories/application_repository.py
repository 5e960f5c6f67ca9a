"""Repository for Application CRUD operations.

Persistence for the applications table. Children (contacts, timeline
events, documents) are eager-loaded with ``selectinload`` because lazy
loads are not available on an AsyncSession.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobtrail.models.application import Application
from jobtrail.services.application_status import HIDDEN_STATUSES, ApplicationStatus

_HIDDEN_VALUES = tuple(status.value for status in HIDDEN_STATUSES)


def _with_children():
    return (
        selectinload(Application.contacts),
        selectinload(Application.timeline_events),
        selectinload(Application.documents),
    )


class ApplicationRepository:
    """Stateless repository for Application table operations.

    All methods are static. Pass an AsyncSession for every call so the
    caller controls transaction boundaries.
    """

    @staticmethod
    async def create(db: AsyncSession, values: dict[str, Any]) -> Application:
        """Insert a new application.

        Args:
            db: Async database session.
            values: Column values; absent columns take model defaults.

        Returns:
            Created Application with generated id and timestamps.
        """
        application = Application(**values)
        db.add(application)
        await db.flush()
        return application

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        application_id: str,
        *,
        for_update: bool = False,
    ) -> Application | None:
        """Fetch an application without its children.

        Args:
            db: Async database session.
            application_id: Application id.
            for_update: Lock the row until the transaction ends. Ignored by
                dialects without row locks (SQLite).

        Returns:
            Application if found, None otherwise.
        """
        stmt = select(Application).where(Application.id == application_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_children(
        db: AsyncSession,
        application_id: str,
    ) -> Application | None:
        """Fetch an application with contacts, timeline events and documents.

        Always re-reads from the database so that children added in the
        current session are included.
        """
        stmt = (
            select(Application)
            .where(Application.id == application_id)
            .options(*_with_children())
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_all(
        db: AsyncSession,
        *,
        status: ApplicationStatus | None = None,
        include_hidden: bool = True,
    ) -> list[Application]:
        """List applications newest first, with their documents.

        Args:
            db: Async database session.
            status: Only return applications with this status.
            include_hidden: When False, leave out NOT_ACCEPTED and LOST.

        Returns:
            Applications ordered by created_at descending.
        """
        stmt = (
            select(Application)
            .options(selectinload(Application.documents))
            .order_by(Application.created_at.desc(), Application.id)
        )
        if status is not None:
            stmt = stmt.where(Application.status == status.value)
        if not include_hidden:
            stmt = stmt.where(Application.status.not_in(_HIDDEN_VALUES))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        application: Application,
        values: dict[str, Any],
    ) -> Application:
        """Apply column values to a loaded application and flush."""
        for field, value in values.items():
            setattr(application, field, value)
        await db.flush()
        return application

    @staticmethod
    async def delete(db: AsyncSession, application: Application) -> None:
        """Delete an application; children are removed with it."""
        await db.delete(application)
        await db.flush()
