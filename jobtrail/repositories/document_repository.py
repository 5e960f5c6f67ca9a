"""Repository for ApplicationDocument operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.models.document import ApplicationDocument


class DocumentRepository:
    """Stateless repository for ApplicationDocument table operations.

    All methods are static. Pass an AsyncSession for every call so the
    caller controls transaction boundaries.
    """

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        application_id: str,
        label: str,
        file_path: str,
    ) -> ApplicationDocument:
        """Record an additional document stored for an application.

        Args:
            db: Async database session.
            application_id: Owning application.
            label: Display label (defaults to the upload's filename upstream).
            file_path: Storage reference returned by DocumentStorage.save.

        Returns:
            Created ApplicationDocument.
        """
        document = ApplicationDocument(
            application_id=application_id,
            label=label,
            file_path=file_path,
        )
        db.add(document)
        await db.flush()
        return document

    @staticmethod
    async def get_for_application(
        db: AsyncSession,
        application_id: str,
        document_id: str,
    ) -> ApplicationDocument | None:
        """Fetch a document only if it belongs to the given application."""
        stmt = select(ApplicationDocument).where(
            ApplicationDocument.id == document_id,
            ApplicationDocument.application_id == application_id,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_application(
        db: AsyncSession,
        application_id: str,
    ) -> list[ApplicationDocument]:
        stmt = (
            select(ApplicationDocument)
            .where(ApplicationDocument.application_id == application_id)
            .order_by(ApplicationDocument.created_at.desc(), ApplicationDocument.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def delete(db: AsyncSession, document: ApplicationDocument) -> None:
        await db.delete(document)
        await db.flush()
