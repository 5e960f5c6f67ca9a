"""Repository for Contact CRUD operations."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.models.contact import Contact


class ContactRepository:
    """Stateless repository for Contact table operations.

    All methods are static. Pass an AsyncSession for every call so the
    caller controls transaction boundaries.
    """

    @staticmethod
    async def create(db: AsyncSession, values: dict[str, Any]) -> Contact:
        contact = Contact(**values)
        db.add(contact)
        await db.flush()
        return contact

    @staticmethod
    async def get_by_id(db: AsyncSession, contact_id: str) -> Contact | None:
        result = await db.execute(select(Contact).where(Contact.id == contact_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_application(
        db: AsyncSession,
        application_id: str,
    ) -> list[Contact]:
        """Contacts of one application, newest first."""
        stmt = (
            select(Contact)
            .where(Contact.application_id == application_id)
            .order_by(Contact.created_at.desc(), Contact.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def update(
        db: AsyncSession,
        contact: Contact,
        values: dict[str, Any],
    ) -> Contact:
        for field, value in values.items():
            setattr(contact, field, value)
        await db.flush()
        return contact

    @staticmethod
    async def set_primary(
        db: AsyncSession,
        application_id: str,
        contact_id: str,
    ) -> None:
        """Mark one contact primary and clear the flag on its siblings.

        A single UPDATE over all contacts of the application, so no reader
        ever sees two primaries.

        Args:
            db: Async database session.
            application_id: Owning application.
            contact_id: Contact that becomes primary.
        """
        stmt = (
            update(Contact)
            .where(Contact.application_id == application_id)
            .values(is_primary=(Contact.id == contact_id))
            .execution_options(synchronize_session=False)
        )
        await db.execute(stmt)

    @staticmethod
    async def delete(db: AsyncSession, contact: Contact) -> None:
        await db.delete(contact)
        await db.flush()
