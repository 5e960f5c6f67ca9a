"""Contact service - primary-flag enforcement.

At most one contact per application is primary. The switch is one UPDATE
statement committed on its own, so clearing the siblings and flagging the
target cannot be observed separately.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.core.errors import NotFoundError
from jobtrail.models.contact import Contact
from jobtrail.repositories.application_repository import ApplicationRepository
from jobtrail.repositories.contact_repository import ContactRepository
from jobtrail.schemas.contact import CreateContactRequest, UpdateContactRequest

logger = structlog.get_logger()


async def set_primary_contact(
    db: AsyncSession,
    application_id: str,
    contact_id: str,
) -> None:
    """Make ``contact_id`` the only primary contact of ``application_id``.

    Args:
        db: Async database session.
        application_id: Application owning the contacts.
        contact_id: Contact to flag; every sibling is cleared.
    """
    await ContactRepository.set_primary(db, application_id, contact_id)
    logger.info(
        "Primary contact set",
        application_id=application_id,
        contact_id=contact_id,
    )


async def create_contact(db: AsyncSession, request: CreateContactRequest) -> Contact:
    """Create a contact, switching the primary flag when requested.

    Raises:
        NotFoundError: If the application does not exist.
    """
    if await ApplicationRepository.get_by_id(db, request.application_id) is None:
        raise NotFoundError("Application", request.application_id)

    values = request.model_dump(exclude={"is_primary"})
    contact = await ContactRepository.create(db, {**values, "is_primary": False})
    if request.is_primary:
        await set_primary_contact(db, contact.application_id, contact.id)
    await db.commit()
    await db.refresh(contact)
    return contact


async def update_contact(
    db: AsyncSession,
    contact_id: str,
    request: UpdateContactRequest,
) -> Contact:
    """Partially update a contact.

    Raises:
        NotFoundError: If the contact does not exist.
    """
    contact = await ContactRepository.get_by_id(db, contact_id)
    if contact is None:
        raise NotFoundError("Contact", contact_id)

    values = request.model_dump(exclude_unset=True)
    if values.get("name") is None:
        values.pop("name", None)
    make_primary = values.pop("is_primary", None)
    if make_primary is False:
        values["is_primary"] = False

    await ContactRepository.update(db, contact, values)
    if make_primary:
        await set_primary_contact(db, contact.application_id, contact.id)
    await db.commit()
    await db.refresh(contact)
    return contact
