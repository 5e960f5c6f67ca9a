"""Contacts API router.

People connected to an application. Creating or updating a contact with
``is_primary`` makes it the application's only primary contact.
"""

from fastapi import APIRouter

from jobtrail.api.deps import DbSession
from jobtrail.api.v1.serializers import contact_to_dict
from jobtrail.core.errors import NotFoundError, ValidationError
from jobtrail.core.responses import DataResponse, ListResponse, PaginationMeta
from jobtrail.repositories.contact_repository import ContactRepository
from jobtrail.schemas.contact import CreateContactRequest, UpdateContactRequest
from jobtrail.services import contact_service

router = APIRouter()


@router.get("")
async def list_contacts(
    db: DbSession,
    application_id: str | None = None,
) -> ListResponse[dict]:
    """List the contacts of one application, newest first.

    Raises:
        ValidationError: If ``application_id`` is missing.
    """
    if not application_id:
        raise ValidationError(
            "application_id is required",
            details=[{"field": "application_id", "error": "REQUIRED"}],
        )
    contacts = await ContactRepository.list_for_application(db, application_id)
    return ListResponse(
        data=[contact_to_dict(c) for c in contacts],
        meta=PaginationMeta.single_page(len(contacts)),
    )


@router.post("", status_code=201)
async def create_contact(
    request: CreateContactRequest,
    db: DbSession,
) -> DataResponse[dict]:
    """Create a contact.

    Raises:
        NotFoundError: If the application does not exist.
    """
    contact = await contact_service.create_contact(db, request)
    return DataResponse(data=contact_to_dict(contact))


@router.put("/{contact_id}")
async def update_contact(
    contact_id: str,
    request: UpdateContactRequest,
    db: DbSession,
) -> DataResponse[dict]:
    """Partially update a contact.

    Raises:
        NotFoundError: If the contact does not exist.
    """
    contact = await contact_service.update_contact(db, contact_id, request)
    return DataResponse(data=contact_to_dict(contact))


@router.delete("/{contact_id}")
async def delete_contact(contact_id: str, db: DbSession) -> DataResponse[dict]:
    """Delete a contact.

    Raises:
        NotFoundError: If the contact does not exist.
    """
    contact = await ContactRepository.get_by_id(db, contact_id)
    if contact is None:
        raise NotFoundError("Contact", contact_id)
    await ContactRepository.delete(db, contact)
    await db.commit()
    return DataResponse(data={"message": "Contact deleted successfully"})
