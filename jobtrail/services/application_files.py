"""Application file lifecycle.

Coordinates DocumentStorage (disk) with the application and document rows.
Disk writes are not part of the database transaction, so each flow orders
its steps to keep the window for orphans small:

- upload/replace: validate -> write new file -> update row -> commit ->
  delete old file. A failed commit removes the new file again.
- remove/delete:  update or delete row -> commit -> delete file.
"""

from dataclasses import dataclass

import structlog
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.core.config import settings
from jobtrail.core.errors import NotFoundError
from jobtrail.core.file_validation import (
    read_file_with_size_limit,
    validate_file_extension,
)
from jobtrail.models.application import Application
from jobtrail.models.base import new_id
from jobtrail.repositories.application_repository import ApplicationRepository
from jobtrail.repositories.document_repository import DocumentRepository
from jobtrail.schemas.application import ApplicationPatch
from jobtrail.services.document_storage import (
    ROLE_COVER_LETTER,
    ROLE_DOCUMENT,
    ROLE_RESUME,
    DocumentStorage,
)
from jobtrail.services.timeline_sync import (
    column_values,
    load_application,
    validate_state,
)

logger = structlog.get_logger()

ROLE_FIELDS: dict[str, str] = {
    ROLE_RESUME: "resume_file",
    ROLE_COVER_LETTER: "cover_letter_file",
}


@dataclass
class PendingUpload:
    """An upload that passed validation and was read into memory."""

    role: str
    filename: str | None
    content: bytes
    label: str | None = None


async def read_upload(upload: UploadFile, role: str, label: str | None = None) -> PendingUpload:
    """Validate an upload's extension and read it within the size limit.

    Raises:
        UnsupportedFileTypeError: If the extension is not allowed.
        ValidationError: If the file is too large.
    """
    validate_file_extension(upload.filename, role)
    content = await read_file_with_size_limit(upload, settings.max_upload_size_bytes)
    return PendingUpload(role=role, filename=upload.filename, content=content, label=label)


async def _get_application(db: AsyncSession, application_id: str) -> Application:
    application = await ApplicationRepository.get_by_id(db, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)
    return application


async def create_application_with_files(
    db: AsyncSession,
    storage: DocumentStorage,
    patch: ApplicationPatch,
    uploads: list[PendingUpload],
) -> Application:
    """Create an application together with its uploaded files.

    All uploads must already be validated (see ``read_upload``). Files are
    written first, then the application and document rows are committed
    together; if that fails, the written files are removed.

    Args:
        db: Async database session.
        storage: File storage.
        patch: Application fields.
        uploads: Resume, cover letter and additional documents.

    Returns:
        The created application with its children.

    Raises:
        ValidationError: If company/position are missing or a stage is
            completed without a date.
    """
    values = column_values(patch)
    validate_state(values)

    application_id = new_id()
    saved: list[str] = []
    documents: list[tuple[str, str]] = []
    try:
        for upload in uploads:
            reference = storage.save(
                application_id, upload.role, upload.content, upload.filename
            )
            saved.append(reference)
            if upload.role in ROLE_FIELDS:
                values[ROLE_FIELDS[upload.role]] = reference
            else:
                documents.append((upload.label or upload.filename or "Document", reference))

        await ApplicationRepository.create(db, {**values, "id": application_id})
        for label, reference in documents:
            await DocumentRepository.create(
                db,
                application_id=application_id,
                label=label,
                file_path=reference,
            )
        await db.commit()
    except Exception:
        for reference in saved:
            storage.delete(reference)
        storage.delete_application_files(application_id)
        raise

    logger.info(
        "Application created",
        application_id=application_id,
        files=len(saved),
    )
    return await load_application(db, application_id)


async def replace_application_file(
    db: AsyncSession,
    storage: DocumentStorage,
    application_id: str,
    upload: PendingUpload,
) -> Application:
    """Store a new resume or cover letter and drop the previous one.

    Raises:
        NotFoundError: If the application does not exist.
    """
    application = await _get_application(db, application_id)
    field = ROLE_FIELDS[upload.role]
    old_reference = getattr(application, field)

    reference = storage.save(application_id, upload.role, upload.content, upload.filename)
    try:
        await ApplicationRepository.update(db, application, {field: reference})
        await db.commit()
    except Exception:
        storage.delete(reference)
        raise

    storage.delete(old_reference)
    return await load_application(db, application_id)


async def remove_application_file(
    db: AsyncSession,
    storage: DocumentStorage,
    application_id: str,
    role: str,
) -> Application:
    """Clear the resume or cover letter reference and delete the file."""
    application = await _get_application(db, application_id)
    field = ROLE_FIELDS[role]
    old_reference = getattr(application, field)

    await ApplicationRepository.update(db, application, {field: None})
    await db.commit()

    storage.delete(old_reference)
    return await load_application(db, application_id)


async def add_document(
    db: AsyncSession,
    storage: DocumentStorage,
    application_id: str,
    upload: PendingUpload,
) -> Application:
    """Attach an additional document to an application."""
    await _get_application(db, application_id)

    reference = storage.save(application_id, ROLE_DOCUMENT, upload.content, upload.filename)
    try:
        await DocumentRepository.create(
            db,
            application_id=application_id,
            label=upload.label or upload.filename or "Document",
            file_path=reference,
        )
        await db.commit()
    except Exception:
        storage.delete(reference)
        raise

    return await load_application(db, application_id)


async def delete_document(
    db: AsyncSession,
    storage: DocumentStorage,
    application_id: str,
    document_id: str,
) -> Application:
    """Delete an additional document row and its file.

    Raises:
        NotFoundError: If the document does not belong to the application.
    """
    await _get_application(db, application_id)
    document = await DocumentRepository.get_for_application(db, application_id, document_id)
    if document is None:
        raise NotFoundError("Document", document_id)

    reference = document.file_path
    await DocumentRepository.delete(db, document)
    await db.commit()

    storage.delete(reference)
    return await load_application(db, application_id)


async def delete_application(
    db: AsyncSession,
    storage: DocumentStorage,
    application_id: str,
) -> None:
    """Delete an application, its children and all of its files.

    Raises:
        NotFoundError: If the application does not exist.
    """
    application = await load_application(db, application_id)
    references = [
        application.resume_file,
        application.cover_letter_file,
        *(document.file_path for document in application.documents),
    ]

    await ApplicationRepository.delete(db, application)
    await db.commit()

    for reference in references:
        storage.delete(reference)
    storage.delete_application_files(application_id)
    logger.info("Application deleted", application_id=application_id)
