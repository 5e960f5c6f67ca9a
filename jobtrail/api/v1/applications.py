"""Applications API router.

CRUD for job applications plus the board, the projected timeline and the
board move. POST and PUT accept either JSON or multipart form data; the
multipart PUT carries an ``action`` naming a file operation.
"""

import json
from typing import Any

from fastapi import APIRouter, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import FormData, UploadFile

from jobtrail.api.deps import DbSession, Storage
from jobtrail.api.v1.serializers import application_to_dict
from jobtrail.core.errors import ValidationError
from jobtrail.core.responses import DataResponse, ListResponse, PaginationMeta
from jobtrail.models.application import Application
from jobtrail.repositories.application_repository import ApplicationRepository
from jobtrail.schemas.application import ApplicationPatch, MoveApplicationRequest
from jobtrail.services import application_files, timeline_sync
from jobtrail.services.application_status import ApplicationStatus
from jobtrail.services.board import build_board
from jobtrail.services.document_storage import (
    ROLE_COVER_LETTER,
    ROLE_DOCUMENT,
    ROLE_RESUME,
)
from jobtrail.services.timeline_projection import project_timeline

router = APIRouter()

_FILE_FIELDS = frozenset({"resume_file", "cover_letter_file", "document_files"})

# =============================================================================
# Helper Functions
# =============================================================================


_FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _is_form(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith(_FORM_CONTENT_TYPES)


def _errors_to_details(exc: PydanticValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or "body",
            "error": error["msg"],
        }
        for error in exc.errors()
    ]


def _parse_patch(data: Any) -> ApplicationPatch:
    """Validate raw request data into an ApplicationPatch.

    Raises:
        ValidationError: If the body is not an object or a field is invalid.
    """
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return ApplicationPatch.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid application data",
            details=_errors_to_details(exc),
        ) from exc


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Request body is not valid JSON") from exc


def _form_fields(form: FormData) -> dict[str, str]:
    """Plain text fields of a form, without file parts and the action."""
    return {
        key: value
        for key, value in form.multi_items()
        if isinstance(value, str) and key not in _FILE_FIELDS and key != "action"
    }


def _form_file(form: FormData, key: str) -> UploadFile | None:
    value = form.get(key)
    if isinstance(value, UploadFile) and value.filename:
        return value
    return None


def _form_text(form: FormData, key: str) -> str | None:
    value = form.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_status_filter(value: str | None) -> ApplicationStatus | None:
    if value is None or not value.strip():
        return None
    try:
        return ApplicationStatus(value.strip())
    except ValueError as exc:
        raise ValidationError(
            f"Unknown status '{value}'",
            details=[{"field": "status", "error": "INVALID_STATUS"}],
        ) from exc


# =============================================================================
# Collection
# =============================================================================


@router.get("")
async def list_applications(
    db: DbSession,
    status: str | None = None,
    include_hidden: bool = True,
) -> ListResponse[dict]:
    """List applications, newest first, with their documents.

    Args:
        db: Database session (injected).
        status: Only return applications with this status.
        include_hidden: Include NOT_ACCEPTED and LOST applications.

    Returns:
        ListResponse with applications and pagination meta.
    """
    applications = await ApplicationRepository.list_all(
        db,
        status=_parse_status_filter(status),
        include_hidden=include_hidden,
    )
    return ListResponse(
        data=[application_to_dict(a, include_children=False) for a in applications],
        meta=PaginationMeta.single_page(len(applications)),
    )


@router.post("", status_code=201)
async def create_application(
    request: Request,
    db: DbSession,
    storage: Storage,
) -> DataResponse[dict]:
    """Create an application from JSON or multipart form data.

    The multipart form may carry ``resume_file``, ``cover_letter_file`` and
    repeated ``document_files`` with matching ``document_labels``. Every
    file is validated before anything is written.

    Raises:
        ValidationError: If company or position is missing, or a file is
            too large.
        UnsupportedFileTypeError: If a file extension is not allowed.
    """
    if not _is_form(request):
        patch = _parse_patch(await _read_json(request))
        application = await timeline_sync.create_application(db, patch)
        return DataResponse(data=application_to_dict(application))

    form = await request.form()
    patch = _parse_patch(
        {k: v for k, v in _form_fields(form).items() if k != "document_labels"}
    )

    uploads: list[application_files.PendingUpload] = []
    resume = _form_file(form, "resume_file")
    if resume is not None:
        uploads.append(await application_files.read_upload(resume, ROLE_RESUME))
    cover_letter = _form_file(form, "cover_letter_file")
    if cover_letter is not None:
        uploads.append(
            await application_files.read_upload(cover_letter, ROLE_COVER_LETTER)
        )

    labels = [v for v in form.getlist("document_labels") if isinstance(v, str)]
    document_files = [
        v for v in form.getlist("document_files") if isinstance(v, UploadFile) and v.filename
    ]
    for index, upload in enumerate(document_files):
        label = labels[index].strip() if index < len(labels) else ""
        uploads.append(
            await application_files.read_upload(upload, ROLE_DOCUMENT, label or None)
        )

    application = await application_files.create_application_with_files(
        db, storage, patch, uploads
    )
    return DataResponse(data=application_to_dict(application))


@router.get("/board")
async def get_board(
    db: DbSession,
    include_hidden: bool = False,
) -> DataResponse[dict]:
    """Applications grouped into kanban columns with per-column counts."""
    applications = await ApplicationRepository.list_all(db)
    return DataResponse(data=build_board(applications, include_hidden=include_hidden))


# =============================================================================
# Item
# =============================================================================


@router.get("/{application_id}")
async def get_application(application_id: str, db: DbSession) -> DataResponse[dict]:
    """Get an application with contacts, timeline events and documents.

    Raises:
        NotFoundError: If the application does not exist.
    """
    application = await timeline_sync.load_application(db, application_id)
    return DataResponse(data=application_to_dict(application))


@router.get("/{application_id}/timeline")
async def get_timeline(application_id: str, db: DbSession) -> ListResponse[dict]:
    """Stored and synthesized timeline events, newest first.

    Raises:
        NotFoundError: If the application does not exist.
    """
    application = await timeline_sync.load_application(db, application_id)
    events = project_timeline(application)
    return ListResponse(
        data=[event.to_dict() for event in events],
        meta=PaginationMeta.single_page(len(events)),
    )


async def _apply_file_action(
    form: FormData,
    application_id: str,
    db: DbSession,
    storage: Storage,
) -> Application:
    action = _form_text(form, "action")

    if action in ("uploadResume", "uploadCoverLetter", "uploadAdditional"):
        upload = _form_file(form, "file")
        if upload is None:
            raise ValidationError(
                "A file is required",
                details=[{"field": "file", "error": "REQUIRED"}],
            )
        if action == "uploadAdditional":
            pending = await application_files.read_upload(
                upload, ROLE_DOCUMENT, _form_text(form, "label")
            )
            return await application_files.add_document(
                db, storage, application_id, pending
            )
        role = ROLE_RESUME if action == "uploadResume" else ROLE_COVER_LETTER
        pending = await application_files.read_upload(upload, role)
        return await application_files.replace_application_file(
            db, storage, application_id, pending
        )

    if action == "removeResume":
        return await application_files.remove_application_file(
            db, storage, application_id, ROLE_RESUME
        )
    if action == "removeCoverLetter":
        return await application_files.remove_application_file(
            db, storage, application_id, ROLE_COVER_LETTER
        )
    if action == "deleteDocument":
        document_id = _form_text(form, "document_id")
        if document_id is None:
            raise ValidationError(
                "document_id is required",
                details=[{"field": "document_id", "error": "REQUIRED"}],
            )
        return await application_files.delete_document(
            db, storage, application_id, document_id
        )

    raise ValidationError(
        f"Unknown action '{action}'" if action else "An action is required",
        details=[{"field": "action", "error": "INVALID_ACTION"}],
    )


@router.put("/{application_id}")
async def update_application(
    application_id: str,
    request: Request,
    db: DbSession,
    storage: Storage,
) -> DataResponse[dict]:
    """Partially update an application or run a multipart file action.

    JSON bodies are partial updates: absent fields are left unchanged and
    the implied timeline events are recorded. Multipart bodies carry an
    ``action`` (uploadResume, removeResume, uploadCoverLetter,
    removeCoverLetter, uploadAdditional, deleteDocument).

    Raises:
        NotFoundError: If the application (or document) does not exist.
        ValidationError: If the update or action is invalid.
        UnsupportedFileTypeError: If an uploaded file type is not allowed.
    """
    if _is_form(request):
        form = await request.form()
        application = await _apply_file_action(form, application_id, db, storage)
    else:
        patch = _parse_patch(await _read_json(request))
        application = await timeline_sync.apply_application_update(
            db, application_id, patch
        )
    return DataResponse(data=application_to_dict(application))


@router.post("/{application_id}/move")
async def move_application(
    application_id: str,
    body: MoveApplicationRequest,
    db: DbSession,
) -> DataResponse[dict]:
    """Move an application to another board status.

    Staged statuses stamp today's date on the matching stage.
    """
    application = await timeline_sync.move_application(db, application_id, body.status)
    return DataResponse(data=application_to_dict(application))


@router.delete("/{application_id}")
async def delete_application(
    application_id: str,
    db: DbSession,
    storage: Storage,
) -> DataResponse[dict]:
    """Delete an application, its children and its files.

    Raises:
        NotFoundError: If the application does not exist.
    """
    await application_files.delete_application(db, storage, application_id)
    return DataResponse(data={"message": "Application deleted successfully"})
