"""Local-disk storage for uploaded application documents.

Files live under ``{upload_root}/{application_id}/`` as
``{role}-{uuid}{ext}``. The reference stored on the database row is the
public path ``/uploads/{application_id}/{name}``, which the static mount in
``jobtrail.main`` serves.

Deletion is best-effort: a file that is already gone is ignored, any other
OS error propagates.
"""

import re
import shutil
import uuid
from pathlib import Path, PurePosixPath

import structlog

from jobtrail.core.config import settings
from jobtrail.core.file_validation import validate_file_extension

logger = structlog.get_logger()

UPLOADS_URL_PREFIX = "/uploads"

ROLE_RESUME = "resume"
ROLE_COVER_LETTER = "cover-letter"
ROLE_DOCUMENT = "document"

_UNSAFE_ROLE_CHARS = re.compile(r"[^a-z0-9_-]")


def _stored_name(role: str, extension: str) -> str:
    prefix = _UNSAFE_ROLE_CHARS.sub("", role.lower()) or "file"
    return f"{prefix}-{uuid.uuid4()}{extension}"


class DocumentStorage:
    """Writes and removes uploaded files below a root directory.

    Attributes:
        root: Directory holding one subdirectory per application.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def application_dir(self, application_id: str) -> Path:
        return self.root / application_id

    def resolve(self, reference: str) -> Path | None:
        """Map a ``/uploads/...`` reference to a path inside ``root``.

        Returns None for references that do not point below ``root``.
        """
        parts = PurePosixPath(reference.lstrip("/")).parts
        if len(parts) < 2 or parts[0] != UPLOADS_URL_PREFIX.strip("/"):
            return None
        if any(part in ("..", ".") for part in parts[1:]):
            return None
        return self.root.joinpath(*parts[1:])

    def save(
        self,
        application_id: str,
        role: str,
        content: bytes,
        filename: str | None,
    ) -> str:
        """Store an upload and return its reference.

        Args:
            application_id: Owning application.
            role: "resume", "cover-letter" or "document".
            content: File bytes, already size-checked.
            filename: Client filename; only its extension is kept.

        Returns:
            Reference of the form ``/uploads/{application_id}/{name}``.

        Raises:
            UnsupportedFileTypeError: If the extension is not allowed.
        """
        extension = validate_file_extension(filename, role)
        directory = self.application_dir(application_id)
        directory.mkdir(parents=True, exist_ok=True)

        name = _stored_name(role, extension)
        (directory / name).write_bytes(content)

        reference = f"{UPLOADS_URL_PREFIX}/{application_id}/{name}"
        logger.info(
            "File stored",
            application_id=application_id,
            role=role,
            reference=reference,
            size_bytes=len(content),
        )
        return reference

    def delete(self, reference: str | None) -> None:
        """Remove a stored file.

        Missing files and empty references are ignored.

        Raises:
            OSError: For any failure other than the file being absent.
        """
        if not reference:
            return
        path = self.resolve(reference)
        if path is None:
            logger.warning("Ignoring file reference outside uploads", reference=reference)
            return
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("File already absent", reference=reference)
            return
        logger.info("File removed", reference=reference)

    def delete_application_files(self, application_id: str) -> None:
        """Remove the per-application directory and anything left in it."""
        directory = self.application_dir(application_id)
        try:
            shutil.rmtree(directory)
        except FileNotFoundError:
            return
        logger.info("Upload directory removed", application_id=application_id)


def get_storage() -> DocumentStorage:
    """Dependency returning storage rooted at the configured upload root."""
    return DocumentStorage(settings.upload_root)
