"""Tests for file validation and local document storage."""

import io
from pathlib import Path

import pytest
from fastapi import UploadFile

from jobtrail.core.errors import UnsupportedFileTypeError, ValidationError
from jobtrail.core.file_validation import (
    read_file_with_size_limit,
    validate_file_extension,
)
from jobtrail.services.document_storage import DocumentStorage


class TestValidateFileExtension:
    @pytest.mark.parametrize("filename", ["cv.pdf", "cv.DOC", "letter.Docx"])
    def test_allowed_extensions_case_insensitive(self, filename):
        assert validate_file_extension(filename) in {".pdf", ".doc", ".docx"}

    @pytest.mark.parametrize("filename", ["photo.png", "notes.txt", "noextension", None])
    def test_other_extensions_are_rejected(self, filename):
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            validate_file_extension(filename, "resume")

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "UNSUPPORTED_FILE_TYPE"
        assert "resume" in exc_info.value.message


class TestReadFileWithSizeLimit:
    @pytest.mark.asyncio
    async def test_reads_small_file(self):
        upload = UploadFile(file=io.BytesIO(b"%PDF-1.4 hello"), filename="cv.pdf")

        assert await read_file_with_size_limit(upload, max_size=1024) == b"%PDF-1.4 hello"

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 2048), filename="cv.pdf")

        with pytest.raises(ValidationError, match="File too large"):
            await read_file_with_size_limit(upload, max_size=1024)


class TestDocumentStorage:
    def test_save_writes_under_application_dir(self, tmp_path: Path):
        storage = DocumentStorage(tmp_path)

        reference = storage.save("app-1", "resume", b"content", "My CV.PDF")

        assert reference.startswith("/uploads/app-1/resume-")
        assert reference.endswith(".pdf")
        stored = storage.resolve(reference)
        assert stored is not None
        assert stored.parent == tmp_path / "app-1"
        assert stored.read_bytes() == b"content"

    def test_save_rejects_before_writing(self, tmp_path: Path):
        storage = DocumentStorage(tmp_path)

        with pytest.raises(UnsupportedFileTypeError):
            storage.save("app-1", "resume", b"content", "photo.png")

        assert not (tmp_path / "app-1").exists()

    def test_delete_removes_file(self, tmp_path: Path):
        storage = DocumentStorage(tmp_path)
        reference = storage.save("app-1", "document", b"content", "portfolio.pdf")

        storage.delete(reference)

        assert not storage.resolve(reference).exists()

    def test_delete_missing_file_is_ignored(self, tmp_path: Path):
        storage = DocumentStorage(tmp_path)

        storage.delete("/uploads/app-1/resume-gone.pdf")
        storage.delete(None)

    def test_delete_propagates_other_os_errors(self, tmp_path: Path):
        storage = DocumentStorage(tmp_path)
        # A directory where a file is expected cannot be unlinked
        (tmp_path / "app-1" / "resume-dir.pdf").mkdir(parents=True)

        with pytest.raises(OSError):
            storage.delete("/uploads/app-1/resume-dir.pdf")

    def test_references_outside_uploads_are_not_resolved(self, tmp_path: Path):
        storage = DocumentStorage(tmp_path)

        assert storage.resolve("/etc/passwd") is None
        assert storage.resolve("/uploads/../secret.pdf") is None

    def test_delete_application_files_removes_directory(self, tmp_path: Path):
        storage = DocumentStorage(tmp_path)
        storage.save("app-1", "resume", b"content", "cv.pdf")

        storage.delete_application_files("app-1")
        storage.delete_application_files("app-1")

        assert not (tmp_path / "app-1").exists()
