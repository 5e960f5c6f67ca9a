"""ApplicationDocument model - additional uploaded files."""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobtrail.models.base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from jobtrail.models.application import Application


class ApplicationDocument(Base, IdMixin, TimestampMixin):
    """Extra document (portfolio, references, ...) attached to an application.

    ``file_path`` is the storage reference returned by
    ``jobtrail.services.document_storage.DocumentStorage.save``.
    """

    __tablename__ = "application_documents"

    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_path: Mapped[str] = mapped_column(String(500), nullable=False)

    __table_args__ = (Index("idx_document_application", "application_id"),)

    # Relationships
    application: Mapped["Application"] = relationship(
        "Application",
        back_populates="documents",
    )
