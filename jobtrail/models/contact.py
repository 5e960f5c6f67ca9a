"""Contact model - people connected to an application.

At most one contact per application carries ``is_primary``; the flag is
switched by ``jobtrail.services.contact_service.set_primary_contact``.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jobtrail.models.base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from jobtrail.models.application import Application


class Contact(Base, IdMixin, TimestampMixin):
    """Recruiter, hiring manager or interviewer for an application."""

    __tablename__ = "contacts"

    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_primary: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=text("false"),
        nullable=False,
    )

    __table_args__ = (Index("idx_contact_application", "application_id"),)

    # Relationships
    application: Mapped["Application"] = relationship(
        "Application",
        back_populates="contacts",
    )
