"""Create application children: contacts, timeline events, documents.

Revision ID: 002_application_children
Revises: 001_applications
Create Date: 2026-10-18

Every child row is deleted with its application. Timeline event ids are
String(128) to hold deterministic system ids
("<application id>-system-<stage>-<milestone>").
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "002_application_children"
down_revision: Union[str, None] = "001_applications"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "contacts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("application_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("position", sa.String(255), nullable=True),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "is_primary",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["application_id"], ["applications.id"], ondelete="CASCADE"
        ),
    )
    op.create_index("idx_contact_application", "contacts", ["application_id"])

    op.create_table(
        "timeline_events",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("application_id", sa.String(36), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "is_completed",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["application_id"], ["applications.id"], ondelete="CASCADE"
        ),
    )
    op.create_index(
        "idx_timelineevent_application", "timeline_events", ["application_id"]
    )
    op.create_index(
        "idx_timelineevent_date",
        "timeline_events",
        ["application_id", "event_date"],
    )

    op.create_table(
        "application_documents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("application_id", sa.String(36), nullable=False),
        sa.Column("label", sa.String(255), nullable=True),
        sa.Column("file_path", sa.String(500), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["application_id"], ["applications.id"], ondelete="CASCADE"
        ),
    )
    op.create_index(
        "idx_document_application", "application_documents", ["application_id"]
    )


def downgrade() -> None:
    op.drop_index("idx_document_application", table_name="application_documents")
    op.drop_table("application_documents")
    op.drop_index("idx_timelineevent_date", table_name="timeline_events")
    op.drop_index("idx_timelineevent_application", table_name="timeline_events")
    op.drop_table("timeline_events")
    op.drop_index("idx_contact_application", table_name="contacts")
    op.drop_table("contacts")
