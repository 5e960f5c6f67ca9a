"""Create applications table.

Revision ID: 001_applications
Revises:
Create Date: 2026-10-18

Root table of the tracker: one row per job application with its pipeline
stage dates, completion flags and per-stage notes.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_applications"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_STAGES = (
    "initial_call",
    "first_interview",
    "second_interview",
    "third_interview",
    "negotiations",
)


def upgrade() -> None:
    stage_columns = []
    for stage in _STAGES:
        stage_columns.extend(
            [
                sa.Column(f"{stage}_date", sa.DateTime(timezone=True), nullable=True),
                sa.Column(
                    f"{stage}_completed",
                    sa.Boolean(),
                    nullable=False,
                    server_default=sa.text("false"),
                ),
                sa.Column(f"{stage}_notes", sa.Text(), nullable=True),
            ]
        )

    op.create_table(
        "applications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("company", sa.String(255), nullable=False),
        sa.Column("position", sa.String(255), nullable=False),
        sa.Column("pay", sa.String(100), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'NOT_APPLIED'"),
        ),
        sa.Column("applied_date", sa.DateTime(timezone=True), nullable=True),
        *stage_columns,
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("resume_file", sa.String(500), nullable=True),
        sa.Column("cover_letter_file", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('NOT_APPLIED', 'APPLIED', 'INITIAL_CALL', 'FIRST_INTERVIEW', "
            "'SECOND_INTERVIEW', 'THIRD_INTERVIEW', 'NEGOTIATIONS', 'NOT_ACCEPTED', 'LOST')",
            name="ck_application_status",
        ),
    )
    op.create_index("idx_application_created", "applications", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_application_created", table_name="applications")
    op.drop_table("applications")
