# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Create student placement tables.

Adds the students table with its optimistic concurrency version column and
the append-only transfer and promotion history tables.

Revision ID: 001_student_placement
Revises:
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_student_placement"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    """Create students, student_transfer_records and student_promotion_records."""

    op.create_table(
        "students",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=False),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("school_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("stage", sa.String(30), nullable=True),
        # 'primary', 'junior_secondary', 'senior_secondary'
        sa.Column("grade_code", sa.Text, nullable=False),
        sa.Column("stream_section", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), server_default="active", nullable=False),
        # 'active', 'inactive', 'graduated', 'transferred', 'withdrawn', 'suspended'
        sa.Column("graduation_year", sa.Integer, nullable=True),
        sa.Column("clearance_status", sa.String(20), nullable=True),
        sa.Column("target_school_id", sa.Text, nullable=True),
        sa.Column("exit_reason", sa.Text, nullable=True),
        sa.Column("clearance_documents", sa.JSON, server_default="[]", nullable=False),
        sa.Column("version", sa.Integer, server_default="1", nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_school_id", "students", ["school_id"])
    op.create_index(
        "ix_students_placement",
        "students",
        ["school_id", "grade_code", "stream_section", "status"],
    )

    op.create_table(
        "student_transfer_records",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=False),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("student_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        # 'internal', 'external'
        sa.Column("from_grade", sa.Text, nullable=False),
        sa.Column("to_grade", sa.Text, nullable=False),
        sa.Column("from_section", sa.Text, nullable=False),
        sa.Column("to_section", sa.Text, nullable=True),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("target_school_id", sa.Text, nullable=True),
        sa.Column("performed_by", sa.String(64), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("student_id", "position", name="uq_student_transfer_position"),
    )
    op.create_index(
        "ix_student_transfer_records_student_id",
        "student_transfer_records",
        ["student_id"],
    )

    op.create_table(
        "student_promotion_records",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=False),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("student_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("from_grade", sa.Text, nullable=False),
        sa.Column("to_grade", sa.Text, nullable=False),
        sa.Column("academic_year", sa.Text, nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("performed_by", sa.String(64), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("student_id", "position", name="uq_student_promotion_position"),
    )
    op.create_index(
        "ix_student_promotion_records_student_id",
        "student_promotion_records",
        ["student_id"],
    )


def downgrade() -> None:
    """Drop placement tables."""

    op.drop_index("ix_student_promotion_records_student_id", table_name="student_promotion_records")
    op.drop_table("student_promotion_records")
    op.drop_index("ix_student_transfer_records_student_id", table_name="student_transfer_records")
    op.drop_table("student_transfer_records")
    op.drop_index("ix_students_placement", table_name="students")
    op.drop_index("ix_students_school_id", table_name="students")
    op.drop_table("students")
