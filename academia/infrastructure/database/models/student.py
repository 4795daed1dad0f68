# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student placement tables.

History rows carry a per-student position so that ordering survives equal
timestamps; (student_id, position) is unique, which also rejects two writers
appending the same slot.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academia.infrastructure.database.models.base import Base, TimestampMixin
from academia.utils.datetime import utc_now


class StudentModel(Base, TimestampMixin):
    """Placement columns of a student record."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(
        postgresql.UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    school_id: Mapped[str | None] = mapped_column(
        postgresql.UUID(as_uuid=False), nullable=True, index=True
    )
    stage: Mapped[str | None] = mapped_column(String(30), nullable=True)
    grade_code: Mapped[str] = mapped_column(Text, nullable=False)
    stream_section: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    graduation_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    clearance_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    target_school_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    exit_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    clearance_documents: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    transfer_records: Mapped[list["StudentTransferRecordModel"]] = relationship(
        back_populates="student",
        order_by="StudentTransferRecordModel.position",
        lazy="selectin",
    )
    promotion_records: Mapped[list["StudentPromotionRecordModel"]] = relationship(
        back_populates="student",
        order_by="StudentPromotionRecordModel.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<Student(id={self.id}, grade={self.grade_code}, "
            f"section={self.stream_section}, version={self.version})>"
        )


class StudentTransferRecordModel(Base):
    """One row per committed transfer."""

    __tablename__ = "student_transfer_records"
    __table_args__ = (
        UniqueConstraint("student_id", "position", name="uq_student_transfer_position"),
    )

    id: Mapped[str] = mapped_column(
        postgresql.UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    student_id: Mapped[str] = mapped_column(
        postgresql.UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    from_grade: Mapped[str] = mapped_column(Text, nullable=False)
    to_grade: Mapped[str] = mapped_column(Text, nullable=False)
    from_section: Mapped[str] = mapped_column(Text, nullable=False)
    to_section: Mapped[str | None] = mapped_column(Text, nullable=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    target_school_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    performed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    student: Mapped[StudentModel] = relationship(back_populates="transfer_records")


class StudentPromotionRecordModel(Base):
    """One row per committed promotion."""

    __tablename__ = "student_promotion_records"
    __table_args__ = (
        UniqueConstraint("student_id", "position", name="uq_student_promotion_position"),
    )

    id: Mapped[str] = mapped_column(
        postgresql.UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    student_id: Mapped[str] = mapped_column(
        postgresql.UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    from_grade: Mapped[str] = mapped_column(Text, nullable=False)
    to_grade: Mapped[str] = mapped_column(Text, nullable=False)
    academic_year: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    performed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    student: Mapped[StudentModel] = relationship(back_populates="promotion_records")
