# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy implementation of the student store.

A commit is one transaction: a conditional UPDATE of the student row
(WHERE version = expected) followed by the insert of the history row at the
next position. Zero updated rows means either the student is gone or
another writer committed first, and nothing is written.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from academia.domains.placement.errors import ConflictError, StudentNotFoundError
from academia.domains.placement.store import StudentStore
from academia.domains.placement.types import (
    ClearanceStatus,
    Mutation,
    PromotionRecord,
    StudentState,
    StudentStatus,
    TransferRecord,
    TransferType,
)
from academia.infrastructure.database.connection import session_scope
from academia.infrastructure.database.models import (
    StudentModel,
    StudentPromotionRecordModel,
    StudentTransferRecordModel,
)
from academia.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def to_transfer_record(row: StudentTransferRecordModel) -> TransferRecord:
    return TransferRecord(
        type=TransferType(row.type),
        from_grade=row.from_grade,
        to_grade=row.to_grade,
        from_section=row.from_section,
        to_section=row.to_section,
        reason=row.reason,
        timestamp=ensure_utc(row.created_at),
        performed_by=row.performed_by,
        target_school_id=row.target_school_id,
    )


def to_promotion_record(row: StudentPromotionRecordModel) -> PromotionRecord:
    return PromotionRecord(
        from_grade=row.from_grade,
        to_grade=row.to_grade,
        academic_year=row.academic_year,
        timestamp=ensure_utc(row.created_at),
        reason=row.reason,
        performed_by=row.performed_by,
    )


def to_state(row: StudentModel) -> StudentState:
    """Convert an ORM row and its loaded history into a domain snapshot."""
    return StudentState(
        id=str(row.id),
        school_id=str(row.school_id) if row.school_id else None,
        stage=row.stage,
        grade_code=row.grade_code,
        stream_section=row.stream_section,
        status=StudentStatus(row.status),
        transfer_history=tuple(
            to_transfer_record(r) for r in sorted(row.transfer_records, key=lambda r: r.position)
        ),
        promotion_history=tuple(
            to_promotion_record(r) for r in sorted(row.promotion_records, key=lambda r: r.position)
        ),
        graduation_year=row.graduation_year,
        clearance_status=ClearanceStatus(row.clearance_status) if row.clearance_status else None,
        target_school_id=row.target_school_id,
        exit_reason=row.exit_reason,
        clearance_documents=tuple(row.clearance_documents or ()),
        version=row.version,
        updated_at=ensure_utc(row.updated_at),
    )


class SqlStudentStore(StudentStore):
    """Student store backed by PostgreSQL.

    Attributes:
        sessionmaker: Factory for transactional sessions.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self.sessionmaker = sessionmaker

    async def get(self, student_id: str) -> StudentState | None:
        if not _is_uuid(student_id):
            return None
        async with session_scope(self.sessionmaker) as session:
            row = await session.get(StudentModel, student_id)
            return to_state(row) if row is not None else None

    async def commit(self, mutation: Mutation) -> StudentState:
        """Persist a mutation with a compare-and-swap on version.

        Raises:
            StudentNotFoundError: If the student row does not exist.
            ConflictError: If the stored version moved on.
            DatabaseError: If the database operation fails.
        """
        student = mutation.student
        async with session_scope(self.sessionmaker) as session:
            result = await session.execute(
                update(StudentModel)
                .where(
                    StudentModel.id == student.id,
                    StudentModel.version == mutation.expected_version,
                )
                .values(
                    stage=student.stage,
                    grade_code=student.grade_code,
                    stream_section=student.stream_section,
                    status=student.status.value,
                    graduation_year=student.graduation_year,
                    clearance_status=(
                        student.clearance_status.value if student.clearance_status else None
                    ),
                    target_school_id=student.target_school_id,
                    exit_reason=student.exit_reason,
                    clearance_documents=list(student.clearance_documents),
                    version=StudentModel.version + 1,
                    updated_at=student.updated_at or utc_now(),
                )
                .execution_options(synchronize_session=False)
            )

            if result.rowcount == 0:
                exists = await session.scalar(
                    select(StudentModel.id).where(StudentModel.id == student.id)
                )
                if exists is None:
                    raise StudentNotFoundError(student.id)
                logger.debug(
                    "Stale commit rejected: student=%s, expected=%d",
                    student.id,
                    mutation.expected_version,
                )
                raise ConflictError(student.id, mutation.expected_version)

            if mutation.transfer_record is not None:
                await self._append_transfer(session, student.id, mutation.transfer_record)
            if mutation.promotion_record is not None:
                await self._append_promotion(session, student.id, mutation.promotion_record)
            await session.flush()

            row = await session.get(StudentModel, student.id, populate_existing=True)
            if row is None:
                raise StudentNotFoundError(student.id)
            return to_state(row)

    async def _append_transfer(
        self,
        session: AsyncSession,
        student_id: str,
        record: TransferRecord,
    ) -> None:
        # The row lock taken by the UPDATE above keeps this count stable.
        position = await session.scalar(
            select(func.count())
            .select_from(StudentTransferRecordModel)
            .where(StudentTransferRecordModel.student_id == student_id)
        )
        session.add(
            StudentTransferRecordModel(
                student_id=student_id,
                position=position or 0,
                type=record.type.value,
                from_grade=record.from_grade,
                to_grade=record.to_grade,
                from_section=record.from_section,
                to_section=record.to_section,
                reason=record.reason,
                target_school_id=record.target_school_id,
                performed_by=record.performed_by,
                created_at=record.timestamp,
            )
        )

    async def _append_promotion(
        self,
        session: AsyncSession,
        student_id: str,
        record: PromotionRecord,
    ) -> None:
        position = await session.scalar(
            select(func.count())
            .select_from(StudentPromotionRecordModel)
            .where(StudentPromotionRecordModel.student_id == student_id)
        )
        session.add(
            StudentPromotionRecordModel(
                student_id=student_id,
                position=position or 0,
                from_grade=record.from_grade,
                to_grade=record.to_grade,
                academic_year=record.academic_year,
                reason=record.reason,
                performed_by=record.performed_by,
                created_at=record.timestamp,
            )
        )

    async def add(self, student: StudentState) -> StudentState:
        async with session_scope(self.sessionmaker) as session:
            session.add(
                StudentModel(
                    id=student.id,
                    school_id=student.school_id,
                    stage=student.stage,
                    grade_code=student.grade_code,
                    stream_section=student.stream_section,
                    status=student.status.value,
                    clearance_documents=list(student.clearance_documents),
                    version=student.version,
                )
            )
        return student

    async def find_student_ids(
        self,
        school_id: str | None = None,
        grade_code: str | None = None,
        stream_section: str | None = None,
        status: StudentStatus | None = StudentStatus.ACTIVE,
    ) -> list[str]:
        query = select(StudentModel.id)
        if school_id is not None:
            query = query.where(StudentModel.school_id == school_id)
        if grade_code is not None:
            query = query.where(StudentModel.grade_code == grade_code)
        if stream_section is not None:
            query = query.where(StudentModel.stream_section == stream_section)
        if status is not None:
            query = query.where(StudentModel.status == status.value)

        async with session_scope(self.sessionmaker) as session:
            result = await session.execute(query.order_by(StudentModel.id))
            return [str(student_id) for student_id in result.scalars().all()]
