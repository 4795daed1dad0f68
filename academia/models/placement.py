# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API request and response models for student placement.

JSON bodies use camelCase keys (newGradeCode, transferredStudents, ...);
Python code uses snake_case attribute names. Both spellings are accepted
on input.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from academia.domains.placement.types import (
    ClearanceStatus,
    PromotionRecord,
    PromotionScope,
    StudentState,
    StudentStatus,
    TransferRecord,
    TransferType,
)


class CamelModel(BaseModel):
    """Base model serializing to camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =========================================================================
# Requests
# =========================================================================


class TransferStudentRequest(CamelModel):
    """Body of PATCH /students/{id}/transfer.

    reason is stored verbatim; an absent or empty reason is recorded as
    "Internal transfer".
    """

    new_grade_code: str
    new_stream_section: str
    reason: str | None = None


class ExternalTransferBody(CamelModel):
    """Body of POST /students/{id}/transfer/external."""

    target_school_id: str | None = None
    exit_reason: str | None = None
    transfer_reason: str | None = None
    clearance_documents: list[str] = Field(default_factory=list)


class BatchTransferBody(CamelModel):
    """Body of POST /students/batch-transfer."""

    student_ids: list[str]
    new_grade_code: str | None = None
    new_stream_section: str | None = None
    reason: str | None = None
    type: TransferType = TransferType.INTERNAL
    target_school_id: str | None = None
    exit_reason: str | None = None


class PromoteStudentBody(CamelModel):
    """Body of POST /students/{id}/promote."""

    target_grade_code: str
    academic_year: str
    reason: str | None = None


class BatchPromotionBody(CamelModel):
    """Body of POST /students/promotion."""

    scope: PromotionScope
    target_grade_code: str
    academic_year: str
    grade_code: str | None = None
    stream_section: str | None = None
    student_ids: list[str] = Field(default_factory=list)
    school_id: str | None = None
    include_repeaters: bool = False
    reason: str | None = None


class GraduateStudentBody(CamelModel):
    """Body of POST /students/{id}/graduate."""

    graduation_year: int = Field(ge=1900, le=2200)
    clearance_status: ClearanceStatus = ClearanceStatus.CLEARED


class BatchGraduationBody(CamelModel):
    """Body of POST /students/batch-graduate."""

    graduation_year: int = Field(ge=1900, le=2200)
    clearance_status: ClearanceStatus = ClearanceStatus.CLEARED
    grade_code: str | None = None
    student_ids: list[str] = Field(default_factory=list)
    school_id: str | None = None


# =========================================================================
# Responses
# =========================================================================


class TransferRecordResponse(CamelModel):
    type: TransferType
    from_grade: str
    to_grade: str
    from_section: str
    to_section: str | None = None
    reason: str
    timestamp: datetime
    performed_by: str | None = None
    target_school_id: str | None = None

    @classmethod
    def from_record(cls, record: TransferRecord) -> "TransferRecordResponse":
        return cls(
            type=record.type,
            from_grade=record.from_grade,
            to_grade=record.to_grade,
            from_section=record.from_section,
            to_section=record.to_section,
            reason=record.reason,
            timestamp=record.timestamp,
            performed_by=record.performed_by,
            target_school_id=record.target_school_id,
        )


class PromotionRecordResponse(CamelModel):
    from_grade: str
    to_grade: str
    academic_year: str
    timestamp: datetime
    reason: str | None = None
    performed_by: str | None = None

    @classmethod
    def from_record(cls, record: PromotionRecord) -> "PromotionRecordResponse":
        return cls(
            from_grade=record.from_grade,
            to_grade=record.to_grade,
            academic_year=record.academic_year,
            timestamp=record.timestamp,
            reason=record.reason,
            performed_by=record.performed_by,
        )


class StudentResponse(CamelModel):
    """Student placement view returned by single-student endpoints."""

    id: str
    school_id: str | None = None
    stage: str | None = None
    grade_code: str
    stream_section: str
    status: StudentStatus
    graduation_year: int | None = None
    clearance_status: ClearanceStatus | None = None
    target_school_id: str | None = None
    exit_reason: str | None = None
    clearance_documents: list[str] = Field(default_factory=list)
    version: int
    updated_at: datetime | None = None
    transfer_history: list[TransferRecordResponse] = Field(default_factory=list)
    promotion_history: list[PromotionRecordResponse] = Field(default_factory=list)

    @classmethod
    def from_state(cls, student: StudentState) -> "StudentResponse":
        return cls(
            id=student.id,
            school_id=student.school_id,
            stage=student.stage,
            grade_code=student.grade_code,
            stream_section=student.stream_section,
            status=student.status,
            graduation_year=student.graduation_year,
            clearance_status=student.clearance_status,
            target_school_id=student.target_school_id,
            exit_reason=student.exit_reason,
            clearance_documents=list(student.clearance_documents),
            version=student.version,
            updated_at=student.updated_at,
            transfer_history=[
                TransferRecordResponse.from_record(r) for r in student.transfer_history
            ],
            promotion_history=[
                PromotionRecordResponse.from_record(r) for r in student.promotion_history
            ],
        )


class TransferHistoryResponse(CamelModel):
    student_id: str
    transfer_history: list[TransferRecordResponse]


class BatchErrorItem(CamelModel):
    id: str
    message: str


class BatchTransferResponse(CamelModel):
    transferred_students: int
    student_ids: list[str]
    errors: list[BatchErrorItem]


class BatchPromotionResponse(CamelModel):
    promoted_students: int
    student_ids: list[str]
    errors: list[BatchErrorItem]


class BatchGraduationResponse(CamelModel):
    graduated_students: int
    student_ids: list[str]
    errors: list[BatchErrorItem]
