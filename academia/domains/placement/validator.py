# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Precondition checks for placement changes.

The validator is pure: it looks only at the student snapshot and the request
and returns Ok with the resolved request or Err with the reason it was
refused. It is run under the student's lock against the freshest read, so a
concurrent change that already moved the student is seen here.
"""

from dataclasses import replace

from academia.domains.placement.errors import (
    AlreadyAtTargetError,
    AlreadyGraduatedError,
    InvalidExternalTransferError,
    InvalidTransferRequestError,
    StudentInactiveError,
)
from academia.domains.placement.grades import GradeCatalog
from academia.domains.placement.result import Err, Ok, Result
from academia.domains.placement.types import (
    ExternalTransferRequest,
    GraduationRequest,
    PromotionRequest,
    StudentState,
    StudentStatus,
    TransferRequest,
)

DEFAULT_TRANSFER_REASON = "Internal transfer"


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class TransferValidator:
    """Validates transfer, promotion and graduation requests.

    Attributes:
        catalog: Grade code catalog used for grade checks.
        default_reason: Reason recorded when the caller gives none.
    """

    def __init__(
        self,
        catalog: GradeCatalog | None = None,
        default_reason: str = DEFAULT_TRANSFER_REASON,
    ) -> None:
        self.catalog = catalog or GradeCatalog()
        self.default_reason = default_reason

    def _check_movable(self, student: StudentState) -> Result[StudentState]:
        if student.status.is_terminal:
            return Err(StudentInactiveError(student.id, student.status.value))
        return Ok(student)

    def validate_transfer(
        self,
        student: StudentState,
        request: TransferRequest,
    ) -> Result[TransferRequest]:
        """Validate an internal transfer.

        Args:
            student: Current student snapshot.
            request: Requested grade code, stream section and reason.

        Returns:
            Ok with the request whose reason is resolved, or Err with one of
            StudentInactiveError, InvalidTransferRequestError,
            UnknownGradeCodeError or AlreadyAtTargetError.
        """
        movable = self._check_movable(student)
        if isinstance(movable, Err):
            return movable

        missing = [
            name
            for name, value in (
                ("newGradeCode", request.new_grade_code),
                ("newStreamSection", request.new_stream_section),
            )
            if _blank(value)
        ]
        if missing:
            return Err(
                InvalidTransferRequestError(
                    f"Missing required field(s): {', '.join(missing)}",
                    student.id,
                )
            )

        grade = self.catalog.resolve(request.new_grade_code, student.school_id, student.id)
        if isinstance(grade, Err):
            return grade

        if (grade.value, request.new_stream_section) == student.placement_key:
            return Err(AlreadyAtTargetError(student.id))

        # Only an absent or empty reason is replaced; everything else is kept verbatim.
        reason = request.reason if request.reason else self.default_reason
        return Ok(replace(request, new_grade_code=grade.value, reason=reason))

    def validate_external_transfer(
        self,
        student: StudentState,
        request: ExternalTransferRequest,
    ) -> Result[ExternalTransferRequest]:
        """Validate a transfer to another school.

        Returns:
            Ok with the request, or Err(StudentInactiveError) /
            Err(InvalidExternalTransferError) naming the missing fields.
        """
        movable = self._check_movable(student)
        if isinstance(movable, Err):
            return movable

        missing = [
            name
            for name, value in (
                ("targetSchoolId", request.target_school_id),
                ("exitReason", request.exit_reason),
            )
            if _blank(value)
        ]
        if missing:
            return Err(
                InvalidExternalTransferError(
                    f"External transfer requires: {', '.join(missing)}",
                    student.id,
                )
            )

        return Ok(request)

    def validate_promotion(
        self,
        student: StudentState,
        request: PromotionRequest,
    ) -> Result[PromotionRequest]:
        """Validate a promotion into a new grade."""
        movable = self._check_movable(student)
        if isinstance(movable, Err):
            return movable

        if _blank(request.target_grade_code) or _blank(request.academic_year):
            return Err(
                InvalidTransferRequestError(
                    "Promotion requires targetGradeCode and academicYear",
                    student.id,
                )
            )

        grade = self.catalog.resolve(request.target_grade_code, student.school_id, student.id)
        if isinstance(grade, Err):
            return grade

        if grade.value == student.grade_code:
            return Err(
                AlreadyAtTargetError(
                    student.id,
                    f"Student is already in grade code {student.grade_code}",
                )
            )
        return Ok(replace(request, target_grade_code=grade.value))

    def validate_graduation(
        self,
        student: StudentState,
        request: GraduationRequest,
    ) -> Result[GraduationRequest]:
        """Validate a graduation."""
        if student.status is StudentStatus.GRADUATED:
            return Err(AlreadyGraduatedError(student.id))
        movable = self._check_movable(student)
        if isinstance(movable, Err):
            return movable
        return Ok(request)
