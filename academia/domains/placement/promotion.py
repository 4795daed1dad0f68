# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Promotion and graduation executor.

Promotion moves a student to a new grade code for an academic year and keeps
the stream section. Graduation makes the student terminal and records the
graduation year and clearance state; it appends no history entry.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from academia.domains.placement.grades import stage_for_grade
from academia.domains.placement.result import Err, Ok, Result
from academia.domains.placement.types import (
    GraduationRequest,
    Mutation,
    PromotionRecord,
    PromotionRequest,
    StudentState,
    StudentStatus,
)
from academia.domains.placement.validator import TransferValidator
from academia.utils.datetime import utc_now


class PromotionExecutor:
    """Plans promotions and graduations."""

    def __init__(
        self,
        validator: TransferValidator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.validator = validator or TransferValidator()
        self._clock = clock

    def promote(
        self,
        student: StudentState,
        request: PromotionRequest,
        performed_by: str | None = None,
        now: datetime | None = None,
    ) -> Mutation:
        """Compute a promotion for an already validated request.

        Args:
            student: Current student snapshot.
            request: Validated promotion request.
            performed_by: Id of the acting administrator.
            now: Timestamp for the record.

        Returns:
            Mutation with the new grade code and one promotion record.
        """
        timestamp = now or self._clock()
        record = PromotionRecord(
            from_grade=student.grade_code,
            to_grade=request.target_grade_code,
            academic_year=request.academic_year,
            timestamp=timestamp,
            reason=request.reason,
            performed_by=performed_by,
        )
        next_state = replace(
            student,
            grade_code=request.target_grade_code,
            stage=stage_for_grade(request.target_grade_code) or student.stage,
            version=student.version + 1,
            updated_at=timestamp,
        )
        return Mutation(
            student=next_state,
            expected_version=student.version,
            promotion_record=record,
        )

    def graduate(
        self,
        student: StudentState,
        request: GraduationRequest,
        now: datetime | None = None,
    ) -> Mutation:
        timestamp = now or self._clock()
        next_state = replace(
            student,
            status=StudentStatus.GRADUATED,
            graduation_year=request.graduation_year,
            clearance_status=request.clearance_status,
            version=student.version + 1,
            updated_at=timestamp,
        )
        return Mutation(student=next_state, expected_version=student.version)

    def plan_promotion(
        self,
        student: StudentState,
        request: PromotionRequest,
        performed_by: str | None = None,
    ) -> Result[Mutation]:
        validated = self.validator.validate_promotion(student, request)
        if isinstance(validated, Err):
            return validated
        return Ok(self.promote(student, validated.value, performed_by))

    def plan_graduation(
        self,
        student: StudentState,
        request: GraduationRequest,
    ) -> Result[Mutation]:
        validated = self.validator.validate_graduation(student, request)
        if isinstance(validated, Err):
            return validated
        return Ok(self.graduate(student, validated.value))
