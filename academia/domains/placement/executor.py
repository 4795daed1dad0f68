# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transfer executor.

Computes the next student state and the transfer record for internal and
external transfers. Nothing here touches storage: the returned Mutation is
committed by the ConcurrencyGuard through the store.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from academia.domains.placement.grades import stage_for_grade
from academia.domains.placement.result import Err, Ok, Result
from academia.domains.placement.types import (
    ExternalTransferRequest,
    Mutation,
    StudentState,
    StudentStatus,
    TransferRecord,
    TransferRequest,
    TransferType,
)
from academia.domains.placement.validator import TransferValidator
from academia.utils.datetime import utc_now


class TransferExecutor:
    """Plans internal and external transfers.

    Attributes:
        validator: Validator applied to each fresh snapshot before planning.
    """

    def __init__(
        self,
        validator: TransferValidator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.validator = validator or TransferValidator()
        self._clock = clock

    def apply(
        self,
        student: StudentState,
        request: TransferRequest,
        performed_by: str | None = None,
        now: datetime | None = None,
    ) -> Mutation:
        """Compute an internal transfer for an already validated request.

        Args:
            student: Current student snapshot.
            request: Validated request with its reason resolved.
            performed_by: Id of the acting administrator.
            now: Timestamp for the record; defaults to the executor clock.

        Returns:
            Mutation moving the student and carrying one internal record.
        """
        timestamp = now or self._clock()
        record = TransferRecord(
            type=TransferType.INTERNAL,
            from_grade=student.grade_code,
            to_grade=request.new_grade_code,
            from_section=student.stream_section,
            to_section=request.new_stream_section,
            reason=request.reason if request.reason is not None else self.validator.default_reason,
            timestamp=timestamp,
            performed_by=performed_by,
        )
        next_state = replace(
            student,
            grade_code=request.new_grade_code,
            stream_section=request.new_stream_section,
            stage=stage_for_grade(request.new_grade_code) or student.stage,
            version=student.version + 1,
            updated_at=timestamp,
        )
        return Mutation(
            student=next_state,
            expected_version=student.version,
            transfer_record=record,
        )

    def apply_external(
        self,
        student: StudentState,
        request: ExternalTransferRequest,
        performed_by: str | None = None,
        now: datetime | None = None,
    ) -> Mutation:
        """Compute a transfer out of the school.

        The student becomes terminal; grade code and stream section keep
        their last values so the record shows where the student left from.
        """
        timestamp = now or self._clock()
        record = TransferRecord(
            type=TransferType.EXTERNAL,
            from_grade=student.grade_code,
            to_grade=student.grade_code,
            from_section=student.stream_section,
            to_section=None,
            reason=request.transfer_reason or request.exit_reason or "",
            timestamp=timestamp,
            performed_by=performed_by,
            target_school_id=request.target_school_id,
        )
        next_state = replace(
            student,
            status=StudentStatus.TRANSFERRED,
            target_school_id=request.target_school_id,
            exit_reason=request.exit_reason,
            clearance_documents=tuple(request.clearance_documents),
            version=student.version + 1,
            updated_at=timestamp,
        )
        return Mutation(
            student=next_state,
            expected_version=student.version,
            transfer_record=record,
        )

    def plan(
        self,
        student: StudentState,
        request: TransferRequest,
        performed_by: str | None = None,
    ) -> Result[Mutation]:
        """Validate against the given snapshot and compute the transfer."""
        validated = self.validator.validate_transfer(student, request)
        if isinstance(validated, Err):
            return validated
        return Ok(self.apply(student, validated.value, performed_by))

    def plan_external(
        self,
        student: StudentState,
        request: ExternalTransferRequest,
        performed_by: str | None = None,
    ) -> Result[Mutation]:
        validated = self.validator.validate_external_transfer(student, request)
        if isinstance(validated, Err):
            return validated
        return Ok(self.apply_external(student, validated.value, performed_by))
