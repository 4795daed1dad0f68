# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for TransferExecutor."""

from datetime import datetime

import pytest

from academia.domains.placement import (
    AlreadyAtTargetError,
    Err,
    ExternalTransferRequest,
    InvalidExternalTransferError,
    Ok,
    StudentState,
    StudentStatus,
    TransferExecutor,
    TransferRequest,
    TransferType,
)


@pytest.fixture
def executor(fixed_now: datetime) -> TransferExecutor:
    return TransferExecutor(clock=lambda: fixed_now)


class TestApply:
    """Tests for internal transfer computation."""

    def test_moves_student_and_builds_record(
        self,
        executor: TransferExecutor,
        student: StudentState,
        fixed_now: datetime,
    ) -> None:
        mutation = executor.apply(
            student,
            TransferRequest("SSS1", "Science", reason="Stream change"),
            performed_by="admin-1",
        )

        assert mutation.expected_version == student.version
        assert mutation.student.grade_code == "SSS1"
        assert mutation.student.stream_section == "Science"
        assert mutation.student.stage == "senior_secondary"
        assert mutation.student.version == student.version + 1
        assert mutation.promotion_record is None

        record = mutation.transfer_record
        assert record is not None
        assert record.type is TransferType.INTERNAL
        assert (record.from_grade, record.from_section) == ("JSS1", "A")
        assert (record.to_grade, record.to_section) == ("SSS1", "Science")
        assert record.reason == "Stream change"
        assert record.performed_by == "admin-1"
        assert record.timestamp == fixed_now

    def test_unknown_stage_keeps_previous_stage(
        self,
        executor: TransferExecutor,
        student: StudentState,
    ) -> None:
        mutation = executor.apply(student, TransferRequest("Year 9", "A", reason="r"))

        assert mutation.student.stage == "junior_secondary"

    def test_does_not_touch_history(
        self,
        executor: TransferExecutor,
        student: StudentState,
    ) -> None:
        mutation = executor.apply(student, TransferRequest("JSS2", "A", reason="r"))

        assert mutation.student.transfer_history == student.transfer_history
        assert student.grade_code == "JSS1"


class TestApplyExternal:
    """Tests for external transfer computation."""

    def test_marks_student_transferred(
        self,
        executor: TransferExecutor,
        student: StudentState,
    ) -> None:
        mutation = executor.apply_external(
            student,
            ExternalTransferRequest(
                target_school_id="school-2",
                exit_reason="Relocation",
                clearance_documents=("letter.pdf",),
            ),
            performed_by="admin-1",
        )

        assert mutation.student.status is StudentStatus.TRANSFERRED
        assert mutation.student.target_school_id == "school-2"
        assert mutation.student.exit_reason == "Relocation"
        assert mutation.student.clearance_documents == ("letter.pdf",)
        assert mutation.student.grade_code == "JSS1"

        record = mutation.transfer_record
        assert record is not None
        assert record.type is TransferType.EXTERNAL
        assert record.to_section is None
        assert record.to_grade == "JSS1"
        assert record.reason == "Relocation"
        assert record.target_school_id == "school-2"

    def test_transfer_reason_takes_precedence(
        self,
        executor: TransferExecutor,
        student: StudentState,
    ) -> None:
        mutation = executor.apply_external(
            student,
            ExternalTransferRequest("school-2", "Relocation", transfer_reason="Family moved"),
        )

        assert mutation.transfer_record is not None
        assert mutation.transfer_record.reason == "Family moved"


class TestPlan:
    """Tests for validate-then-apply planning."""

    def test_plan_returns_mutation(self, executor: TransferExecutor, student: StudentState) -> None:
        result = executor.plan(student, TransferRequest("JSS2", "B"))

        assert isinstance(result, Ok)
        assert result.value.transfer_record is not None
        assert result.value.transfer_record.reason == "Internal transfer"

    def test_plan_propagates_validation_error(
        self,
        executor: TransferExecutor,
        student: StudentState,
    ) -> None:
        result = executor.plan(student, TransferRequest("JSS1", "A"))

        assert isinstance(result, Err)
        assert isinstance(result.error, AlreadyAtTargetError)

    def test_plan_external_propagates_validation_error(
        self,
        executor: TransferExecutor,
        student: StudentState,
    ) -> None:
        result = executor.plan_external(student, ExternalTransferRequest("school-2", None))

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidExternalTransferError)
