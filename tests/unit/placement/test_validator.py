# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for TransferValidator."""

from dataclasses import replace

import pytest

from academia.domains.placement import (
    AlreadyAtTargetError,
    AlreadyGraduatedError,
    ClearanceStatus,
    Err,
    ExternalTransferRequest,
    GradeCatalog,
    GraduationRequest,
    InvalidExternalTransferError,
    InvalidTransferRequestError,
    Ok,
    PromotionRequest,
    StudentInactiveError,
    StudentState,
    StudentStatus,
    TransferRequest,
    TransferValidator,
    UnknownGradeCodeError,
)


@pytest.fixture
def validator() -> TransferValidator:
    return TransferValidator()


class TestValidateTransfer:
    """Tests for internal transfer validation."""

    def test_valid_request_resolves_default_reason(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_transfer(student, TransferRequest("JSS2", "B"))

        assert isinstance(result, Ok)
        assert result.value.reason == "Internal transfer"
        assert result.value.new_grade_code == "JSS2"

    def test_empty_reason_uses_default(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_transfer(student, TransferRequest("JSS2", "B", reason=""))

        assert isinstance(result, Ok)
        assert result.value.reason == "Internal transfer"

    @pytest.mark.parametrize(
        "reason",
        [
            "x" * 1000,
            "Parent's request: <move> & \"urgent\" – 日本語 ✓",
            "   ",
        ],
    )
    def test_reason_is_kept_verbatim(
        self,
        validator: TransferValidator,
        student: StudentState,
        reason: str,
    ) -> None:
        result = validator.validate_transfer(student, TransferRequest("JSS2", "B", reason=reason))

        assert isinstance(result, Ok)
        assert result.value.reason == reason

    def test_same_placement_is_rejected(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_transfer(student, TransferRequest("JSS1", "A"))

        assert isinstance(result, Err)
        assert isinstance(result.error, AlreadyAtTargetError)
        assert result.error.message == (
            "Student is already in the specified grade code and stream section"
        )

    def test_same_grade_other_section_is_allowed(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_transfer(student, TransferRequest("JSS1", "B"))

        assert isinstance(result, Ok)

    def test_missing_fields_are_named(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_transfer(student, TransferRequest("", "  "))

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidTransferRequestError)
        assert "newGradeCode" in result.error.message
        assert "newStreamSection" in result.error.message

    @pytest.mark.parametrize(
        "status",
        [StudentStatus.GRADUATED, StudentStatus.TRANSFERRED, StudentStatus.WITHDRAWN],
    )
    def test_terminal_student_cannot_move(
        self,
        validator: TransferValidator,
        student: StudentState,
        status: StudentStatus,
    ) -> None:
        result = validator.validate_transfer(
            replace(student, status=status), TransferRequest("JSS2", "B")
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, StudentInactiveError)
        assert status.value in result.error.message

    def test_suspended_student_can_move(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_transfer(
            replace(student, status=StudentStatus.SUSPENDED), TransferRequest("JSS2", "B")
        )

        assert isinstance(result, Ok)

    def test_strict_catalog_rejects_unknown_grade(self, student: StudentState) -> None:
        validator = TransferValidator(GradeCatalog(strict=True))

        result = validator.validate_transfer(student, TransferRequest("JSS9", "A"))

        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownGradeCodeError)


class TestValidateExternalTransfer:
    """Tests for external transfer validation."""

    def test_valid_request(self, validator: TransferValidator, student: StudentState) -> None:
        request = ExternalTransferRequest(target_school_id="school-2", exit_reason="Relocation")

        assert validator.validate_external_transfer(student, request) == Ok(request)

    def test_missing_target_and_reason(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_external_transfer(
            student, ExternalTransferRequest(target_school_id=None, exit_reason="")
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidExternalTransferError)
        assert "targetSchoolId" in result.error.message
        assert "exitReason" in result.error.message


class TestValidatePromotion:
    """Tests for promotion validation."""

    def test_valid_promotion(self, validator: TransferValidator, student: StudentState) -> None:
        result = validator.validate_promotion(student, PromotionRequest("JSS2", "2024/2025"))

        assert isinstance(result, Ok)

    def test_same_grade_is_rejected(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_promotion(student, PromotionRequest("JSS1", "2024/2025"))

        assert isinstance(result, Err)
        assert isinstance(result.error, AlreadyAtTargetError)
        assert "JSS1" in result.error.message

    def test_missing_academic_year(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_promotion(student, PromotionRequest("JSS2", ""))

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidTransferRequestError)


class TestValidateGraduation:
    """Tests for graduation validation."""

    def test_active_student_can_graduate(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        request = GraduationRequest(2025, ClearanceStatus.CLEARED)

        assert validator.validate_graduation(student, request) == Ok(request)

    def test_graduated_student_is_rejected(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_graduation(
            replace(student, status=StudentStatus.GRADUATED),
            GraduationRequest(2025, ClearanceStatus.CLEARED),
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, AlreadyGraduatedError)

    def test_transferred_student_is_rejected(
        self,
        validator: TransferValidator,
        student: StudentState,
    ) -> None:
        result = validator.validate_graduation(
            replace(student, status=StudentStatus.TRANSFERRED),
            GraduationRequest(2025, ClearanceStatus.PENDING),
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, StudentInactiveError)
