# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement domain errors.

These are carried inside Err results through the placement pipeline and only
turned into HTTP errors at the API boundary. Batch operations turn them into
per-student error entries using str(error).
"""


class PlacementError(Exception):
    """Base exception for placement errors.

    Attributes:
        message: Human readable description.
        student_id: Student the error applies to, when known.
    """

    def __init__(self, message: str, student_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.student_id = student_id


class StudentNotFoundError(PlacementError):
    """Raised when the student id does not exist."""

    def __init__(self, student_id: str) -> None:
        super().__init__("Student not found", student_id)


class AlreadyAtTargetError(PlacementError):
    """Raised when the requested placement equals the current placement."""

    def __init__(self, student_id: str, message: str | None = None) -> None:
        super().__init__(
            message or "Student is already in the specified grade code and stream section",
            student_id,
        )


class InvalidTransferRequestError(PlacementError):
    """Raised when an internal transfer request is missing placement fields."""

    pass


class InvalidExternalTransferError(PlacementError):
    """Raised when an external transfer lacks target school or exit reason."""

    pass


class UnknownGradeCodeError(PlacementError):
    """Raised when strict grade checking rejects a grade code."""

    def __init__(self, grade_code: str, school_id: str | None = None, student_id: str | None = None) -> None:
        scope = f" for school {school_id}" if school_id else ""
        super().__init__(f"Unknown grade code '{grade_code}'{scope}", student_id)
        self.grade_code = grade_code
        self.school_id = school_id


class StudentInactiveError(PlacementError):
    """Raised when the student is in a terminal status."""

    def __init__(self, student_id: str, status: str) -> None:
        super().__init__(
            f"Student cannot be moved while status is '{status}'",
            student_id,
        )
        self.status = status


class AlreadyGraduatedError(PlacementError):
    """Raised when graduating a student who has already graduated."""

    def __init__(self, student_id: str) -> None:
        super().__init__("Student has already graduated", student_id)


class ConflictError(PlacementError):
    """Raised when a commit targets a stale student version."""

    def __init__(self, student_id: str, expected_version: int | None = None) -> None:
        super().__init__(
            "Student record was modified concurrently, please retry",
            student_id,
        )
        self.expected_version = expected_version


class GuardTimeoutError(PlacementError):
    """Raised when the per-student placement lock cannot be acquired in time."""

    def __init__(self, student_id: str, timeout: float) -> None:
        super().__init__(
            f"Timed out after {timeout:g}s waiting for another update to this student",
            student_id,
        )
        self.timeout = timeout
