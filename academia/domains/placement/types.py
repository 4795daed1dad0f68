# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement domain types.

The student aggregate and its history records are frozen dataclasses. A
change is expressed as a Mutation (next state plus the single record that
explains it) and handed to the store, which is the only writer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class StudentStatus(str, Enum):
    """Enrollment status of a student."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"
    TRANSFERRED = "transferred"
    WITHDRAWN = "withdrawn"
    SUSPENDED = "suspended"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {StudentStatus.GRADUATED, StudentStatus.TRANSFERRED, StudentStatus.WITHDRAWN}
)


class TransferType(str, Enum):
    """Kind of transfer recorded in a student's history."""

    INTERNAL = "internal"
    EXTERNAL = "external"


class ClearanceStatus(str, Enum):
    """Graduation clearance state."""

    CLEARED = "cleared"
    PENDING = "pending"


class PromotionScope(str, Enum):
    """Selection of students for a batch promotion."""

    ALL = "all"
    GRADE = "grade"
    SECTION = "section"
    STUDENTS = "students"


@dataclass(frozen=True, slots=True)
class TransferRecord:
    """One entry of a student's transfer history.

    Attributes:
        type: Internal or external transfer.
        from_grade: Grade code before the transfer.
        to_grade: Grade code after the transfer (unchanged for external).
        from_section: Stream section before the transfer.
        to_section: Stream section after the transfer, None when the student
            left for another school.
        reason: Free text, stored verbatim.
        timestamp: UTC time of the committed transfer.
        performed_by: Id of the acting administrator.
        target_school_id: Receiving school for external transfers.
    """

    type: TransferType
    from_grade: str
    to_grade: str
    from_section: str
    to_section: str | None
    reason: str
    timestamp: datetime
    performed_by: str | None = None
    target_school_id: str | None = None


@dataclass(frozen=True, slots=True)
class PromotionRecord:
    """One entry of a student's promotion history."""

    from_grade: str
    to_grade: str
    academic_year: str
    timestamp: datetime
    reason: str | None = None
    performed_by: str | None = None


@dataclass(frozen=True, slots=True)
class StudentState:
    """Snapshot of a student's placement aggregate.

    version increases by exactly one for every committed mutation and is the
    compare-and-swap token used by the store.
    """

    id: str
    grade_code: str
    stream_section: str
    status: StudentStatus = StudentStatus.ACTIVE
    school_id: str | None = None
    stage: str | None = None
    transfer_history: tuple[TransferRecord, ...] = ()
    promotion_history: tuple[PromotionRecord, ...] = ()
    graduation_year: int | None = None
    clearance_status: ClearanceStatus | None = None
    target_school_id: str | None = None
    exit_reason: str | None = None
    clearance_documents: tuple[str, ...] = ()
    version: int = 1
    updated_at: datetime | None = None

    @property
    def placement_key(self) -> tuple[str, str]:
        return (self.grade_code, self.stream_section)


@dataclass(frozen=True, slots=True)
class TransferRequest:
    """Internal transfer request.

    reason is None until the validator resolves it to the default.
    """

    new_grade_code: str
    new_stream_section: str
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ExternalTransferRequest:
    """Request to move a student to another school."""

    target_school_id: str | None
    exit_reason: str | None
    transfer_reason: str | None = None
    clearance_documents: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PromotionRequest:
    """Promotion of one student into a new grade for an academic year."""

    target_grade_code: str
    academic_year: str
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class GraduationRequest:
    """Graduation of one student."""

    graduation_year: int
    clearance_status: ClearanceStatus


@dataclass(frozen=True, slots=True)
class Mutation:
    """Next state of a student plus the record describing the change.

    At most one of transfer_record and promotion_record is set. Graduation
    carries neither.
    """

    student: StudentState
    expected_version: int
    transfer_record: TransferRecord | None = None
    promotion_record: PromotionRecord | None = None

    @property
    def record(self) -> TransferRecord | PromotionRecord | None:
        return self.transfer_record or self.promotion_record


@dataclass(frozen=True, slots=True)
class Commit:
    """Outcome of a committed mutation as read back from the store."""

    student: StudentState
    record: TransferRecord | PromotionRecord | None = None


@dataclass(slots=True)
class BatchItemError:
    """Failure of a single student inside a batch."""

    id: str
    message: str


@dataclass(slots=True)
class BatchOutcome:
    """Aggregate result of a batch operation.

    succeeded_ids and the ids in errors are disjoint and together cover every
    distinct input id.
    """

    succeeded_ids: list[str] = field(default_factory=list)
    errors: list[BatchItemError] = field(default_factory=list)
    students: list[StudentState] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.succeeded_ids)
