# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student store contract and in-memory implementation.

The store is the only writer of placement fields, version and history. A
commit is a compare-and-swap on version: it succeeds only if the stored
version still equals the version the mutation was planned against, and the
persisted history is always the stored history plus the mutation's single
new record. Callers therefore cannot shrink or reorder history.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import replace

from academia.domains.placement.errors import ConflictError, StudentNotFoundError
from academia.domains.placement.types import Mutation, StudentState, StudentStatus
from academia.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class StudentStore(ABC):
    """Persistence contract for the student placement aggregate."""

    @abstractmethod
    async def get(self, student_id: str) -> StudentState | None:
        """Load a student snapshot, or None if the id is unknown."""

    @abstractmethod
    async def commit(self, mutation: Mutation) -> StudentState:
        """Persist a mutation atomically.

        Args:
            mutation: Next state, expected version and the record to append.

        Returns:
            The stored student with version incremented by one.

        Raises:
            StudentNotFoundError: If the student does not exist.
            ConflictError: If the stored version differs from
                mutation.expected_version.
        """

    @abstractmethod
    async def add(self, student: StudentState) -> StudentState:
        """Insert a new student."""

    @abstractmethod
    async def find_student_ids(
        self,
        school_id: str | None = None,
        grade_code: str | None = None,
        stream_section: str | None = None,
        status: StudentStatus | None = StudentStatus.ACTIVE,
    ) -> list[str]:
        """Return ids of students matching every given filter, in id order."""


def merge_committed(current: StudentState, mutation: Mutation) -> StudentState:
    """Build the state to persist from the stored snapshot and a mutation.

    History tuples come from the stored snapshot with at most one record
    appended; version comes from the stored snapshot plus one.
    """
    transfer_history = current.transfer_history
    if mutation.transfer_record is not None:
        transfer_history = transfer_history + (mutation.transfer_record,)

    promotion_history = current.promotion_history
    if mutation.promotion_record is not None:
        promotion_history = promotion_history + (mutation.promotion_record,)

    return replace(
        mutation.student,
        id=current.id,
        transfer_history=transfer_history,
        promotion_history=promotion_history,
        version=current.version + 1,
        updated_at=mutation.student.updated_at or utc_now(),
    )


class InMemoryStudentStore(StudentStore):
    """Process-local store used in tests and single-node development.

    All state changes happen inside a single threading.Lock section with no
    awaits, so each commit is atomic with respect to every other caller.
    """

    def __init__(self, students: Iterable[StudentState] = ()) -> None:
        self._lock = threading.Lock()
        self._students: dict[str, StudentState] = {s.id: s for s in students}

    async def get(self, student_id: str) -> StudentState | None:
        with self._lock:
            return self._students.get(student_id)

    async def commit(self, mutation: Mutation) -> StudentState:
        student_id = mutation.student.id
        with self._lock:
            current = self._students.get(student_id)
            if current is None:
                raise StudentNotFoundError(student_id)
            if current.version != mutation.expected_version:
                logger.debug(
                    "Stale commit rejected: student=%s, expected=%d, stored=%d",
                    student_id,
                    mutation.expected_version,
                    current.version,
                )
                raise ConflictError(student_id, mutation.expected_version)

            stored = merge_committed(current, mutation)
            self._students[student_id] = stored
            return stored

    async def add(self, student: StudentState) -> StudentState:
        with self._lock:
            if student.id in self._students:
                raise ValueError(f"Student {student.id} already exists")
            self._students[student.id] = student
            return student

    async def find_student_ids(
        self,
        school_id: str | None = None,
        grade_code: str | None = None,
        stream_section: str | None = None,
        status: StudentStatus | None = StudentStatus.ACTIVE,
    ) -> list[str]:
        with self._lock:
            students = list(self._students.values())
        return sorted(
            s.id
            for s in students
            if (school_id is None or s.school_id == school_id)
            and (grade_code is None or s.grade_code == grade_code)
            and (stream_section is None or s.stream_section == stream_section)
            and (status is None or s.status is status)
        )
