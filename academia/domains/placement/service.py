# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement service.

This module provides the PlacementService façade for:
- Internal and external student transfers
- Batch transfers
- Single and scoped batch promotions
- Single and batch graduations
- Transfer history lookup

Every single-student operation runs validator, executor and commit under the
student's ConcurrencyGuard lock and returns a Result. Committed changes are
handed to the audit sink after the lock is released.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from academia.core.config.settings import PlacementSettings
from academia.domains.placement.audit import PlacementAuditSink
from academia.domains.placement.batch import BatchCoordinator
from academia.domains.placement.errors import InvalidTransferRequestError, StudentNotFoundError
from academia.domains.placement.executor import TransferExecutor
from academia.domains.placement.grades import GradeCatalog
from academia.domains.placement.guard import ConcurrencyGuard
from academia.domains.placement.promotion import PromotionExecutor
from academia.domains.placement.result import Err, Ok, Result
from academia.domains.placement.store import StudentStore
from academia.domains.placement.types import (
    BatchOutcome,
    ClearanceStatus,
    Commit,
    ExternalTransferRequest,
    GraduationRequest,
    Mutation,
    PromotionRequest,
    PromotionScope,
    StudentState,
    StudentStatus,
    TransferRecord,
    TransferRequest,
    TransferType,
)
from academia.domains.placement.validator import TransferValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchTransferRequest:
    """Transfer of many students to one placement or one school.

    For internal transfers new_grade_code and new_stream_section are
    required. For external transfers target_school_id is required and
    exit_reason falls back to reason.
    """

    student_ids: list[str]
    new_grade_code: str | None = None
    new_stream_section: str | None = None
    reason: str | None = None
    type: TransferType = TransferType.INTERNAL
    target_school_id: str | None = None
    exit_reason: str | None = None


@dataclass(frozen=True)
class BatchPromotionRequest:
    """Promotion of a scoped set of students into one grade code."""

    scope: PromotionScope
    target_grade_code: str
    academic_year: str
    grade_code: str | None = None
    stream_section: str | None = None
    student_ids: list[str] = field(default_factory=list)
    school_id: str | None = None
    include_repeaters: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class BatchGraduationRequest:
    """Graduation of explicit students or every active student in a grade."""

    graduation_year: int
    clearance_status: ClearanceStatus
    grade_code: str | None = None
    student_ids: list[str] = field(default_factory=list)
    school_id: str | None = None


class PlacementService:
    """Façade over the placement pipeline.

    Attributes:
        store: Student store.
        guard: Per-student concurrency guard.
        transfers: Internal/external transfer executor.
        promotions: Promotion/graduation executor.
        batches: Batch coordinator.
        audit: Optional audit sink notified after each commit.
    """

    def __init__(
        self,
        store: StudentStore,
        settings: PlacementSettings | None = None,
        audit: PlacementAuditSink | None = None,
        catalog: GradeCatalog | None = None,
    ) -> None:
        """Initialize placement service.

        Args:
            store: Student store implementation.
            settings: Placement settings; defaults are used if omitted.
            audit: Audit sink; None disables audit publication.
            catalog: Grade catalog; built from settings if omitted.
        """
        settings = settings or PlacementSettings()
        self.store = store
        self.settings = settings
        self.audit = audit
        validator = TransferValidator(
            catalog or GradeCatalog.from_settings(settings),
            default_reason=settings.default_transfer_reason,
        )
        self.validator = validator
        self.transfers = TransferExecutor(validator)
        self.promotions = PromotionExecutor(validator)
        self.guard = ConcurrencyGuard(
            store,
            lock_timeout=settings.lock_timeout_seconds,
            max_retries=settings.max_conflict_retries,
        )
        self.batches = BatchCoordinator(concurrency=settings.batch_concurrency)

    async def _run(
        self,
        student_id: str,
        plan: Callable[[StudentState], Result[Mutation]],
    ) -> Result[Commit]:
        result = await self.guard.with_lock(student_id, plan)
        if isinstance(result, Ok) and self.audit is not None:
            self.audit.notify(result.value)
        return result

    # Queries

    async def get_student(self, student_id: str) -> Result[StudentState]:
        student = await self.store.get(student_id)
        if student is None:
            return Err(StudentNotFoundError(student_id))
        return Ok(student)

    async def get_transfer_history(self, student_id: str) -> Result[tuple[TransferRecord, ...]]:
        """Return a student's transfer history in commit order."""
        student = await self.get_student(student_id)
        if isinstance(student, Err):
            return student
        return Ok(student.value.transfer_history)

    # Transfers

    async def transfer_student(
        self,
        student_id: str,
        request: TransferRequest,
        performed_by: str | None = None,
    ) -> Result[Commit]:
        """Move a student to a new grade code and stream section.

        Args:
            student_id: Student to move.
            request: Target placement and optional reason.
            performed_by: Id of the acting administrator.

        Returns:
            Ok(Commit) with the updated student and its new transfer record,
            or Err with the reason nothing was written.
        """
        result = await self._run(
            student_id,
            lambda current: self.transfers.plan(current, request, performed_by),
        )
        if isinstance(result, Ok):
            logger.info(
                "Transferred student: student=%s, to=%s/%s, by=%s",
                student_id,
                request.new_grade_code,
                request.new_stream_section,
                performed_by,
            )
        return result

    async def external_transfer(
        self,
        student_id: str,
        request: ExternalTransferRequest,
        performed_by: str | None = None,
    ) -> Result[Commit]:
        """Record that a student left for another school."""
        result = await self._run(
            student_id,
            lambda current: self.transfers.plan_external(current, request, performed_by),
        )
        if isinstance(result, Ok):
            logger.info(
                "External transfer: student=%s, target_school=%s, by=%s",
                student_id,
                request.target_school_id,
                performed_by,
            )
        return result

    async def batch_transfer(
        self,
        request: BatchTransferRequest,
        performed_by: str | None = None,
    ) -> BatchOutcome:
        """Transfer every distinct student in the request independently."""
        if request.type is TransferType.EXTERNAL:
            external = ExternalTransferRequest(
                target_school_id=request.target_school_id,
                exit_reason=request.exit_reason or request.reason,
                transfer_reason=request.reason,
            )

            async def operation(student_id: str) -> Result[Commit]:
                return await self.external_transfer(student_id, external, performed_by)

        else:
            internal = TransferRequest(
                new_grade_code=request.new_grade_code or "",
                new_stream_section=request.new_stream_section or "",
                reason=request.reason,
            )

            async def operation(student_id: str) -> Result[Commit]:
                return await self.transfer_student(student_id, internal, performed_by)

        return await self.batches.run(
            request.student_ids, operation, label=f"{request.type.value} transfer"
        )

    # Promotion

    async def promote_student(
        self,
        student_id: str,
        request: PromotionRequest,
        performed_by: str | None = None,
    ) -> Result[Commit]:
        return await self._run(
            student_id,
            lambda current: self.promotions.plan_promotion(current, request, performed_by),
        )

    async def resolve_promotion_ids(self, request: BatchPromotionRequest) -> Result[list[str]]:
        """Turn a promotion scope into the list of student ids to promote.

        Repeaters (students already promoted in the same academic year) are
        skipped unless include_repeaters is set. Explicit student ids are
        never filtered here; the per-student pipeline reports their errors.
        """
        scope = request.scope
        if scope is PromotionScope.STUDENTS:
            if not request.student_ids:
                return Err(InvalidTransferRequestError("Scope 'students' requires studentIds"))
            return Ok(list(request.student_ids))

        if scope is PromotionScope.GRADE and not request.grade_code:
            return Err(InvalidTransferRequestError("Scope 'grade' requires gradeCode"))
        if scope is PromotionScope.SECTION and not (request.grade_code and request.stream_section):
            return Err(
                InvalidTransferRequestError("Scope 'section' requires gradeCode and streamSection")
            )

        ids = await self.store.find_student_ids(
            school_id=request.school_id,
            grade_code=request.grade_code if scope is not PromotionScope.ALL else None,
            stream_section=request.stream_section if scope is PromotionScope.SECTION else None,
            status=StudentStatus.ACTIVE,
        )
        if request.include_repeaters:
            return Ok(ids)

        selected = []
        for student_id in ids:
            student = await self.store.get(student_id)
            if student is None:
                continue
            if any(p.academic_year == request.academic_year for p in student.promotion_history):
                continue
            selected.append(student_id)
        return Ok(selected)

    async def batch_promote(
        self,
        request: BatchPromotionRequest,
        performed_by: str | None = None,
    ) -> Result[BatchOutcome]:
        ids = await self.resolve_promotion_ids(request)
        if isinstance(ids, Err):
            return ids

        single = PromotionRequest(
            target_grade_code=request.target_grade_code,
            academic_year=request.academic_year,
            reason=request.reason,
        )

        async def operation(student_id: str) -> Result[Commit]:
            return await self.promote_student(student_id, single, performed_by)

        outcome = await self.batches.run(ids.value, operation, label="promotion")
        return Ok(outcome)

    # Graduation

    async def graduate_student(
        self,
        student_id: str,
        request: GraduationRequest,
        performed_by: str | None = None,
    ) -> Result[Commit]:
        result = await self._run(
            student_id,
            lambda current: self.promotions.plan_graduation(current, request),
        )
        if isinstance(result, Ok):
            logger.info(
                "Graduated student: student=%s, year=%d, by=%s",
                student_id,
                request.graduation_year,
                performed_by,
            )
        return result

    async def batch_graduate(
        self,
        request: BatchGraduationRequest,
        performed_by: str | None = None,
    ) -> Result[BatchOutcome]:
        """Graduate explicit students, or every active student in a grade code."""
        if request.student_ids:
            ids = list(request.student_ids)
        elif request.grade_code:
            ids = await self.store.find_student_ids(
                school_id=request.school_id,
                grade_code=request.grade_code,
                status=StudentStatus.ACTIVE,
            )
        else:
            return Err(InvalidTransferRequestError("Graduation requires studentIds or gradeCode"))

        single = GraduationRequest(
            graduation_year=request.graduation_year,
            clearance_status=request.clearance_status,
        )

        async def operation(student_id: str) -> Result[Commit]:
            return await self.graduate_student(student_id, single, performed_by)

        outcome = await self.batches.run(ids, operation, label="graduation")
        return Ok(outcome)
