# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student placement API endpoints.

This module provides endpoints for moving students between placements:
- GET /{student_id} - Get student placement and history
- GET /{student_id}/transfer-history - Get transfer history
- PATCH /{student_id}/transfer - Internal transfer to a grade/section
- POST /{student_id}/transfer/external - Transfer to another school
- POST /batch-transfer - Transfer many students
- POST /{student_id}/promote - Promote one student
- POST /promotion - Promote students by scope
- POST /{student_id}/graduate - Graduate one student
- POST /batch-graduate - Graduate many students

All endpoints require super_admin or school_admin. A school admin whose
token names a school only sees students of that school. Batch endpoints
always answer 200 and report per-student failures in "errors".
"""

import logging
from dataclasses import dataclass, field

from fastapi import APIRouter, Depends, HTTPException, status

from academia.api.dependencies import get_placement_service, require_admin
from academia.api.middleware.auth import CurrentUser
from academia.domains.placement import (
    AlreadyAtTargetError,
    AlreadyGraduatedError,
    BatchGraduationRequest,
    BatchOutcome,
    BatchPromotionRequest,
    BatchTransferRequest,
    ConflictError,
    Err,
    ExternalTransferRequest,
    GraduationRequest,
    GuardTimeoutError,
    InvalidExternalTransferError,
    InvalidTransferRequestError,
    PlacementError,
    PlacementService,
    PromotionRequest,
    PromotionScope,
    Result,
    StudentInactiveError,
    StudentNotFoundError,
    TransferRequest,
    UnknownGradeCodeError,
)
from academia.models.placement import (
    BatchErrorItem,
    BatchGraduationBody,
    BatchGraduationResponse,
    BatchPromotionBody,
    BatchPromotionResponse,
    BatchTransferBody,
    BatchTransferResponse,
    ExternalTransferBody,
    GraduateStudentBody,
    PromoteStudentBody,
    StudentResponse,
    TransferHistoryResponse,
    TransferRecordResponse,
    TransferStudentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_BY_ERROR: dict[type[PlacementError], int] = {
    StudentNotFoundError: status.HTTP_404_NOT_FOUND,
    AlreadyAtTargetError: status.HTTP_400_BAD_REQUEST,
    InvalidTransferRequestError: status.HTTP_400_BAD_REQUEST,
    InvalidExternalTransferError: status.HTTP_400_BAD_REQUEST,
    UnknownGradeCodeError: status.HTTP_400_BAD_REQUEST,
    StudentInactiveError: status.HTTP_400_BAD_REQUEST,
    AlreadyGraduatedError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    GuardTimeoutError: status.HTTP_409_CONFLICT,
}


def _http_error(error: PlacementError) -> HTTPException:
    """Map a placement error to the HTTP error returned to the client."""
    for error_type in type(error).__mro__:
        if error_type in _STATUS_BY_ERROR:
            return HTTPException(status_code=_STATUS_BY_ERROR[error_type], detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


def _unwrap(result: Result):
    if isinstance(result, Err):
        raise _http_error(result.error)
    return result.value


def _school_scope(current_user: CurrentUser, requested: str | None = None) -> str | None:
    """School a batch is limited to: the admin's own school unless super admin."""
    if current_user.is_super_admin:
        return requested
    return current_user.school_id or requested


async def _check_student_access(
    service: PlacementService,
    current_user: CurrentUser,
    student_id: str,
) -> None:
    """Hide students of other schools from school-scoped admins.

    Raises:
        HTTPException: 404 if the student is missing or outside the admin's school.
    """
    student = _unwrap(await service.get_student(student_id))
    if current_user.is_super_admin or current_user.school_id is None:
        return
    if student.school_id is not None and student.school_id != current_user.school_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")


def _errors(outcome: BatchOutcome) -> list[BatchErrorItem]:
    return [BatchErrorItem(id=e.id, message=e.message) for e in outcome.errors]


@dataclass
class _AccessFilter:
    accessible: list[str] = field(default_factory=list)
    errors: list[BatchErrorItem] = field(default_factory=list)


async def _filter_accessible(
    service: PlacementService,
    current_user: CurrentUser,
    student_ids: list[str],
) -> _AccessFilter:
    """Split explicit batch ids into those the admin may touch and errors."""
    result = _AccessFilter()
    if current_user.is_super_admin or current_user.school_id is None:
        result.accessible = list(student_ids)
        return result

    for student_id in dict.fromkeys(student_ids):
        student = await service.store.get(student_id)
        if student is not None and student.school_id not in (None, current_user.school_id):
            result.errors.append(BatchErrorItem(id=student_id, message="Student not found"))
        else:
            result.accessible.append(student_id)
    return result


# =========================================================================
# Queries
# =========================================================================


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Get student placement",
)
async def get_student(
    student_id: str,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> StudentResponse:
    await _check_student_access(service, current_user, student_id)
    student = _unwrap(await service.get_student(student_id))
    return StudentResponse.from_state(student)


@router.get(
    "/{student_id}/transfer-history",
    response_model=TransferHistoryResponse,
    summary="Get transfer history",
    description="Transfer records in the order they were committed.",
)
async def get_transfer_history(
    student_id: str,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> TransferHistoryResponse:
    await _check_student_access(service, current_user, student_id)
    history = _unwrap(await service.get_transfer_history(student_id))
    return TransferHistoryResponse(
        student_id=student_id,
        transfer_history=[TransferRecordResponse.from_record(r) for r in history],
    )


# =========================================================================
# Transfers
# =========================================================================


@router.patch(
    "/{student_id}/transfer",
    response_model=StudentResponse,
    summary="Transfer student",
    description="Move a student to a new grade code and stream section in the same school.",
)
async def transfer_student(
    student_id: str,
    data: TransferStudentRequest,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> StudentResponse:
    """Transfer a student within the school.

    Args:
        student_id: Student identifier.
        data: Target grade code, stream section and optional reason.
        current_user: Authenticated admin.
        service: Placement service.

    Returns:
        Updated student including the new transfer history entry.

    Raises:
        HTTPException: 400 if already at target or invalid, 404 if not
            found, 409 on concurrent modification.
    """
    await _check_student_access(service, current_user, student_id)

    result = await service.transfer_student(
        student_id,
        TransferRequest(
            new_grade_code=data.new_grade_code,
            new_stream_section=data.new_stream_section,
            reason=data.reason,
        ),
        performed_by=current_user.id,
    )
    commit = _unwrap(result)
    return StudentResponse.from_state(commit.student)


@router.post(
    "/{student_id}/transfer/external",
    response_model=StudentResponse,
    summary="Transfer student to another school",
)
async def external_transfer(
    student_id: str,
    data: ExternalTransferBody,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> StudentResponse:
    await _check_student_access(service, current_user, student_id)

    result = await service.external_transfer(
        student_id,
        ExternalTransferRequest(
            target_school_id=data.target_school_id,
            exit_reason=data.exit_reason,
            transfer_reason=data.transfer_reason,
            clearance_documents=tuple(data.clearance_documents),
        ),
        performed_by=current_user.id,
    )
    return StudentResponse.from_state(_unwrap(result).student)


@router.post(
    "/batch-transfer",
    response_model=BatchTransferResponse,
    summary="Batch transfer students",
    description="Transfer many students; each student succeeds or fails independently.",
)
async def batch_transfer(
    data: BatchTransferBody,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> BatchTransferResponse:
    logger.info(
        "Batch transfer requested: count=%d, type=%s, by=%s",
        len(data.student_ids),
        data.type.value,
        current_user.id,
    )

    allowed = await _filter_accessible(service, current_user, data.student_ids)
    outcome = await service.batch_transfer(
        BatchTransferRequest(
            student_ids=allowed.accessible,
            new_grade_code=data.new_grade_code,
            new_stream_section=data.new_stream_section,
            reason=data.reason,
            type=data.type,
            target_school_id=data.target_school_id,
            exit_reason=data.exit_reason,
        ),
        performed_by=current_user.id,
    )
    errors = allowed.errors + _errors(outcome)
    return BatchTransferResponse(
        transferred_students=outcome.succeeded,
        student_ids=outcome.succeeded_ids,
        errors=errors,
    )


# =========================================================================
# Promotion
# =========================================================================


@router.post(
    "/promotion",
    response_model=BatchPromotionResponse,
    summary="Promote students",
    description="Promote all students, a grade, a section or a list of students.",
)
async def batch_promote(
    data: BatchPromotionBody,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> BatchPromotionResponse:
    allowed = await _filter_accessible(service, current_user, data.student_ids)
    if data.scope is PromotionScope.STUDENTS and data.student_ids and not allowed.accessible:
        return BatchPromotionResponse(promoted_students=0, student_ids=[], errors=allowed.errors)

    result = await service.batch_promote(
        BatchPromotionRequest(
            scope=data.scope,
            target_grade_code=data.target_grade_code,
            academic_year=data.academic_year,
            grade_code=data.grade_code,
            stream_section=data.stream_section,
            student_ids=allowed.accessible,
            school_id=_school_scope(current_user, data.school_id),
            include_repeaters=data.include_repeaters,
            reason=data.reason,
        ),
        performed_by=current_user.id,
    )
    outcome = _unwrap(result)
    return BatchPromotionResponse(
        promoted_students=outcome.succeeded,
        student_ids=outcome.succeeded_ids,
        errors=allowed.errors + _errors(outcome),
    )


@router.post(
    "/{student_id}/promote",
    response_model=StudentResponse,
    summary="Promote student",
)
async def promote_student(
    student_id: str,
    data: PromoteStudentBody,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> StudentResponse:
    await _check_student_access(service, current_user, student_id)

    result = await service.promote_student(
        student_id,
        PromotionRequest(
            target_grade_code=data.target_grade_code,
            academic_year=data.academic_year,
            reason=data.reason,
        ),
        performed_by=current_user.id,
    )
    return StudentResponse.from_state(_unwrap(result).student)


# =========================================================================
# Graduation
# =========================================================================


@router.post(
    "/batch-graduate",
    response_model=BatchGraduationResponse,
    summary="Graduate students",
    description="Graduate the listed students, or every active student in a grade code.",
)
async def batch_graduate(
    data: BatchGraduationBody,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> BatchGraduationResponse:
    allowed = await _filter_accessible(service, current_user, data.student_ids)
    if data.student_ids and not allowed.accessible:
        return BatchGraduationResponse(graduated_students=0, student_ids=[], errors=allowed.errors)

    result = await service.batch_graduate(
        BatchGraduationRequest(
            graduation_year=data.graduation_year,
            clearance_status=data.clearance_status,
            grade_code=data.grade_code,
            student_ids=allowed.accessible,
            school_id=_school_scope(current_user, data.school_id),
        ),
        performed_by=current_user.id,
    )
    outcome = _unwrap(result)
    return BatchGraduationResponse(
        graduated_students=outcome.succeeded,
        student_ids=outcome.succeeded_ids,
        errors=allowed.errors + _errors(outcome),
    )


@router.post(
    "/{student_id}/graduate",
    response_model=StudentResponse,
    summary="Graduate student",
)
async def graduate_student(
    student_id: str,
    data: GraduateStudentBody,
    current_user: CurrentUser = Depends(require_admin),
    service: PlacementService = Depends(get_placement_service),
) -> StudentResponse:
    await _check_student_access(service, current_user, student_id)

    result = await service.graduate_student(
        student_id,
        GraduationRequest(
            graduation_year=data.graduation_year,
            clearance_status=data.clearance_status,
        ),
        performed_by=current_user.id,
    )
    return StudentResponse.from_state(_unwrap(result).student)
