# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement domain package.

This package provides student placement management including:
- Internal transfers between grade codes and stream sections
- External transfers to another school
- Batch transfers, promotions and graduations
- Append-only transfer and promotion history
"""

from academia.domains.placement.audit import PlacementAuditSink, log_placement_event
from academia.domains.placement.batch import BatchCoordinator
from academia.domains.placement.errors import (
    AlreadyAtTargetError,
    AlreadyGraduatedError,
    ConflictError,
    GuardTimeoutError,
    InvalidExternalTransferError,
    InvalidTransferRequestError,
    PlacementError,
    StudentInactiveError,
    StudentNotFoundError,
    UnknownGradeCodeError,
)
from academia.domains.placement.executor import TransferExecutor
from academia.domains.placement.grades import GradeCatalog, stage_for_grade
from academia.domains.placement.guard import ConcurrencyGuard
from academia.domains.placement.promotion import PromotionExecutor
from academia.domains.placement.result import Err, Ok, Result
from academia.domains.placement.service import (
    BatchGraduationRequest,
    BatchPromotionRequest,
    BatchTransferRequest,
    PlacementService,
)
from academia.domains.placement.store import InMemoryStudentStore, StudentStore
from academia.domains.placement.types import (
    BatchItemError,
    BatchOutcome,
    ClearanceStatus,
    Commit,
    ExternalTransferRequest,
    GraduationRequest,
    Mutation,
    PromotionRecord,
    PromotionRequest,
    PromotionScope,
    StudentState,
    StudentStatus,
    TransferRecord,
    TransferRequest,
    TransferType,
)
from academia.domains.placement.validator import TransferValidator

__all__ = [
    # Service
    "PlacementService",
    "BatchTransferRequest",
    "BatchPromotionRequest",
    "BatchGraduationRequest",
    # Components
    "TransferValidator",
    "ConcurrencyGuard",
    "TransferExecutor",
    "PromotionExecutor",
    "BatchCoordinator",
    "GradeCatalog",
    "stage_for_grade",
    "PlacementAuditSink",
    "log_placement_event",
    "StudentStore",
    "InMemoryStudentStore",
    # Results
    "Ok",
    "Err",
    "Result",
    # Types
    "StudentState",
    "StudentStatus",
    "TransferType",
    "ClearanceStatus",
    "PromotionScope",
    "TransferRecord",
    "PromotionRecord",
    "TransferRequest",
    "ExternalTransferRequest",
    "PromotionRequest",
    "GraduationRequest",
    "Mutation",
    "Commit",
    "BatchItemError",
    "BatchOutcome",
    # Errors
    "PlacementError",
    "StudentNotFoundError",
    "AlreadyAtTargetError",
    "InvalidTransferRequestError",
    "InvalidExternalTransferError",
    "UnknownGradeCodeError",
    "StudentInactiveError",
    "AlreadyGraduatedError",
    "ConflictError",
    "GuardTimeoutError",
]
