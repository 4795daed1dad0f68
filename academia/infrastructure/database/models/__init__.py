# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the student records database."""

from academia.infrastructure.database.models.base import Base, TimestampMixin
from academia.infrastructure.database.models.student import (
    StudentModel,
    StudentPromotionRecordModel,
    StudentTransferRecordModel,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "StudentModel",
    "StudentTransferRecordModel",
    "StudentPromotionRecordModel",
]
