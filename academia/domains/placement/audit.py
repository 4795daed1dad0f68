# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Placement audit sink.

After a placement change is committed, a copy of its record is published on
the event bus as a detached task. The request never waits for subscribers
and a subscriber failure never affects the committed change.
"""

import asyncio
import logging
from dataclasses import asdict
from enum import Enum
from typing import Any

from academia.domains.placement.types import (
    Commit,
    PromotionRecord,
    StudentState,
    TransferRecord,
    TransferType,
)
from academia.infrastructure.events import EventBus, EventData, EventTypes
from academia.utils.logging import get_logger

logger = logging.getLogger(__name__)
audit_logger = get_logger("academia.audit")


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def record_payload(
    student: StudentState,
    record: TransferRecord | PromotionRecord | None,
) -> dict[str, Any]:
    """Build the event payload for a committed change."""
    payload: dict[str, Any] = {
        "student_id": student.id,
        "school_id": student.school_id,
        "status": student.status.value,
        "grade_code": student.grade_code,
        "stream_section": student.stream_section,
        "version": student.version,
    }
    if record is not None:
        payload["record"] = {k: _jsonable(v) for k, v in asdict(record).items()}
    return payload


def event_type_for(commit: Commit) -> str:
    record = commit.record
    if isinstance(record, TransferRecord):
        if record.type is TransferType.EXTERNAL:
            return EventTypes.Placement.EXTERNAL_TRANSFER_RECORDED
        return EventTypes.Placement.TRANSFER_RECORDED
    if isinstance(record, PromotionRecord):
        return EventTypes.Placement.PROMOTION_RECORDED
    return EventTypes.Placement.GRADUATION_RECORDED


class PlacementAuditSink:
    """Fire-and-forget publisher of committed placement records."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self._pending: set[asyncio.Task[EventData]] = set()

    def notify(self, commit: Commit) -> None:
        """Schedule publication of a committed change without awaiting it."""
        task = asyncio.create_task(
            self.bus.publish(
                event_type_for(commit),
                record_payload(commit.student, commit.record),
                school_id=commit.student.school_id,
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: "asyncio.Task[EventData]") -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Audit publish failed: %s", error)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled publication to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


async def log_placement_event(event: EventData) -> None:
    """Default subscriber writing one structured audit line per change."""
    payload = event.payload
    record = payload.get("record") or {}
    audit_logger.info(
        "placement_change",
        event_type=event.event_type,
        event_id=event.event_id,
        student_id=payload.get("student_id"),
        school_id=event.school_id,
        from_grade=record.get("from_grade"),
        to_grade=record.get("to_grade"),
        from_section=record.get("from_section"),
        to_section=record.get("to_section"),
        performed_by=record.get("performed_by"),
        version=payload.get("version"),
    )
