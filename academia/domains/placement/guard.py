# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-student concurrency guard.

Serializes placement changes for the same student inside this process with
an asyncio.Lock per student id, and relies on the store's compare-and-swap
on version for writers in other processes. Under the lock the guard reads
the freshest snapshot, asks the caller to plan a mutation against it and
commits. A stale-version conflict triggers a re-read and re-plan up to
max_retries times.

Example:
    >>> guard = ConcurrencyGuard(store, lock_timeout=5.0)
    >>> result = await guard.with_lock(
    ...     "stu-1", lambda current: executor.plan(current, request)
    ... )
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from academia.domains.placement.errors import (
    ConflictError,
    GuardTimeoutError,
    StudentNotFoundError,
)
from academia.domains.placement.result import Err, Ok, Result
from academia.domains.placement.store import StudentStore
from academia.domains.placement.types import Commit, Mutation, StudentState

logger = logging.getLogger(__name__)

PlanFn = Callable[[StudentState], Result[Mutation]]


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class ConcurrencyGuard:
    """Linearizes placement changes per student.

    Attributes:
        store: Student store used for the fresh read and the commit.
        lock_timeout: Seconds to wait for the student's lock.
        max_retries: Re-plans allowed after a version conflict.
    """

    def __init__(
        self,
        store: StudentStore,
        lock_timeout: float = 10.0,
        max_retries: int = 3,
    ) -> None:
        self.store = store
        self.lock_timeout = lock_timeout
        self.max_retries = max_retries
        self._locks: dict[str, _LockEntry] = {}

    @property
    def active_keys(self) -> int:
        """Number of students with a holder or waiter on their lock."""
        return len(self._locks)

    async def with_lock(self, student_id: str, plan: PlanFn) -> Result[Commit]:
        """Run plan-and-commit for one student under its lock.

        Args:
            student_id: Student to lock.
            plan: Called with the current snapshot; returns Ok(Mutation) to
                commit or Err to abort without writing.

        Returns:
            Ok(Commit) with the stored student and the appended record, or
            Err with StudentNotFoundError, GuardTimeoutError, ConflictError
            or whatever error plan returned.
        """
        entry = self._locks.get(student_id)
        if entry is None:
            entry = self._locks[student_id] = _LockEntry()
        entry.holders += 1
        try:
            try:
                async with asyncio.timeout(self.lock_timeout):
                    await entry.lock.acquire()
            except TimeoutError:
                logger.warning(
                    "Placement lock timeout: student=%s, waited=%.2fs",
                    student_id,
                    self.lock_timeout,
                )
                return Err(GuardTimeoutError(student_id, self.lock_timeout))

            try:
                return await self._plan_and_commit(student_id, plan)
            finally:
                entry.lock.release()
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._locks.pop(student_id, None)

    async def _plan_and_commit(self, student_id: str, plan: PlanFn) -> Result[Commit]:
        conflict: ConflictError | None = None
        for attempt in range(self.max_retries + 1):
            current = await self.store.get(student_id)
            if current is None:
                return Err(StudentNotFoundError(student_id))

            planned = plan(current)
            if isinstance(planned, Err):
                return planned
            mutation = planned.value

            try:
                stored = await self.store.commit(mutation)
            except ConflictError as e:
                conflict = e
                logger.info(
                    "Version conflict, re-reading: student=%s, attempt=%d/%d",
                    student_id,
                    attempt + 1,
                    self.max_retries + 1,
                )
                continue
            except StudentNotFoundError as e:
                return Err(e)

            return Ok(Commit(student=stored, record=mutation.record))

        logger.warning("Giving up after repeated version conflicts: student=%s", student_id)
        return Err(conflict or ConflictError(student_id))
