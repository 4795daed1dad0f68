# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for ConcurrencyGuard."""

import asyncio
from dataclasses import replace

import pytest

from academia.domains.placement import (
    AlreadyAtTargetError,
    ConcurrencyGuard,
    ConflictError,
    Err,
    GuardTimeoutError,
    InMemoryStudentStore,
    Mutation,
    Ok,
    StudentNotFoundError,
    StudentState,
    TransferExecutor,
    TransferRequest,
)


class SlowStore(InMemoryStudentStore):
    """Yields to the event loop on every call so tasks interleave."""

    async def get(self, student_id: str) -> StudentState | None:
        await asyncio.sleep(0.001)
        return await super().get(student_id)

    async def commit(self, mutation: Mutation) -> StudentState:
        await asyncio.sleep(0.001)
        return await super().commit(mutation)


class GatedStore(InMemoryStudentStore):
    """Blocks the first read until the gate opens."""

    def __init__(self, students, gate: asyncio.Event) -> None:
        super().__init__(students)
        self.gate = gate
        self.blocked = False

    async def get(self, student_id: str) -> StudentState | None:
        if not self.blocked:
            self.blocked = True
            await self.gate.wait()
        return await super().get(student_id)


class ForeignWriterStore(InMemoryStudentStore):
    """Simulates another process committing just before our first commit."""

    def __init__(self, students) -> None:
        super().__init__(students)
        self.commits = 0

    async def commit(self, mutation: Mutation) -> StudentState:
        self.commits += 1
        if self.commits == 1:
            current = await self.get(mutation.student.id)
            assert current is not None
            foreign = TransferExecutor().apply(
                current, TransferRequest("JSS2", "Z", reason="other node")
            )
            await super().commit(foreign)
        return await super().commit(mutation)


class AlwaysConflictStore(InMemoryStudentStore):
    def __init__(self, students) -> None:
        super().__init__(students)
        self.commits = 0

    async def commit(self, mutation: Mutation) -> StudentState:
        self.commits += 1
        raise ConflictError(mutation.student.id, mutation.expected_version)


def _transfer(section: str, grade: str = "JSS1"):
    executor = TransferExecutor()
    return lambda current: executor.plan(current, TransferRequest(grade, section))


class TestConcurrencyGuard:
    """Tests for per-student serialization."""

    @pytest.mark.asyncio
    async def test_single_change_commits(self, student: StudentState) -> None:
        guard = ConcurrencyGuard(InMemoryStudentStore([student]))

        result = await guard.with_lock(student.id, _transfer("B"))

        assert isinstance(result, Ok)
        assert result.value.student.version == 2
        assert result.value.record is not None
        assert result.value.record.to_section == "B"
        assert guard.active_keys == 0

    @pytest.mark.asyncio
    async def test_concurrent_transfers_are_serialized(self, student: StudentState) -> None:
        store = SlowStore([student])
        guard = ConcurrencyGuard(store, lock_timeout=5.0)
        sections = ["B", "C", "D", "E", "F"]

        results = await asyncio.gather(
            *(guard.with_lock(student.id, _transfer(section)) for section in sections)
        )

        assert all(isinstance(r, Ok) for r in results)
        final = await store.get(student.id)
        assert final is not None
        assert final.version == student.version + len(sections)
        history = final.transfer_history
        assert len(history) == len(sections)
        assert history[0].from_section == "A"
        for previous, following in zip(history, history[1:]):
            assert previous.to_section == following.from_section
        assert final.stream_section == history[-1].to_section
        assert guard.active_keys == 0

    @pytest.mark.asyncio
    async def test_concurrent_same_target_only_one_wins(self, student: StudentState) -> None:
        store = SlowStore([student])
        guard = ConcurrencyGuard(store, lock_timeout=5.0)

        results = await asyncio.gather(
            *(guard.with_lock(student.id, _transfer("B")) for _ in range(4))
        )

        assert sum(isinstance(r, Ok) for r in results) == 1
        failures = [r for r in results if isinstance(r, Err)]
        assert all(isinstance(r.error, AlreadyAtTargetError) for r in failures)
        final = await store.get(student.id)
        assert final is not None
        assert final.version == 2
        assert len(final.transfer_history) == 1

    @pytest.mark.asyncio
    async def test_conflict_rereads_and_replans(self, student: StudentState) -> None:
        store = ForeignWriterStore([student])
        guard = ConcurrencyGuard(store, max_retries=3)

        result = await guard.with_lock(student.id, _transfer("B"))

        assert isinstance(result, Ok)
        assert store.commits == 2
        final = result.value.student
        assert final.version == 3
        assert [r.to_section for r in final.transfer_history] == ["Z", "B"]
        # The replanned record starts from the foreign writer's placement.
        assert final.transfer_history[1].from_section == "Z"
        assert final.transfer_history[1].from_grade == "JSS2"

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, student: StudentState) -> None:
        store = AlwaysConflictStore([student])
        guard = ConcurrencyGuard(store, max_retries=2)

        result = await guard.with_lock(student.id, _transfer("B"))

        assert isinstance(result, Err)
        assert isinstance(result.error, ConflictError)
        assert store.commits == 3

    @pytest.mark.asyncio
    async def test_lock_timeout_writes_nothing(self, student: StudentState) -> None:
        gate = asyncio.Event()
        store = GatedStore([student], gate)
        guard = ConcurrencyGuard(store, lock_timeout=0.05)

        holder = asyncio.create_task(guard.with_lock(student.id, _transfer("B")))
        for _ in range(3):
            await asyncio.sleep(0)

        waiter = await guard.with_lock(student.id, _transfer("C"))

        assert isinstance(waiter, Err)
        assert isinstance(waiter.error, GuardTimeoutError)
        assert waiter.error.student_id == student.id

        gate.set()
        first = await holder
        assert isinstance(first, Ok)
        final = await store.get(student.id)
        assert final is not None
        assert [r.to_section for r in final.transfer_history] == ["B"]
        assert guard.active_keys == 0

    @pytest.mark.asyncio
    async def test_unknown_student(self) -> None:
        guard = ConcurrencyGuard(InMemoryStudentStore())

        result = await guard.with_lock("missing", _transfer("B"))

        assert isinstance(result, Err)
        assert isinstance(result.error, StudentNotFoundError)
        assert guard.active_keys == 0

    @pytest.mark.asyncio
    async def test_plan_error_aborts_without_commit(self, student: StudentState) -> None:
        store = InMemoryStudentStore([student])
        guard = ConcurrencyGuard(store)

        result = await guard.with_lock(student.id, _transfer("A"))

        assert isinstance(result, Err)
        assert await store.get(student.id) == student

    @pytest.mark.asyncio
    async def test_different_students_do_not_block(self, student: StudentState) -> None:
        other = replace(student, id="other-student")
        gate = asyncio.Event()
        store = GatedStore([student, other], gate)
        guard = ConcurrencyGuard(store, lock_timeout=0.05)

        holder = asyncio.create_task(guard.with_lock(student.id, _transfer("B")))
        for _ in range(3):
            await asyncio.sleep(0)

        result = await guard.with_lock(other.id, _transfer("C"))

        assert isinstance(result, Ok)
        gate.set()
        assert isinstance(await holder, Ok)
