# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for BatchCoordinator."""

import asyncio

import pytest

from academia.domains.placement import (
    BatchCoordinator,
    Commit,
    Err,
    Ok,
    StudentNotFoundError,
    StudentState,
)
from academia.domains.placement.batch import distinct_ids


def _commit(student_id: str) -> Commit:
    return Commit(student=StudentState(id=student_id, grade_code="JSS1", stream_section="A"))


class TestDistinctIds:
    def test_keeps_first_occurrence_order(self) -> None:
        assert distinct_ids(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


class TestBatchCoordinator:
    """Tests for BatchCoordinator.run."""

    @pytest.mark.asyncio
    async def test_empty_input_returns_empty_outcome(self) -> None:
        calls: list[str] = []

        async def operation(student_id: str):
            calls.append(student_id)
            return Ok(_commit(student_id))

        outcome = await BatchCoordinator().run([], operation)

        assert outcome.succeeded == 0
        assert outcome.succeeded_ids == []
        assert outcome.errors == []
        assert calls == []

    @pytest.mark.asyncio
    async def test_duplicates_processed_once(self) -> None:
        calls: list[str] = []

        async def operation(student_id: str):
            calls.append(student_id)
            return Ok(_commit(student_id))

        outcome = await BatchCoordinator().run(["s1", "s2", "s1"], operation)

        assert sorted(calls) == ["s1", "s2"]
        assert outcome.succeeded_ids == ["s1", "s2"]
        assert [s.id for s in outcome.students] == ["s1", "s2"]

    @pytest.mark.asyncio
    async def test_failures_are_independent(self) -> None:
        async def operation(student_id: str):
            if student_id == "missing":
                return Err(StudentNotFoundError(student_id))
            if student_id == "boom":
                raise RuntimeError("database exploded")
            return Ok(_commit(student_id))

        outcome = await BatchCoordinator().run(["s1", "missing", "boom", "s2"], operation)

        assert outcome.succeeded_ids == ["s1", "s2"]
        assert outcome.succeeded == 2
        errors = {e.id: e.message for e in outcome.errors}
        assert errors == {"missing": "Student not found", "boom": "database exploded"}

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self) -> None:
        running = 0
        peak = 0

        async def operation(student_id: str):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return Ok(_commit(student_id))

        outcome = await BatchCoordinator(concurrency=3).run(
            [f"s{i}" for i in range(10)], operation
        )

        assert outcome.succeeded == 10
        assert 1 < peak <= 3
