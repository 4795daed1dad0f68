# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch coordinator for placement operations.

Runs a single-student operation for every distinct id in a batch,
concurrently up to a configured limit. Each id succeeds or fails on its own;
the batch itself never fails because one student did.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from academia.domains.placement.result import Err, Result
from academia.domains.placement.types import BatchItemError, BatchOutcome, Commit

logger = logging.getLogger(__name__)

StudentOperation = Callable[[str], Awaitable[Result[Commit]]]


def distinct_ids(student_ids: Iterable[str]) -> list[str]:
    """Drop repeated ids, keeping the first occurrence order."""
    return list(dict.fromkeys(student_ids))


class BatchCoordinator:
    """Fans a student operation out over a list of ids.

    Attributes:
        concurrency: Maximum number of students processed at once.
    """

    def __init__(self, concurrency: int = 16) -> None:
        self.concurrency = concurrency

    async def run(
        self,
        student_ids: Iterable[str],
        operation: StudentOperation,
        label: str = "placement",
    ) -> BatchOutcome:
        """Run operation once per distinct student id.

        Args:
            student_ids: Ids to process; duplicates are processed once.
            operation: Full single-student pipeline returning a Result.
            label: Operation name used in the summary log line.

        Returns:
            BatchOutcome with succeeded ids (input order), the committed
            students and one error entry per failed id.
        """
        ids = distinct_ids(student_ids)
        outcome = BatchOutcome()
        if not ids:
            return outcome

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _one(student_id: str) -> Result[Commit] | Exception:
            async with semaphore:
                try:
                    return await operation(student_id)
                except Exception as e:
                    logger.exception(
                        "Unexpected %s failure: student=%s", label, student_id
                    )
                    return e

        results = await asyncio.gather(*(_one(student_id) for student_id in ids))

        for student_id, result in zip(ids, results):
            if isinstance(result, Exception):
                outcome.errors.append(BatchItemError(id=student_id, message=str(result)))
            elif isinstance(result, Err):
                outcome.errors.append(BatchItemError(id=student_id, message=result.error.message))
            else:
                outcome.succeeded_ids.append(student_id)
                outcome.students.append(result.value.student)

        logger.info(
            "Batch %s: requested=%d, succeeded=%d, failed=%d",
            label,
            len(ids),
            len(outcome.succeeded_ids),
            len(outcome.errors),
        )
        return outcome
