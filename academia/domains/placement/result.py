# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Explicit success/failure values for the placement pipeline.

Validator, guard and executors return Ok or Err instead of raising, so that
a batch can collect every per-student outcome without exception plumbing.

Example:
    >>> result = validator.validate_transfer(student, request)
    >>> if isinstance(result, Err):
    ...     return result
    >>> resolved = result.value
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from academia.domains.placement.errors import PlacementError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome carrying a placement error."""

    error: PlacementError

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
