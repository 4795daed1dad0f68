# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade code catalog.

Grade codes are school scoped. The school stage is derived from the code
prefix (PRY1 -> primary). Whether a code outside the catalog is rejected
depends on the strict flag; by default unknown codes are accepted and stored
as given.
"""

import re
from collections.abc import Mapping, Sequence

from academia.core.config.settings import DEFAULT_GRADE_CODES, PlacementSettings
from academia.domains.placement.errors import UnknownGradeCodeError
from academia.domains.placement.result import Err, Ok, Result

STAGE_PREFIXES: dict[str, str] = {
    "PRY": "primary",
    "JSS": "junior_secondary",
    "SSS": "senior_secondary",
}

_PREFIX_RE = re.compile(r"^([A-Za-z]+)")


def stage_for_grade(grade_code: str) -> str | None:
    """Derive the school stage from a grade code prefix.

    Args:
        grade_code: Grade code such as "JSS2".

    Returns:
        Stage name, or None if the prefix is not a known stage.
    """
    match = _PREFIX_RE.match(grade_code.strip())
    if match is None:
        return None
    return STAGE_PREFIXES.get(match.group(1).upper())


class GradeCatalog:
    """Per-school enumeration of valid grade codes.

    Attributes:
        strict: Reject codes that are not listed for the school.
    """

    def __init__(
        self,
        grade_codes: Mapping[str, Sequence[str]] | None = None,
        strict: bool = False,
    ) -> None:
        codes = grade_codes or {"default": DEFAULT_GRADE_CODES}
        self._codes: dict[str, frozenset[str]] = {
            school: frozenset(school_codes)
            for school, school_codes in codes.items()
        }
        self.strict = strict

    @classmethod
    def from_settings(cls, settings: PlacementSettings) -> "GradeCatalog":
        return cls(settings.grade_codes, strict=settings.strict_grade_codes)

    def codes_for(self, school_id: str | None) -> frozenset[str]:
        """Return the codes that apply to a school, falling back to the default list."""
        if school_id is not None and school_id in self._codes:
            return self._codes[school_id]
        return self._codes.get("default", frozenset())

    def is_known(self, grade_code: str, school_id: str | None = None) -> bool:
        return grade_code in self.codes_for(school_id)

    def resolve(
        self,
        grade_code: str,
        school_id: str | None = None,
        student_id: str | None = None,
    ) -> Result[str]:
        """Check a grade code against the school's catalog.

        Args:
            grade_code: Code supplied by the caller.
            school_id: School the student belongs to.
            student_id: Student id used for error reporting.

        Returns:
            Ok with the code as given, or Err(UnknownGradeCodeError) in strict
            mode when the code is not listed.
        """
        if self.strict and not self.is_known(grade_code, school_id):
            return Err(UnknownGradeCodeError(grade_code, school_id, student_id))
        return Ok(grade_code)
