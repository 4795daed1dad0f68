# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the grade code catalog."""

import pytest

from academia.core.config import PlacementSettings
from academia.domains.placement import (
    Err,
    GradeCatalog,
    Ok,
    UnknownGradeCodeError,
    stage_for_grade,
)


class TestStageForGrade:
    """Tests for stage derivation from grade code prefixes."""

    @pytest.mark.parametrize(
        ("grade_code", "stage"),
        [
            ("PRY1", "primary"),
            ("JSS3", "junior_secondary"),
            ("SSS2", "senior_secondary"),
            ("sss1", "senior_secondary"),
        ],
    )
    def test_known_prefixes(self, grade_code: str, stage: str) -> None:
        assert stage_for_grade(grade_code) == stage

    def test_unknown_prefix_returns_none(self) -> None:
        assert stage_for_grade("Grade 7") is None
        assert stage_for_grade("12") is None


class TestGradeCatalog:
    """Tests for GradeCatalog."""

    def test_lenient_catalog_accepts_unknown_codes(self) -> None:
        catalog = GradeCatalog()

        result = catalog.resolve("Year 9")

        assert result == Ok("Year 9")

    def test_strict_catalog_rejects_unknown_codes(self) -> None:
        catalog = GradeCatalog(strict=True)

        result = catalog.resolve("Year 9", school_id="school-1", student_id="stu-1")

        assert isinstance(result, Err)
        assert isinstance(result.error, UnknownGradeCodeError)
        assert result.error.student_id == "stu-1"
        assert "Year 9" in result.error.message
        assert "school-1" in result.error.message

    def test_strict_catalog_accepts_default_codes(self) -> None:
        catalog = GradeCatalog(strict=True)

        assert catalog.resolve("JSS2") == Ok("JSS2")

    def test_school_specific_codes(self) -> None:
        catalog = GradeCatalog(
            {"default": ["JSS1"], "school-b": ["Y7", "Y8"]},
            strict=True,
        )

        assert catalog.is_known("Y7", "school-b")
        assert not catalog.is_known("JSS1", "school-b")
        assert catalog.is_known("JSS1", "school-a")
        assert isinstance(catalog.resolve("Y7", "school-a"), Err)

    def test_codes_are_not_normalized(self) -> None:
        catalog = GradeCatalog(strict=True)

        assert isinstance(catalog.resolve("jss1"), Err)
        assert isinstance(catalog.resolve(" JSS1"), Err)

    def test_from_settings(self) -> None:
        settings = PlacementSettings(
            strict_grade_codes=True,
            grade_codes={"default": ["A1", "A2"]},
        )

        catalog = GradeCatalog.from_settings(settings)

        assert catalog.strict is True
        assert catalog.codes_for(None) == frozenset({"A1", "A2"})
