# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

from collections.abc import Iterator
from datetime import datetime, timezone

import pytest

from academia.core.config import PlacementSettings, clear_settings_cache
from academia.domains.placement import (
    InMemoryStudentStore,
    PlacementService,
    StudentState,
)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_student_id() -> str:
    """Provide a sample student ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def sample_school_id() -> str:
    """Provide a sample school ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def student(sample_student_id: str, sample_school_id: str) -> StudentState:
    """An active JSS1 student in section A."""
    return StudentState(
        id=sample_student_id,
        school_id=sample_school_id,
        stage="junior_secondary",
        grade_code="JSS1",
        stream_section="A",
    )


@pytest.fixture
def store(student: StudentState) -> InMemoryStudentStore:
    return InMemoryStudentStore([student])


@pytest.fixture
def placement_settings() -> PlacementSettings:
    return PlacementSettings(lock_timeout_seconds=2.0, max_conflict_retries=3)


@pytest.fixture
def service(store: InMemoryStudentStore, placement_settings: PlacementSettings) -> PlacementService:
    """Placement service over the in-memory store, without audit."""
    return PlacementService(store, settings=placement_settings)
