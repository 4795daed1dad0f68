# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

Dependencies are used to:
- Initialize and close the database and the placement service
- Get authenticated users
- Get the placement service

Example:
    @router.patch("/{student_id}/transfer")
    async def transfer_student(
        current_user: CurrentUser = Depends(require_admin),
        service: PlacementService = Depends(get_placement_service),
    ):
        ...
"""

import logging

from fastapi import HTTPException, Request, status

from academia.api.middleware.auth import CurrentUser, get_current_user
from academia.core.config import get_settings
from academia.domains.placement import PlacementAuditSink, PlacementService
from academia.domains.placement.sql_store import SqlStudentStore
from academia.infrastructure.database import close_database, get_sessionmaker, init_database
from academia.infrastructure.events import get_event_bus

logger = logging.getLogger(__name__)

_placement_service: PlacementService | None = None


async def init_db() -> None:
    """Initialize the database pool and the placement service."""
    global _placement_service
    settings = get_settings()

    await init_database(settings)

    _placement_service = PlacementService(
        SqlStudentStore(get_sessionmaker()),
        settings=settings.placement,
        audit=PlacementAuditSink(get_event_bus()),
    )


async def close_db() -> None:
    """Flush pending audit events and close the database pool."""
    global _placement_service

    if _placement_service is not None and _placement_service.audit is not None:
        await _placement_service.audit.drain()
    _placement_service = None

    await close_database()


def placement_service_ready() -> bool:
    return _placement_service is not None


def get_placement_service() -> PlacementService:
    """Get the process-wide placement service.

    The service owns the per-student lock registry, so every request must
    share the same instance.

    Raises:
        HTTPException: If the service has not been initialized.
    """
    if _placement_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Placement service not initialized",
        )
    return _placement_service


# =========================================================================
# Authentication Dependencies
# =========================================================================


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require super_admin or school_admin.

    Raises:
        HTTPException: If not authenticated or not admin.
    """
    user = require_auth(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
