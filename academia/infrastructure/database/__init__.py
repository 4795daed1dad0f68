# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database access for the student records database."""

from academia.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_sessionmaker,
    init_database,
    session_scope,
)

__all__ = [
    "DatabaseError",
    "init_database",
    "close_database",
    "get_sessionmaker",
    "session_scope",
    "check_database_connection",
]
