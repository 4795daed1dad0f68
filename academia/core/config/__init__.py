# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the Academia placement service.

Example:
    >>> from academia.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.environment
    'development'
"""

from academia.core.config.settings import (
    DEFAULT_GRADE_CODES,
    APISettings,
    CORSSettings,
    DatabaseSettings,
    JWTSettings,
    PlacementSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "JWTSettings",
    "CORSSettings",
    "APISettings",
    "PlacementSettings",
    "DEFAULT_GRADE_CODES",
]
