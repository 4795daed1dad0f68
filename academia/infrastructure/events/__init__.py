# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure.

Components:
- EventBus: In-memory pub/sub with pattern matching
- EventTypes: Centralized event type constants
"""

from academia.infrastructure.events.bus import (
    EventBus,
    EventData,
    EventHandler,
    get_event_bus,
)
from academia.infrastructure.events.types import EventTypes

__all__ = [
    "EventBus",
    "EventData",
    "EventHandler",
    "get_event_bus",
    "EventTypes",
]
