# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event type constants.

Publishers and subscribers refer to these names instead of string literals.
"""


class EventTypes:
    """Event types organized by domain."""

    class Placement:
        """Committed placement changes."""

        TRANSFER_RECORDED = "placement.transfer.recorded"
        EXTERNAL_TRANSFER_RECORDED = "placement.transfer.external"
        PROMOTION_RECORDED = "placement.promotion.recorded"
        GRADUATION_RECORDED = "placement.graduation.recorded"
        ALL = "placement.*"
