"""Academia placement service.

Student grade/section transfer, promotion and graduation for school
management deployments.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
