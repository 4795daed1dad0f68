# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ASGI entry point.

Run with:
    uvicorn academia.main:app --host 0.0.0.0 --port 34000
"""

from academia.api import create_app

app = create_app()
