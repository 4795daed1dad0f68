# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer.

Domains:
    auth: JWT token handling for the acting administrator.
    placement: Student transfer, promotion and graduation.
"""
