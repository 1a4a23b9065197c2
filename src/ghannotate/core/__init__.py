# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core models, errors, and runtime helpers shared by the runner."""
