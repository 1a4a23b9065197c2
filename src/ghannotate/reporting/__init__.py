# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reporting helpers for run summaries."""

from __future__ import annotations

from .summary import render_summary, write_summary

__all__ = ["render_summary", "write_summary"]
