# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Process execution helpers."""

from __future__ import annotations

from .process import InvokerOptions, OutputLine, ProcessInvoker, RunningProcess, Stream

__all__ = ["InvokerOptions", "OutputLine", "ProcessInvoker", "RunningProcess", "Stream"]
