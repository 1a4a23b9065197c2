# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Grammars and the streaming parser turning tool output into diagnostics."""

from __future__ import annotations

from .base import Grammar
from .cargo import FORMAT_MISMATCH_TITLE, CargoJsonGrammar, RustfmtJsonGrammar
from .parser import DiagnosticParser, ParseStats
from .registry import GrammarRegistry, build_registry, default_registry
from .text import DEFAULT_PATTERN, GCC_PATTERN, RegexGrammar, default_grammar, gcc_grammar

__all__ = [
    "DEFAULT_PATTERN",
    "FORMAT_MISMATCH_TITLE",
    "GCC_PATTERN",
    "CargoJsonGrammar",
    "DiagnosticParser",
    "Grammar",
    "GrammarRegistry",
    "ParseStats",
    "RegexGrammar",
    "RustfmtJsonGrammar",
    "build_registry",
    "default_grammar",
    "default_registry",
    "gcc_grammar",
]
