# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Named grammar registry used to select parsers from configuration."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from ..core.errors import ConfigError
from .base import Grammar
from .cargo import CargoJsonGrammar, RustfmtJsonGrammar
from .text import RegexGrammar, default_grammar, gcc_grammar

GrammarFactory = Callable[[], Grammar]


@dataclass(slots=True)
class _Entry:
    factory: GrammarFactory
    description: str


@dataclass(slots=True)
class GrammarRegistry:
    """Map grammar names to factories producing fresh grammar instances."""

    _entries: dict[str, _Entry] = field(default_factory=dict)

    def register(
        self,
        name: str,
        factory: GrammarFactory,
        *,
        description: str = "",
        replace: bool = False,
    ) -> None:
        """Register ``factory`` under ``name``.

        Raises:
            ValueError: If ``name`` is taken and ``replace`` is false.
        """

        if name in self._entries and not replace:
            raise ValueError(f"grammar '{name}' is already registered")
        self._entries[name] = _Entry(factory=factory, description=description)

    def get(self, name: str) -> Grammar:
        """Return a new grammar instance registered as ``name``.

        Raises:
            ConfigError: If no grammar with that name exists.
        """

        try:
            entry = self._entries[name]
        except KeyError:
            available = ", ".join(self.names())
            raise ConfigError(f"Unknown grammar '{name}' (available: {available})") from None
        return entry.factory()

    def names(self) -> list[str]:
        """Return registered grammar names in sorted order."""

        return sorted(self._entries)

    def describe(self) -> list[tuple[str, str]]:
        """Return ``(name, description)`` pairs in sorted order."""

        return [(name, self._entries[name].description) for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._entries


def default_registry() -> GrammarRegistry:
    """Return a registry holding the built-in grammars."""

    registry = GrammarRegistry()
    registry.register("default", default_grammar, description="severity: file:line:col: message")
    registry.register("gcc", gcc_grammar, description="file:line:col: severity: message [code]")
    registry.register("cargo", CargoJsonGrammar, description="cargo --message-format=json records")
    registry.register(
        "rustc-json",
        lambda: CargoJsonGrammar(name="rustc-json", tool="rustc"),
        description="rustc --error-format=json diagnostics",
    )
    registry.register("rustfmt-json", RustfmtJsonGrammar, description="cargo fmt --message-format=json")
    return registry


def build_registry(custom: Mapping[str, str] | None = None) -> GrammarRegistry:
    """Return the built-in registry extended with user-defined regex grammars.

    Args:
        custom: Mapping of grammar name to regular expression source.

    Raises:
        ConfigError: If a custom pattern is invalid or shadows a built-in grammar.
    """

    registry = default_registry()
    for name, source in (custom or {}).items():
        try:
            grammar = RegexGrammar.from_source(name, source)
            registry.register(name, lambda grammar=grammar: grammar, description=f"custom: {source}")
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
    return registry


__all__ = ["GrammarFactory", "GrammarRegistry", "build_registry", "default_registry"]
