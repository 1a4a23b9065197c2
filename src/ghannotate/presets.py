# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Named invocations for common Cargo subcommands."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from .core.errors import ConfigError


@dataclass(frozen=True, slots=True)
class Preset:
    """Executable, leading arguments and grammar for one build command.

    When ``executable`` is ``None`` the configured Cargo executable is used.
    """

    name: str
    description: str
    grammar: str
    leading_args: tuple[str, ...]
    executable: str | None = None

    def resolve(self, cargo: str, args: Sequence[str]) -> tuple[str, list[str]]:
        """Return the ``(command, arguments)`` pair to spawn."""

        return self.executable or cargo, [*self.leading_args, *args]


PRESETS: Final[dict[str, Preset]] = {
    preset.name: preset
    for preset in (
        Preset("cargo-check", "cargo check", "cargo", ("check", "--message-format=json")),
        Preset("cargo-clippy", "cargo clippy", "cargo", ("clippy", "--message-format=json")),
        Preset("cargo-build", "cargo build", "cargo", ("build", "--message-format=json")),
        Preset(
            "cargo-fmt",
            "cargo fmt (requires a nightly toolchain)",
            "rustfmt-json",
            ("run", "nightly", "cargo", "fmt", "--message-format=json"),
            executable="rustup",
        ),
    )
}


def get_preset(name: str) -> Preset:
    """Return the preset called ``name``.

    Raises:
        ConfigError: If no such preset exists.
    """

    try:
        return PRESETS[name]
    except KeyError:
        available = ", ".join(sorted(PRESETS))
        raise ConfigError(f"Unknown preset '{name}' (available: {available})") from None


__all__ = ["PRESETS", "Preset", "get_preset"]
