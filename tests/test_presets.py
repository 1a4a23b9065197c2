# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for named Cargo invocations."""

from __future__ import annotations

import pytest

from ghannotate.core.errors import ConfigError
from ghannotate.parsing import default_registry
from ghannotate.presets import PRESETS, get_preset


def test_clippy_preset_uses_configured_cargo() -> None:
    command, args = get_preset("cargo-clippy").resolve("/opt/cargo", ["--all-targets"])

    assert command == "/opt/cargo"
    assert args == ["clippy", "--message-format=json", "--all-targets"]


def test_fmt_preset_runs_nightly_through_rustup() -> None:
    preset = get_preset("cargo-fmt")
    command, args = preset.resolve("cargo", [])

    assert command == "rustup"
    assert args[:3] == ["run", "nightly", "cargo"]
    assert preset.grammar == "rustfmt-json"


def test_every_preset_names_a_registered_grammar() -> None:
    registry = default_registry()

    assert all(preset.grammar in registry for preset in PRESETS.values())


def test_unknown_preset_is_a_config_error() -> None:
    with pytest.raises(ConfigError, match="cargo-check"):
        get_preset("cargo-doc")
