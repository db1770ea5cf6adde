"""TOML config loading for yarrlox.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "yarrlox.toml"


@dataclass
class ReplConfig:
    prompt: str = "> "


@dataclass
class DiagnosticsConfig:
    color: bool = True


@dataclass
class YarrloxConfig:
    repl: ReplConfig = field(default_factory=ReplConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find yarrlox.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> YarrloxConfig:
    """Parse a yarrlox.toml file into a YarrloxConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = YarrloxConfig()

    if "repl" in data:
        repl = data["repl"]
        config.repl = ReplConfig(prompt=repl.get("prompt", "> "))

    if "diagnostics" in data:
        diag = data["diagnostics"]
        config.diagnostics = DiagnosticsConfig(color=diag.get("color", True))

    return config


def discover_config(start_path: Path | None = None) -> YarrloxConfig:
    """Load the nearest yarrlox.toml, or the defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return YarrloxConfig()
