"""Manifest reader — the program's declared name from its Cargo.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path

from idlgen.errors import ConfigError


def read_program_name(manifest_path: str | Path) -> str:
    """Return ``package.name`` from a Cargo manifest.

    Raises:
        ConfigError: If the manifest cannot be read or parsed, or lacks a
            ``[package]`` table with a string ``name``.
    """
    path = Path(manifest_path)

    try:
        with open(path, "rb") as f:
            manifest = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read manifest {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid Cargo.toml {path}: {e}") from e

    package = manifest.get("package")
    if not isinstance(package, dict):
        raise ConfigError(f"Invalid Cargo.toml {path}: missing [package]")

    name = package.get("name")
    if not isinstance(name, str):
        raise ConfigError(f"Invalid Cargo.toml {path}: missing package name")

    return name
