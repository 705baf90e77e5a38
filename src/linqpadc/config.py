"""Build settings loader.

Settings come from a ``[build]`` table in ``linqpadc.toml`` (or the file passed
with ``--config``), then environment overrides:

- ``LINQPADC_DOTNET``: path to the dotnet executable
- ``LINQPADC_RUNTIME``: runtime identifier for publish (``-r``)
- ``LINQPADC_FRAMEWORK``: target framework written into the project file
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "linqpadc.toml"

_ENV_OVERRIDES = {
    "LINQPADC_DOTNET": "dotnet",
    "LINQPADC_RUNTIME": "runtime_identifier",
    "LINQPADC_FRAMEWORK": "target_framework",
}


@dataclass(frozen=True)
class BuildSettings:
    """Toolchain constants for one compilation."""

    dotnet: str = "dotnet"
    target_framework: str = "net8.0"
    runtime_identifier: str = "linux-x64"
    configuration: str = "Release"
    trim_single_file: bool = True
    poll_interval: float = 0.1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildSettings:
        """Validate a ``[build]`` table into BuildSettings."""
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ValueError(f"unknown build settings: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            default = getattr(cls, key)
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    raise TypeError(f"{key} must be a boolean")
            elif isinstance(default, float):
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                    raise TypeError(f"{key} must be a positive number")
                value = float(value)
            elif not isinstance(value, str) or not value.strip():
                raise TypeError(f"{key} must be a non-empty string")
            values[key] = value
        return cls(**values)


def load_build_settings(
    config_path: Path | None = None,
    *,
    cwd: Path | None = None,
    environ: dict[str, str] | None = None,
) -> BuildSettings:
    """Load build settings from TOML and environment.

    Args:
        config_path: Explicit config file; must exist when given
        cwd: Directory searched for ``linqpadc.toml`` when no path is given
        environ: Environment mapping (defaults to ``os.environ``)

    Raises:
        RuntimeError: If the config file is missing, malformed or invalid
    """
    env = os.environ if environ is None else environ

    path = config_path
    if path is None:
        candidate = (cwd or Path.cwd()) / CONFIG_FILENAME
        path = candidate if candidate.exists() else None
    elif not path.exists():
        raise RuntimeError(f"Config file not found: {path}")

    settings = BuildSettings()
    if path is not None:
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            settings = BuildSettings.from_dict(data.get("build", {}))
        except tomllib.TOMLDecodeError as e:
            raise RuntimeError(f"Malformed TOML config at {path}: {e}") from e
        except (TypeError, ValueError, AttributeError) as e:
            raise RuntimeError(f"Invalid config structure in {path}: {e}") from e

    overrides = {
        field_name: env[var].strip()
        for var, field_name in _ENV_OVERRIDES.items()
        if env.get(var, "").strip()
    }
    return replace(settings, **overrides) if overrides else settings
