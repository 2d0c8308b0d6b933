"""Settings for pingpy, validated with pydantic.

Sources, later ones overriding earlier ones:

1. defaults embedded below
2. a TOML file (``--config`` or the first one found by ``find_config_file``)
3. ``PINGPY_<SECTION>_<FIELD>`` environment variables
4. command-line values passed by the CLI as ``overrides``

All sources are merged before validation.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, PositiveInt, ValidationError, field_validator

from .errors import ConfigurationError

ENV_PREFIX = "PINGPY_"


class ProbeSettings(BaseModel):
    """Per-run probing parameters."""

    count: PositiveInt = 4
    timeout_ms: PositiveInt = 2000
    privileged: bool = False


class OutputSettings(BaseModel):
    """Console rendering."""

    ascii: bool = False
    color: bool = True


class LoggingSettings(BaseModel):
    """Diagnostic logging (stderr, optional file)."""

    level: str = "WARNING"
    file: Path | None = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        name = v.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {v}")
        return name


class PingConfig(BaseModel):
    """Main configuration for pingpy."""

    probe: ProbeSettings = ProbeSettings()
    output: OutputSettings = OutputSettings()
    logging: LoggingSettings = LoggingSettings()


def load_from_env(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Load configuration from environment variables.

    Examples:
        PINGPY_PROBE_COUNT=10
        PINGPY_PROBE_TIMEOUT_MS=500
        PINGPY_OUTPUT_ASCII=true
    """
    env = os.environ if environ is None else environ
    config: dict[str, Any] = {}

    for key, value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue

        parts = key[len(ENV_PREFIX) :].lower().split("_", 1)
        if len(parts) != 2:
            continue
        section, field = parts

        match value.lower():
            case "true" | "yes" | "on":
                value = True
            case "false" | "no" | "off":
                value = False
            case _ if value.isdigit():
                value = int(value)

        config.setdefault(section, {})[field] = value

    return config


def find_config_file() -> Path | None:
    """Find a configuration file in the standard locations.

    Search order:
    1. ./pingpy.toml
    2. ~/.config/pingpy/config.toml
    3. ~/.pingpy.toml
    """
    candidates = [
        Path.cwd() / "pingpy.toml",
        Path.home() / ".config" / "pingpy" / "config.toml",
        Path.home() / ".pingpy.toml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _merge_sections(config_dict: dict[str, Any], sections: dict[str, dict[str, Any]]) -> None:
    for section, values in sections.items():
        existing = config_dict.get(section)
        if not isinstance(existing, dict):
            existing = config_dict[section] = {}
        existing.update(values)


def load_config(
    config_file: Path | None = None,
    environ: dict[str, str] | None = None,
    overrides: dict[str, dict[str, Any]] | None = None,
) -> PingConfig:
    """Merge defaults, the TOML file, the environment and ``overrides`` into a validated PingConfig.

    ``overrides`` holds command-line values; they are merged before validation so
    a valid value there replaces an invalid one from the file or environment.

    Raises:
        ConfigurationError: unreadable file, bad TOML, or values that fail validation.
    """
    config_dict: dict[str, Any] = {}

    if config_file is None:
        config_file = find_config_file()

    if config_file is not None:
        try:
            with open(config_file, "rb") as f:
                config_dict.update(tomllib.load(f))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}"
            ) from e

    _merge_sections(config_dict, load_from_env(environ))
    _merge_sections(config_dict, overrides or {})

    try:
        return PingConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


DEFAULT_CONFIG_TOML = """\
# pingpy configuration

[probe]
count = 4          # attempts per host
timeout_ms = 2000  # per-attempt timeout
privileged = false # true: raw ICMP sockets (root / CAP_NET_RAW)

[output]
ascii = false
color = true

[logging]
level = "WARNING"
# file = "pingpy.log"
"""


def create_default_config(output_file: Path) -> None:
    """Write a commented default configuration file."""
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(DEFAULT_CONFIG_TOML)
