"""
Engine configuration.

Precedence, lowest to highest:
1. `EngineConfig` defaults
2. YAML file (explicit path, or `CALC_CONFIG_FILE`)
3. `CALC_*` environment variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

ENV_PREFIX = "CALC_"
CONFIG_FILE_ENV = "CALC_CONFIG_FILE"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EngineConfig:
    """Runtime settings for calculation runners."""

    max_workers: int = os.cpu_count() or 1
    strict_market_data: bool = False
    log_level: str = "INFO"
    log_json: bool = False
    default_shift_bp: float = 1.0

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        if self.default_shift_bp == 0:
            raise ValueError("default_shift_bp must be non-zero")


def _coerce(name: str, raw: Any) -> Any:
    """Coerce a raw YAML/env value to the type of the EngineConfig field."""
    default = EngineConfig.__dataclass_fields__[name].default
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).strip().lower() in _TRUE_VALUES
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return str(raw)


def _load_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    # Allow the settings either at top level or under an `engine:` section
    section = data.get("engine", data)
    return dict(section)


def load_config(
    path: Optional[Path] = None,
    environ: Optional[dict[str, str]] = None,
) -> EngineConfig:
    """Build an EngineConfig from defaults, an optional YAML file and the environment."""
    env = os.environ if environ is None else environ
    config = EngineConfig()
    known = {f.name for f in fields(EngineConfig)}

    if path is None and env.get(CONFIG_FILE_ENV):
        path = Path(env[CONFIG_FILE_ENV])
    if path is not None:
        file_values = _load_yaml(Path(path))
        unknown = set(file_values) - known
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")
        config = replace(
            config, **{k: _coerce(k, v) for k, v in file_values.items()}
        )

    env_values = {}
    for name in known:
        raw = env.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            env_values[name] = _coerce(name, raw)
    if env_values:
        config = replace(config, **env_values)
    return config
