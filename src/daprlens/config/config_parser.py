"""Configuration loading for daprlens.

Brief:
  Reads the optional YAML config file, applies environment overrides and
  validates the result against the pydantic models in config_schema.

Inputs:
  - YAML config path and an environment mapping

Outputs:
  - AppConfig instances
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional

import yaml

from .config_schema import AppConfig

ENV_STRATEGY = "DAPRLENS_DISCOVERY"
ENV_LOG_LEVEL = "DAPRLENS_LOG_LEVEL"


class ConfigError(ValueError):
    """
    Brief: Configuration could not be read or failed validation.

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """

    pass


def _read_yaml(config_path: str) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(cfg, dict):
        raise ConfigError("Configuration root must be a mapping")
    return cfg


def apply_env_overrides(
    cfg: Dict[str, Any], environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """Brief: Overlay environment variables onto a raw config mapping.

    Inputs:
      - cfg: Raw configuration mapping (mutated in-place).
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - dict: The same mapping.

    Notes:
      - DAPRLENS_DISCOVERY sets discovery.strategy.
      - DAPRLENS_LOG_LEVEL sets logging.level.
      - Empty values are ignored.
    """

    env = os.environ if environ is None else environ

    strategy = str(env.get(ENV_STRATEGY, "") or "").strip()
    if strategy:
        discovery = cfg.setdefault("discovery", {})
        if not isinstance(discovery, dict):
            raise ConfigError("config.discovery must be a mapping when present")
        discovery["strategy"] = strategy

    level = str(env.get(ENV_LOG_LEVEL, "") or "").strip()
    if level:
        log_cfg = cfg.setdefault("logging", {})
        if not isinstance(log_cfg, dict):
            raise ConfigError("config.logging must be a mapping when present")
        log_cfg["level"] = level

    return cfg


def build_config(cfg: Dict[str, Any]) -> AppConfig:
    """Validate a raw mapping into an AppConfig, raising ConfigError on failure."""

    try:
        return AppConfig(**cfg)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(
    config_path: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """Brief: Read, override and validate the daprlens configuration.

    Inputs:
      - config_path: Optional path to a YAML file. When None, defaults apply.
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - AppConfig.

    Raises:
      - ConfigError: unreadable file, invalid YAML, or validation failure.

    Example:
      >>> load_config(environ={"DAPRLENS_DISCOVERY": "mdns"}).discovery.strategy
      'mdns'
    """

    cfg: Dict[str, Any] = _read_yaml(config_path) if config_path else {}
    apply_env_overrides(cfg, environ)
    return build_config(cfg)
