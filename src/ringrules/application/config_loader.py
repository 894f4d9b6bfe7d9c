"""
Engine configuration loading.

Resolution order:
- Built-in defaults from ``EngineConfigSchema``
- YAML file at ``path`` (or ``$RINGRULES_CONFIG`` when no path is given)
- ``$RINGRULES_WORK_DIR`` overriding ``work_dir``
- ``$LOGLEVEL`` overriding ``logging.level``
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import structlog
import yaml

from ringrules.core.domain.config_schema import EngineConfigSchema, validate_engine_config
from ringrules.core.domain.errors import ConfigError

logger = structlog.get_logger(__name__)

CONFIG_ENV = "RINGRULES_CONFIG"
WORK_DIR_ENV = "RINGRULES_WORK_DIR"
LOGLEVEL_ENV = "LOGLEVEL"


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}", details={"source": str(path)})
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(
            f"Config file is not valid YAML: {path}",
            details={"source": str(path), "error": str(exc)},
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file must contain a mapping: {path}", details={"source": str(path)}
        )
    return data


def load_config(
    path: str | Path | None = None, env: dict[str, str] | None = None
) -> EngineConfigSchema:
    """Load and validate the engine configuration.

    Args:
        path: Explicit YAML file. Falls back to ``$RINGRULES_CONFIG``.
        env: Environment mapping, ``os.environ`` by default.

    Raises:
        ConfigError: Missing file, invalid YAML or schema violations.
    """
    env = os.environ if env is None else env
    source: Path | None = None
    data: dict[str, Any] = {}

    raw_path = path or env.get(CONFIG_ENV)
    if raw_path:
        source = Path(raw_path)
        data = _read_yaml(source)

    if env.get(WORK_DIR_ENV):
        data["work_dir"] = env[WORK_DIR_ENV]
    if env.get(LOGLEVEL_ENV):
        data.setdefault("logging", {})
        if isinstance(data["logging"], dict):
            data["logging"]["level"] = env[LOGLEVEL_ENV]

    config = validate_engine_config(data, source)
    logger.debug(
        "config_loader.loaded",
        source=str(source) if source else None,
        work_dir=config.work_dir,
        scheduler_enabled=config.scheduler.enabled,
    )
    return config
