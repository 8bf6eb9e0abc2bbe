"""Settings loader - built-in defaults merged with an optional YAML file."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..exceptions import ConfigError
from .logger import get_logger


logger = get_logger(__name__)

HEADER_CHOICES = ("once", "never", "every")
SOURCE_CHOICES = ("procfs", "psutil")

DEFAULT_SETTINGS: Dict[str, Any] = {
    "interval_secs": None,
    "header": "once",
    "source": "procfs",
    "proc_root": "/proc",
    "log_level": "WARNING",
    "id": "",
    "usage": False,
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed content, or an empty dict for an empty file.

    Raises:
        ConfigError: The file can't be read, isn't YAML, or isn't a mapping.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot load settings from {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"settings file {path} must contain a mapping")
    return data


def validate(settings: Dict[str, Any]) -> Dict[str, Any]:
    interval = settings.get("interval_secs")
    if interval is not None:
        if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
            raise ConfigError(f"interval_secs must be a positive integer, got {interval!r}")

    if settings.get("header") not in HEADER_CHOICES:
        raise ConfigError(f"header must be one of {', '.join(HEADER_CHOICES)}")
    if settings.get("source") not in SOURCE_CHOICES:
        raise ConfigError(f"source must be one of {', '.join(SOURCE_CHOICES)}")
    if not isinstance(settings.get("usage"), bool):
        raise ConfigError("usage must be true or false")

    settings["id"] = "" if settings.get("id") is None else str(settings["id"])
    settings["proc_root"] = str(settings.get("proc_root") or "/proc")
    return settings


def load_settings(path: Optional[Path] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build effective settings.

    Precedence, lowest first: defaults, settings file, overrides. Override
    values of None are treated as "not given".
    """
    settings = dict(DEFAULT_SETTINGS)

    if path is not None:
        for key, value in load_yaml(path).items():
            if key not in DEFAULT_SETTINGS:
                logger.warning("Ignoring unknown setting %r in %s", key, path)
                continue
            settings[key] = value

    for key, value in (overrides or {}).items():
        if value is not None:
            settings[key] = value

    return validate(settings)
