"""
config_loader.py — Period 00: Core
------------------------------------
Loads and validates the dashboard period configuration from
period-00-core/config/period_config.yaml.

Raises clear, descriptive errors if required keys are missing,
so misconfiguration is caught at startup rather than on first click.
"""

from pathlib import Path
from typing import Any

import yaml


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_PATH = Path(__file__).parent / "config" / "period_config.yaml"
PROJECT_ROOT = Path(__file__).resolve().parent.parent


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """
    Load and validate period_config.yaml.

    Args:
        path: Alternate config file; defaults to CONFIG_PATH.

    Returns:
        dict: Fully validated configuration dictionary.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError:        If the file is not a mapping or required keys are absent.
    """
    config_path = Path(path) if path is not None else CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Period config not found at: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if not isinstance(config, dict):
        raise ValueError(f"{config_path.name} must be a YAML mapping (key: value pairs).")

    _validate(config, config_path)
    return config


def resolve_path(config_value: str | Path) -> Path:
    """Resolve a config path relative to the project root."""
    p = Path(config_value)
    return p if p.is_absolute() else PROJECT_ROOT / p


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

# Keys that must be present (dot-notation for nested paths)
_REQUIRED_KEYS = [
    "storage.key",
    "storage.path",
    "url_params.week",
    "url_params.month",
    "url_params.type",
    "refresh.invalidate_tags",
    "report_schedule.publish_weekday",
    "report_schedule.cutoff_hour",
    "dashboard.week_options",
    "log_dir",
]


def _validate(config: dict, config_path: Path) -> None:
    """Validate that all required keys exist in the config."""
    missing = [key_path for key_path in _REQUIRED_KEYS if not _has_key(config, key_path)]

    if missing:
        raise ValueError(
            "Period config is missing required keys:\n  - "
            + "\n  - ".join(missing)
            + f"\n\nCheck: {config_path}"
        )


def _has_key(config: dict, key_path: str) -> bool:
    """Traverse a dot-separated key path in a nested dict."""
    node = config
    for part in key_path.split("."):
        if not isinstance(node, dict) or part not in node:
            return False
        node = node[part]
    return True
