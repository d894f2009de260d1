"""
YAML → config loader.

Loads CLI defaults from lift_signals.yaml (bundled with the package) and
optionally merges user overrides from ~/.lift-signals/lift_signals.yaml.

Usage:
    from lift_signals.core.engine.config_loader import load_engine_config
    cfg = load_engine_config()
    cycle_length = cfg.get("profile", {}).get("cycle_length_days", 28)

The bundled file must parse.  A user override file with parse errors is
reported with a warning and ignored.
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "lift_signals.yaml"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; a non-mapping document yields {}."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path:
    """Return the path to the bundled lift_signals.yaml."""
    # config_loader.py lives at lift_signals/core/engine/; three levels up
    # is the lift_signals package root.
    return Path(__file__).parent.parent.parent / CONFIG_FILENAME


def get_user_yaml_path() -> Path | None:
    """Return ~/.lift-signals/lift_signals.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".lift-signals" / CONFIG_FILENAME
    return p if p.exists() else None


def load_engine_config(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled lift_signals/lift_signals.yaml
    2. User override (user_path, or ~/.lift-signals/lift_signals.yaml)

    Args:
        user_path: Explicit override file; None looks in the home directory

    Returns:
        Merged dict of config sections
    """
    config = _load_yaml_file(get_bundled_yaml_path())

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        try:
            user_cfg = _load_yaml_file(user)
        except (yaml.YAMLError, OSError) as exc:
            warnings.warn(
                f"lift-signals: ignoring user config {user} ({exc})",
                stacklevel=2,
            )
            user_cfg = {}
        if user_cfg:
            config = _deep_merge(config, user_cfg)

    return config


def get_profile_defaults(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return the 'profile' section (sex, cycle_length_days) with fallbacks applied."""
    cfg = config if config is not None else load_engine_config()
    profile = cfg.get("profile", {}) or {}
    return {
        "sex": profile.get("sex", "male"),
        "cycle_length_days": int(profile.get("cycle_length_days", 28)),
    }


def get_display_defaults(config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return the 'display' section (rounding_increment_kg) with fallbacks applied."""
    cfg = config if config is not None else load_engine_config()
    display = cfg.get("display", {}) or {}
    return {
        "rounding_increment_kg": float(display.get("rounding_increment_kg", 2.5)),
    }
