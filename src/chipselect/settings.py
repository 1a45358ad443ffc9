"""JSON settings for the multi-select app.

Settings come from ``~/.chipselect/settings.json`` (or an explicit path) and
are merged with command-line overrides, which win. A file that cannot be read
or parsed is reported to the caller instead of aborting startup.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

CONFIG_DIR_NAME = ".chipselect"


def _settings_defaults() -> dict[str, Any]:
    """Default settings values."""
    return {
        "keybindings": {},
        "maxVisible": 5,
        "placeholder": "Select frameworks...",
        "catalog": None,
        "preset": None,
    }


def default_settings_path() -> str:
    env_dir = os.environ.get("CHIPSELECT_DIR")
    if env_dir:
        return os.path.join(os.path.expanduser(env_dir), "settings.json")
    return str(Path.home() / CONFIG_DIR_NAME / "settings.json")


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base settings.

    For nested dicts, merge recursively. For primitives and arrays,
    override value wins completely. ``None`` overrides are skipped.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    if not os.path.exists(path):
        return {}, None
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        return {}, exc
    if not isinstance(data, dict):
        return {}, ValueError(f"Settings file {path} must contain a JSON object")
    return data, None


def load_settings(
    path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from *path* merged over defaults, then apply *overrides*.

    Returns ``(settings, error)``; on error the defaults (plus overrides) are
    returned together with the exception.
    """
    file_settings, error = _load_from_file(path or default_settings_path())
    settings = deep_merge_settings(_settings_defaults(), file_settings)
    if overrides:
        settings = deep_merge_settings(settings, overrides)
    return settings, error
