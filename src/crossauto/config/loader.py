from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from .models import Settings

# Default path to the configuration file.
# Can be overridden with the "CROSSAUTO_CONFIG" environment variable.
DEFAULT_CONFIG: str = os.getenv("CROSSAUTO_CONFIG", "configs/web.yaml")

# Keys of the legacy key/value configuration and the settings fields they feed
_PROPERTIES_KEYS: dict[str, str] = {
    "platformName": "platform",
    "browser": "browser",
}


def read_properties(path: str | Path) -> dict[str, str]:
    """
    Parse a Java-style .properties file into a dict.

    Supports "key=value" and "key: value" lines; "#" and "!" start comments.
    """
    props: dict[str, str] = {}
    with open(path, encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line[0] in "#!":
                continue
            seps = [i for i in (line.find("="), line.find(":")) if i > 0]
            if not seps:
                props[line] = ""
                continue
            idx = min(seps)
            props[line[:idx].strip()] = line[idx + 1 :].strip()
    return props


def _from_properties(path: str) -> dict[str, Any]:
    props = read_properties(path)
    return {field: props[key] for key, field in _PROPERTIES_KEYS.items() if props.get(key)}


def load_settings(path: str | None = None) -> Settings:
    """
    Load project settings from a YAML (or .properties) configuration file.

    Args:
        path (str | None): Optional path to the configuration file.
                           If not provided, DEFAULT_CONFIG is used.

    Returns:
        Settings: A Settings object initialized with the loaded configuration.
                  Defaults when the file does not exist or is empty.
    """
    file_path: str = path or DEFAULT_CONFIG
    data: dict[str, Any] = {}

    if os.path.exists(file_path):
        if file_path.endswith(".properties"):
            data = _from_properties(file_path)
        else:
            with open(file_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
                # Ensure the loaded content is a dictionary.
                if isinstance(loaded, dict):
                    data = loaded

    return Settings(**data)
