"""Settings file I/O for termiflow.

Reads a general-purpose JSON settings file at XDG_CONFIG_HOME/termiflow/settings.json.
Tracker and chat credentials may live here as an alternative to environment
variables; config.py decides precedence.

This module is a STABLE BOUNDARY.
Import as: import termiflow.settings
"""

import json
import os
from pathlib import Path


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / termiflow / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "termiflow" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}

