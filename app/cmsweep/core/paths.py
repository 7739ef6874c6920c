"""Locations of the cmsweep configuration files.

cmsweep keeps its settings under ``$XDG_CONFIG_HOME/cmsweep`` and falls
back to ``~/.config/cmsweep`` when the variable is unset or empty. It
writes no state or cache files.
"""

import os
from pathlib import Path

APP_NAME = "cmsweep"
CONFIG_FILE = "config.toml"
THEME_FILE = "theme.toml"


def get_config_dir() -> Path:
    """Return the directory holding the cmsweep configuration files."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / APP_NAME


def get_config_path() -> Path:
    """Return the path of ``config.toml``."""
    return get_config_dir() / CONFIG_FILE


def get_theme_path() -> Path:
    """Return the path of the optional ``theme.toml``."""
    return get_config_dir() / THEME_FILE
