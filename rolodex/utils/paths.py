"""
Where rolodex keeps its files.

Two directories matter: the config directory (config.yaml, logs) and the
data directory (contacts.json and its legacy siblings). Each is picked from
an explicit value, then an environment variable, then a default.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_CONFIG_DIR = Path.home() / ".rolodex"

CONFIG_DIR_ENV_VAR = "ROLODEX_CONFIG_DIR"
DATA_DIR_ENV_VAR = "ROLODEX_DATA_DIR"


def _pick_dir(explicit: Path | str | None, env_var: str, default: Path) -> Path:
    chosen = explicit if explicit is not None else os.environ.get(env_var) or default
    return Path(chosen).expanduser().resolve()


def resolve_config_dir(config_dir: Path | str | None = None) -> Path:
    """
    Config directory: ``config_dir``, else $ROLODEX_CONFIG_DIR, else ~/.rolodex.

    The result is absolute with ``~`` expanded.
    """
    return _pick_dir(config_dir, CONFIG_DIR_ENV_VAR, DEFAULT_CONFIG_DIR)


def resolve_data_dir(data_dir: Path | str | None = None) -> Path:
    """Data directory: ``data_dir``, else $ROLODEX_DATA_DIR, else the cwd."""
    return _pick_dir(data_dir, DATA_DIR_ENV_VAR, Path.cwd())
