"""
rolodex.config - Configuration management module

Contains configuration loading, validation, and default file generation.
"""

from rolodex.config.generator import generate_default_config, save_config_file
from rolodex.config.loader import DEFAULT_CONFIG_FILE, ConfigError, ConfigLoader

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "DEFAULT_CONFIG_FILE",
    "generate_default_config",
    "save_config_file",
]
