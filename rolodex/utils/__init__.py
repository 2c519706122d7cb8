"""
rolodex.utils - Utility module

Common utilities including logging configuration, path resolution and
input validation.
"""

from rolodex.utils.paths import DEFAULT_CONFIG_DIR, resolve_config_dir, resolve_data_dir
from rolodex.utils.validation import (
    ContactValidator,
    valid_email,
    valid_name,
    valid_phone,
)

__all__ = [
    "ContactValidator",
    "DEFAULT_CONFIG_DIR",
    "resolve_config_dir",
    "resolve_data_dir",
    "valid_email",
    "valid_name",
    "valid_phone",
]
