"""
YAML configuration for rolodex.

The file is optional: a missing or empty file yields an empty dict. Known
keys are type- and range-checked by ConfigLoader.validate(); anything else
in the file is ignored so newer files still load.
"""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, NamedTuple, Optional

import yaml

from rolodex.core.errors import ConfigError
from rolodex.core.merge import VALID_MERGE_POLICIES
from rolodex.storage import VALID_STORE_TYPES
from rolodex.utils.paths import resolve_config_dir

DEFAULT_CONFIG_FILE = "config.yaml"

logger = logging.getLogger(__name__)


class Option(NamedTuple):
    """Expected type of a config key plus an optional value check."""

    types: tuple[type, ...]
    check: Optional[Callable[[Any], bool]] = None
    requirement: str = ""


def _one_of(choices: Sequence[str]) -> Option:
    return Option(
        (str,), lambda v: v in choices, f"must be one of: {', '.join(choices)}"
    )


def _at_least(minimum: int) -> Option:
    return Option((int,), lambda v: v >= minimum, f"must be >= {minimum}")


VALID_KEYS: dict[str, Option] = {
    "verbose": Option((bool,)),
    "data_dir": Option((str,)),
    "store_type": _one_of(VALID_STORE_TYPES),
    "log_dir": Option((str,)),
    "log_retention_count": _at_least(0),
    "merge_policy": _one_of(VALID_MERGE_POLICIES),
    "fuzzy_max_edits": _at_least(0),
    "fuzzy_workers": _at_least(1),
    "min_phone_length": _at_least(1),
    "remote_timeout": Option((int, float), lambda v: v > 0, "must be > 0"),
    "server_host": Option((str,)),
    "server_port": _at_least(1),
}


def _type_matches(value: Any, types: tuple[type, ...]) -> bool:
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool):
        return bool in types
    return isinstance(value, types)


class ConfigLoader:
    """
    Reads and validates ``config.yaml``.

    Usage:
        loader = ConfigLoader()
        config = loader.load_and_validate()
    """

    def __init__(
        self,
        config_dir: Path | str | None = None,
        config_file: str = DEFAULT_CONFIG_FILE,
    ):
        self.config_dir = resolve_config_dir(config_dir)
        self.config_file = config_file

    @property
    def config_path(self) -> Path:
        return self.config_dir / self.config_file

    def load(self) -> dict[str, Any]:
        """Load the file in the config directory; {} when it is absent."""
        return self.load_from_file(self.config_path)

    def load_from_file(self, path: Path | str) -> dict[str, Any]:
        """
        Parse a YAML file into a dict.

        Raises:
            ConfigError: unreadable file, invalid YAML or a non-mapping document
        """
        path = Path(path)
        if not path.exists():
            logger.debug(f"No configuration file at {path}")
            return {}

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML configuration file: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration file: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                "Configuration file must contain a YAML dictionary, "
                f"got {type(data).__name__}"
            )

        logger.debug(f"Loaded {len(data)} option(s) from {path}")
        return data

    def validate(self, config: dict[str, Any]) -> None:
        """
        Check each recognized key against VALID_KEYS.

        Raises:
            ConfigError: on the first key with a wrong type or value
        """
        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration must be a dictionary, got {type(config).__name__}"
            )

        for key, value in config.items():
            option = VALID_KEYS.get(key)
            if option is None:
                continue
            if not _type_matches(value, option.types):
                expected = " or ".join(t.__name__ for t in option.types)
                raise ConfigError(
                    f"Invalid type for '{key}': expected {expected}, "
                    f"got {type(value).__name__}"
                )
            if option.check is not None and not option.check(value):
                raise ConfigError(f"Invalid {key} {value!r}: {option.requirement}")

    def load_and_validate(self) -> dict[str, Any]:
        config = self.load()
        self.validate(config)
        return config


__all__ = ["ConfigError", "ConfigLoader", "DEFAULT_CONFIG_FILE", "VALID_KEYS"]
