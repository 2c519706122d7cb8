"""Writes the commented default ``config.yaml`` used by ``rolodex init-config``."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

HEADER = """\
# rolodex configuration
#
# Every option is commented out and shows its default. Uncomment a line to
# change it. Command line options take precedence over this file.
"""

# (section title, [(key, example value, help lines)])
SECTIONS: list[tuple[str, list[tuple[str, str, list[str]]]]] = [
    (
        "General",
        [
            ("verbose", "true", ["Debug logging with source locations"]),
            (
                "data_dir",
                "~/contacts",
                ["Directory holding contacts.json", "Default: $ROLODEX_DATA_DIR or ."],
            ),
            (
                "store_type",
                "file",
                ["file: contacts.json in data_dir", "mem: nothing is written"],
            ),
        ],
    ),
    (
        "Logging",
        [
            (
                "log_dir",
                "~/.rolodex/logs",
                ["Daily rolodex_YYYYMMDD.log files; unset means no file logging"],
            ),
            ("log_retention_count", "10", ["Log files to keep, 0 keeps all"]),
        ],
    ),
    (
        "Merge",
        [
            (
                "merge_policy",
                "keep",
                [
                    "Used by `rolodex merge` without --policy",
                    "keep: existing contact wins",
                    "overwrite: incoming contact replaces the match",
                    "duplicate: incoming phones are added to the match",
                ],
            ),
        ],
    ),
    (
        "Search",
        [
            ("fuzzy_max_edits", "2", ["Edit distance bound for --fuzzy"]),
            ("fuzzy_workers", "4", ["Threads used by search --concurrent"]),
        ],
    ),
    (
        "Validation",
        [("min_phone_length", "11", ["Fewest digits accepted in a phone number"])],
    ),
    (
        "Remote",
        [("remote_timeout", "30", ["Seconds before import/export-remote give up"])],
    ),
    (
        "Server",
        [
            ("server_host", "127.0.0.1", ["Bind address for `rolodex serve`"]),
            ("server_port", "3000", []),
        ],
    ),
]


def generate_default_config() -> str:
    """
    Render the default configuration file.

    The result parses as an empty YAML document; every key appears as a
    commented ``# key: value`` line.
    """
    lines = [HEADER]
    for title, options in SECTIONS:
        lines.append(f"# {title}")
        lines.append(f"# {'-' * len(title)}")
        for key, example, help_lines in options:
            lines.extend(f"# {text}" for text in help_lines)
            lines.append(f"# {key}: {example}")
            lines.append("")
        lines.append("")
    return "\n".join(lines).rstrip("\n") + "\n"


def save_config_file(
    config_path: Path, overwrite: bool = False
) -> tuple[bool, str | None]:
    """
    Write the default configuration to ``config_path``.

    The directory is created owner-only (0700) and the file is chmod 0600.

    Returns:
        (True, None) on success, (False, message) otherwise
    """
    path = Path(config_path).expanduser().resolve()
    if path.exists() and not overwrite:
        return False, f"{path} already exists. Use --force to replace it."

    try:
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        path.write_text(generate_default_config(), encoding="utf-8")
        path.chmod(0o600)
    except OSError as e:
        message = f"Could not write {path}: {e}"
        logger.error(message)
        return False, message

    logger.info(f"Wrote default configuration to {path}")
    return True, None
