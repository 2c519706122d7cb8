"""CLI package for rolodex."""

from rolodex.cli.formatters import (
    format_contact_line,
    show_contact_detail,
    show_contacts,
    show_merge_summary,
    show_search_results,
)
from rolodex.cli.main import (
    MERGE_POLICY_CHOICES,
    cli,
    get_config_dir,
    get_config_file,
    parse_tags,
)
from rolodex.utils import DEFAULT_CONFIG_DIR

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "MERGE_POLICY_CHOICES",
    "cli",
    "format_contact_line",
    "get_config_dir",
    "get_config_file",
    "parse_tags",
    "show_contact_detail",
    "show_contacts",
    "show_merge_summary",
    "show_search_results",
]
