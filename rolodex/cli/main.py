"""
Command-line interface for rolodex.

Provides CLI commands for managing a local address book: adding, listing,
updating and deleting contacts, indexed and fuzzy search, merging other
address books, CSV and remote transfer, and serving the book over HTTP.

Usage:
    # Show help
    rolodex --help

    # Manage contacts
    rolodex add --name Alice --phone 08123456789 --email alice@work.com --tags work
    rolodex list --sort name --domain work.com
    rolodex delete --name Alice

    # Search
    rolodex search --fuzzy alise --concurrent

    # Reconcile with another address book
    rolodex merge other.json --policy overwrite
"""

import sys
from pathlib import Path
from typing import Any

import click

from rolodex import __version__
from rolodex.cli.formatters import (
    show_contact_detail,
    show_contacts,
    show_merge_summary,
    show_search_results,
)
from rolodex.config.generator import save_config_file
from rolodex.config.loader import DEFAULT_CONFIG_FILE, ConfigError, ConfigLoader
from rolodex.core.collection import SORT_KEYS, Contacts
from rolodex.core.contact import Contact
from rolodex.core.errors import RolodexError
from rolodex.core.index import DEFAULT_MAX_EDITS, DEFAULT_WORKER_COUNT
from rolodex.core.merge import VALID_MERGE_POLICIES, MergePolicy
from rolodex.storage import ContactStore, export_csv, get_store, import_csv
from rolodex.utils import resolve_config_dir, resolve_data_dir
from rolodex.utils.logging import cleanup_old_logs, get_logger, setup_logging
from rolodex.utils.validation import DEFAULT_MIN_PHONE_LENGTH, ContactValidator

# Policy names accepted on the command line
MERGE_POLICY_CHOICES = tuple(VALID_MERGE_POLICIES)

DEFAULT_SERVER_HOST = "127.0.0.1"
DEFAULT_SERVER_PORT = 3000


def get_config_dir(config_dir: str | None) -> Path:
    """Get the configuration directory path."""
    return resolve_config_dir(config_dir)


def get_config_file(config_file: str | None, config_dir: Path) -> Path:
    """Get the configuration file path."""
    if config_file:
        return Path(config_file)
    return config_dir / DEFAULT_CONFIG_FILE


def parse_tags(value: str | None) -> list[str]:
    """Split a comma-separated tag option, dropping blanks."""
    if not value:
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def open_contacts(ctx: click.Context) -> tuple[ContactStore, Contacts]:
    """Load the configured store into a validated collection."""
    store = get_store(ctx.obj["data_dir"], ctx.obj["store_type"])
    contacts = Contacts(store.load(), validator=ctx.obj["validator"])
    return store, contacts


def fail(message: str) -> None:
    """Print an error in red and exit with status 1."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(1)


class RolodexGroup(click.Group):
    """Command group that logs unexpected failures before exiting."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            get_logger(__name__).exception(f"Unexpected error: {e}")
            fail(str(e))
            return None


@click.group(cls=RolodexGroup)
@click.version_option(version=__version__, prog_name="rolodex")
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output with detailed logging."
)
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True),
    envvar="ROLODEX_CONFIG_DIR",
    help="Configuration directory path (default: ~/.rolodex).",
)
@click.option(
    "--config-file",
    "-f",
    type=click.Path(exists=False, file_okay=True, dir_okay=False),
    envvar="ROLODEX_CONFIG_FILE",
    help="Configuration file path (default: ~/.rolodex/config.yaml).",
)
@click.option(
    "--data-dir",
    "-d",
    type=click.Path(exists=False, file_okay=False, dir_okay=True),
    envvar="ROLODEX_DATA_DIR",
    help="Directory holding contacts.json (default: current directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_dir: str | None,
    config_file: str | None,
    data_dir: str | None,
) -> None:
    """
    Rolodex: a local contact manager.

    Keeps an indexed address book in contacts.json with exact name and
    domain lookup, fuzzy search and merge policies for combining books.
    """
    ctx.ensure_object(dict)

    resolved_config_dir = get_config_dir(config_dir)
    resolved_config_file = get_config_file(config_file, resolved_config_dir)

    ctx.obj["config_dir"] = resolved_config_dir
    ctx.obj["config_file"] = resolved_config_file

    config: dict[str, Any] = {}
    try:
        loader = ConfigLoader(config_dir=resolved_config_dir)
        config = loader.load_from_file(resolved_config_file)
        if config:
            loader.validate(config)
    except ConfigError as e:
        click.echo(
            click.style(f"Warning: Configuration error: {e}", fg="yellow"), err=True
        )
        config = {}

    ctx.obj["config"] = config

    effective_verbose = verbose or config.get("verbose", False)
    ctx.obj["verbose"] = effective_verbose

    ctx.obj["data_dir"] = resolve_data_dir(data_dir or config.get("data_dir"))
    ctx.obj["store_type"] = config.get("store_type")
    ctx.obj["validator"] = ContactValidator(
        config.get("min_phone_length", DEFAULT_MIN_PHONE_LENGTH)
    )

    log_dir = None
    if config.get("log_dir"):
        log_dir = Path(config["log_dir"]).expanduser()

    setup_logging(
        verbose=effective_verbose,
        log_dir=log_dir,
        enable_file_logging=log_dir is not None,
    )

    if log_dir is not None:
        log_retention = config.get("log_retention_count", 10)
        if log_retention > 0:
            cleanup_old_logs(log_dir=log_dir, keep_count=log_retention)


# =============================================================================
# Contact Commands
# =============================================================================


@cli.command("add")
@click.option("--name", required=True, help="Contact name (letters and spaces).")
@click.option("--phone", required=True, help="Phone number (digits, optional +).")
@click.option("--email", required=True, help="Email address.")
@click.option("--tags", default="", help="Comma-separated tags, e.g. work,friends.")
@click.pass_context
def add_command(
    ctx: click.Context, name: str, phone: str, email: str, tags: str
) -> None:
    """
    Add a new contact.

    Fails if a contact with the same name already has this phone number.

    Examples:

        rolodex add --name Alice --phone 08123456789 --email alice@work.com

        rolodex add --name Bob --phone 08987654321 --email bob@home.com \\
            --tags friends,gym
    """
    logger = get_logger(__name__)

    try:
        store, contacts = open_contacts(ctx)
        contact = Contact(name=name, phone=[phone], email=email, tags=parse_tags(tags))
        contacts.add(contact)
        store.save(contacts.to_list())
    except RolodexError as e:
        logger.error(f"Add failed: {e}")
        fail(str(e))
        return

    click.echo(click.style(f"Added contact: {name} ({email})", fg="green"))


@cli.command("list")
@click.option(
    "--sort",
    type=click.Choice(SORT_KEYS, case_sensitive=False),
    help="Sort by field.",
)
@click.option("--tag", help="Only contacts carrying this tag.")
@click.option("--domain", help="Only contacts whose email is in this domain.")
@click.pass_context
def list_command(
    ctx: click.Context, sort: str | None, tag: str | None, domain: str | None
) -> None:
    """
    List contacts, optionally filtered and sorted.

    Examples:

        rolodex list

        rolodex list --sort name --tag work

        rolodex list --domain work.com
    """
    logger = get_logger(__name__)

    try:
        _store, contacts = open_contacts(ctx)
        selected = contacts.filtered(tag=tag, domain=domain, sort=sort)
    except RolodexError as e:
        logger.error(f"List failed: {e}")
        fail(str(e))
        return

    show_contacts(selected)


@cli.command("delete")
@click.option("--name", required=True, help="Name of the contact to remove.")
@click.option("--phone", help="Phone number, required when the name is shared.")
@click.pass_context
def delete_command(ctx: click.Context, name: str, phone: str | None) -> None:
    """
    Delete a contact by name.

    When several contacts share the name, pass --phone to pick one.

    Examples:

        rolodex delete --name Alice

        rolodex delete --name Alice --phone 08123456789
    """
    logger = get_logger(__name__)

    try:
        store, contacts = open_contacts(ctx)
        removed = contacts.delete(name, phone)
        if removed is not None:
            store.save(contacts.to_list())
    except RolodexError as e:
        logger.error(f"Delete failed: {e}")
        fail(str(e))
        return

    if removed is None:
        target = f"name '{name}'" + (f" and phone '{phone}'" if phone else "")
        click.echo(click.style(f"No contact found with {target}", fg="yellow"))
        return

    click.echo(
        click.style(
            f"Removed contact: {removed.name} - {', '.join(removed.phone)}",
            fg="green",
        )
    )


@cli.command("update")
@click.option(
    "--name", required=True, help="Current contact name, exact and case-sensitive."
)
@click.option("--phone", required=True, help="One of the contact's phone numbers.")
@click.option("--tags", default="", help="Replacement comma-separated tags.")
@click.option("--new-name", help="New name.")
@click.option("--new-phone", help="Replacement for --phone.")
@click.option("--new-email", help="New email address.")
@click.pass_context
def update_command(
    ctx: click.Context,
    name: str,
    phone: str,
    tags: str,
    new_name: str | None,
    new_phone: str | None,
    new_email: str | None,
) -> None:
    """
    Update a contact identified by name and phone.

    Tags are always replaced by --tags; other fields change only when
    the matching --new-* option is given.

    Examples:

        rolodex update --name Alice --phone 08123456789 --new-email a@home.com

        rolodex update --name Alice --phone 08123456789 --tags work,vip
    """
    logger = get_logger(__name__)

    try:
        store, contacts = open_contacts(ctx)
        updated = contacts.update(
            name,
            phone,
            parse_tags(tags),
            new_name=new_name,
            new_phone=new_phone,
            new_email=new_email,
        )
        store.save(contacts.to_list())
    except RolodexError as e:
        logger.error(f"Update failed: {e}")
        fail(str(e))
        return

    click.echo(click.style(f"Updated contact: {updated.name}", fg="green"))
    show_contact_detail(updated)


@cli.command("search")
@click.option("--name", help="Exact name (case-insensitive).")
@click.option("--domain", help="Exact email domain (case-insensitive).")
@click.option("--fuzzy", help="Approximate match against names and emails.")
@click.option(
    "--max-edits",
    type=click.IntRange(min=0),
    help=f"Edit distance bound for --fuzzy (default: {DEFAULT_MAX_EDITS}).",
)
@click.option(
    "--concurrent",
    is_flag=True,
    help="Run the fuzzy search on a worker pool.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    help=f"Worker threads for --concurrent (default: {DEFAULT_WORKER_COUNT}).",
)
@click.pass_context
def search_command(
    ctx: click.Context,
    name: str | None,
    domain: str | None,
    fuzzy: str | None,
    max_edits: int | None,
    concurrent: bool,
    workers: int | None,
) -> None:
    """
    Search contacts by name, domain or fuzzy text.

    Results from all given criteria are combined.

    Examples:

        rolodex search --name alice

        rolodex search --domain work.com

        rolodex search --fuzzy alise --concurrent --workers 8
    """
    logger = get_logger(__name__)
    config = ctx.obj["config"]

    if not (name or domain or fuzzy):
        fail("Provide at least one of --name, --domain or --fuzzy")
        return

    if max_edits is None:
        max_edits = config.get("fuzzy_max_edits", DEFAULT_MAX_EDITS)
    worker_count = None
    if concurrent:
        worker_count = workers or config.get("fuzzy_workers", DEFAULT_WORKER_COUNT)

    try:
        _store, contacts = open_contacts(ctx)
        logger.debug(f"Index: {contacts.index!r}")
        positions = contacts.search(
            name=name,
            domain=domain,
            fuzzy=fuzzy,
            max_edits=max_edits,
            workers=worker_count,
        )
    except RolodexError as e:
        logger.error(f"Search failed: {e}")
        fail(str(e))
        return

    show_search_results(positions, contacts)


# =============================================================================
# Merge Command
# =============================================================================


@cli.command("merge")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option(
    "--policy",
    "-p",
    type=click.Choice(MERGE_POLICY_CHOICES, case_sensitive=False),
    help="How to treat contacts that already exist (default: keep).",
)
@click.pass_context
def merge_command(ctx: click.Context, path: str, policy: str | None) -> None:
    """
    Merge contacts from another JSON address book.

    Two contacts are the same person when their names are equal and they
    share a phone number.

    \b
    Policies:
      keep       existing contacts win; new ones are added
      overwrite  incoming contacts replace matching ones; new ones are added
      duplicate  incoming numbers are added to matching contacts only

    Examples:

        rolodex merge other.json

        rolodex merge other.json --policy duplicate
    """
    logger = get_logger(__name__)
    config = ctx.obj["config"]

    merge_policy = MergePolicy.from_str(policy or config.get("merge_policy", "keep"))

    try:
        store, contacts = open_contacts(ctx)
        summary = contacts.merge_from_file(path, merge_policy)
        if summary.changed:
            store.save(contacts.to_list())
    except RolodexError as e:
        logger.error(f"Merge failed: {e}")
        fail(str(e))
        return

    show_merge_summary(summary)


# =============================================================================
# Transfer Commands
# =============================================================================


@cli.command("export-csv")
@click.option(
    "--path", default="contacts.csv", show_default=True, help="CSV file to write."
)
@click.pass_context
def export_csv_command(ctx: click.Context, path: str) -> None:
    """Export all contacts to a CSV file."""
    logger = get_logger(__name__)

    try:
        _store, contacts = open_contacts(ctx)
        count = export_csv(path, contacts.to_list())
    except RolodexError as e:
        logger.error(f"CSV export failed: {e}")
        fail(str(e))
        return

    click.echo(click.style(f"Exported {count} contacts to {path}", fg="green"))


@cli.command("import-csv")
@click.option(
    "--path", default="contacts.csv", show_default=True, help="CSV file to read."
)
@click.pass_context
def import_csv_command(ctx: click.Context, path: str) -> None:
    """
    Import contacts from a CSV file.

    Rows are validated like `rolodex add`; invalid rows and rows matching an
    existing contact are skipped.
    """
    logger = get_logger(__name__)

    try:
        store, contacts = open_contacts(ctx)
        rows = import_csv(path)
        added = contacts.add_all(rows, source=path)
        store.save(contacts.to_list())
    except RolodexError as e:
        logger.error(f"CSV import failed: {e}")
        fail(str(e))
        return

    click.echo(
        click.style(
            f"Imported {added} contacts from {path} "
            f"({len(rows) - added} skipped)",
            fg="green",
        )
    )


@cli.command("import-remote")
@click.option("--url", required=True, help="Endpoint returning a JSON contact array.")
@click.pass_context
def import_remote_command(ctx: click.Context, url: str) -> None:
    """Fetch contacts from a remote endpoint and add them."""
    from rolodex.api.remote import DEFAULT_TIMEOUT, RemoteClient

    logger = get_logger(__name__)
    timeout = ctx.obj["config"].get("remote_timeout", DEFAULT_TIMEOUT)

    try:
        store, contacts = open_contacts(ctx)
        added = contacts.import_from_remote(url, RemoteClient(timeout=timeout))
        store.save(contacts.to_list())
    except RolodexError as e:
        logger.error(f"Remote import failed: {e}")
        fail(str(e))
        return

    click.echo(click.style(f"Imported {added} contacts from {url}", fg="green"))


@cli.command("export-remote")
@click.option("--url", required=True, help="Endpoint accepting a JSON contact array.")
@click.pass_context
def export_remote_command(ctx: click.Context, url: str) -> None:
    """Post all contacts to a remote endpoint."""
    from rolodex.api.remote import DEFAULT_TIMEOUT, RemoteClient

    logger = get_logger(__name__)
    timeout = ctx.obj["config"].get("remote_timeout", DEFAULT_TIMEOUT)

    try:
        _store, contacts = open_contacts(ctx)
        status = contacts.export_to_remote(url, RemoteClient(timeout=timeout))
    except RolodexError as e:
        logger.error(f"Remote export failed: {e}")
        fail(str(e))
        return

    click.echo(
        click.style(
            f"Exported {len(contacts)} contacts to {url} (HTTP {status})", fg="green"
        )
    )


# =============================================================================
# Server Command
# =============================================================================


@cli.command("serve")
@click.option("--host", help=f"Bind address (default: {DEFAULT_SERVER_HOST}).")
@click.option(
    "--port",
    type=click.IntRange(min=1, max=65535),
    help=f"Port (default: {DEFAULT_SERVER_PORT}).",
)
@click.pass_context
def serve_command(ctx: click.Context, host: str | None, port: int | None) -> None:
    """
    Serve the address book over HTTP.

    Examples:

        rolodex serve

        rolodex serve --host 0.0.0.0 --port 8080
    """
    import uvicorn

    from rolodex.server import AppState, create_app

    logger = get_logger(__name__)
    config = ctx.obj["config"]

    host = host or config.get("server_host", DEFAULT_SERVER_HOST)
    port = port or config.get("server_port", DEFAULT_SERVER_PORT)

    state = AppState(
        store=get_store(ctx.obj["data_dir"], ctx.obj["store_type"]),
        validator=ctx.obj["validator"],
    )
    logger.info(f"Serving {state.store!r} on http://{host}:{port}")
    click.echo(f"Serving contacts on http://{host}:{port}")

    uvicorn.run(create_app(state), host=host, port=port, log_level="info")


# =============================================================================
# Config Command
# =============================================================================


@cli.command("init-config")
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing configuration file if it exists.",
)
@click.pass_context
def init_config_command(ctx: click.Context, force: bool) -> None:
    """
    Generate a default configuration file.

    Creates a configuration file with all available options documented
    and commented out.

    Examples:

        # Create config file (fails if already exists)
        rolodex init-config

        # Overwrite existing config file
        rolodex init-config --force
    """
    logger = get_logger(__name__)
    config_file = ctx.obj["config_file"]

    click.echo(f"Creating configuration file: {config_file}")

    success, error = save_config_file(config_file, overwrite=force)

    if success:
        click.echo(click.style("Configuration file created successfully!", fg="green"))
        click.echo(f"\nLocation: {config_file}")
        logger.info(f"Created configuration file: {config_file}")
    else:
        logger.error(f"Failed to create configuration file: {error}")
        fail(str(error))
