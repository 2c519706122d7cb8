"""CLI output formatting functions.

This module contains functions for displaying contacts, search results
and merge summaries on the command line.
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from rolodex.core.contact import Contact
    from rolodex.core.merge import MergeSummary


def format_contact_line(contact: "Contact") -> str:
    """One-line rendering: name | phones | email [tags]."""
    line = f"{contact.name} | {', '.join(contact.phone)} | {contact.email}"
    if contact.tags:
        line += f" [{', '.join(contact.tags)}]"
    return line


def show_contacts(contacts: Sequence["Contact"]) -> None:
    """
    Print contacts one per line.

    Args:
        contacts: Records to print, in display order
    """
    if not contacts:
        click.echo("No contacts found.")
        return

    for contact in contacts:
        click.echo(format_contact_line(contact))
    click.echo(f"\n{len(contacts)} contact(s)")


def show_contact_detail(contact: "Contact") -> None:
    """Print every field of a single contact."""
    click.echo(f"  Name:    {contact.name}")
    click.echo(f"  Phone:   {', '.join(contact.phone)}")
    click.echo(f"  Email:   {contact.email}")
    if contact.tags:
        click.echo(f"  Tags:    {', '.join(contact.tags)}")
    click.echo(f"  Created: {contact.created_at.isoformat()}")
    click.echo(f"  Updated: {contact.updated_at.isoformat()}")


def show_search_results(
    positions: Iterable[int], contacts: Sequence["Contact"]
) -> None:
    """
    Print search matches with their positions.

    Args:
        positions: Sorted positions returned by the search
        contacts: The collection the positions refer to
    """
    positions = list(positions)
    if not positions:
        click.echo("No contacts matched your search.")
        return

    click.echo(f"Found {len(positions)} result(s)")
    for position in positions:
        click.echo(f"  [{position}] {format_contact_line(contacts[position])}")


def show_merge_summary(summary: "MergeSummary") -> None:
    """Print the counts of a merge run."""
    click.echo(f"\n=== Merge Summary ({summary.policy.value}) ===")
    click.echo(f"  Added:       {summary.added}")
    click.echo(f"  Overwritten: {summary.overwritten}")
    click.echo(f"  Extended:    {summary.extended}")
    click.echo(f"  Skipped:     {summary.skipped}")
    if summary.dropped:
        click.echo(
            click.style(f"  Dropped:     {summary.dropped}", fg="yellow")
            + " (no existing contact shares their name and phone)"
        )

    if summary.changed:
        click.echo(click.style("\nMerge completed.", fg="green"))
    else:
        click.echo("\nNothing to merge.")
