"""
Flask CLI commands for working with the plant collection from a shell.

Usage:
    flask export-plants                          # Print the collection as JSON
    flask export-plants --output plants.json     # Write it to a file
    flask import-plants plants.json              # Merge plants from an export
    flask due-plants                             # List plants that need water today
    flask due-plants --today 2024-01-08          # ...or on another day
"""

from __future__ import annotations

from datetime import date

import click
from flask.cli import with_appcontext


@click.command("export-plants")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), default=None,
              help="Write the export to this file instead of stdout.")
@with_appcontext
def export_plants_command(output: str | None) -> None:
    """Export all plants as a pretty-printed JSON array."""
    from plantpal.services.storage import get_store

    store = get_store()
    data = store.export_plants()

    if not output:
        click.echo(data)
        return

    with open(output, "w", encoding="utf-8") as f:
        f.write(data)
    click.echo(f"Exported {len(store)} plant(s) to {output}")


@click.command("import-plants")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@with_appcontext
def import_plants_command(path: str) -> None:
    """Merge plants from a JSON export file (at most 500 per import)."""
    from plantpal.services.storage import get_store
    from plantpal.utils.errors import PlantPalError

    with open(path, "rb") as f:
        raw = f.read()

    try:
        count = get_store().import_plants(raw)
    except PlantPalError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)

    click.echo(f"Imported {count} plants (merged).")


@click.command("due-plants")
@click.option("--today", "today", default=None,
              help="Day to check (YYYY-MM-DD). Defaults to today.")
@with_appcontext
def due_plants_command(today: str | None) -> None:
    """List plants that need watering, most overdue first."""
    from plantpal.services.projector import due_count, project
    from plantpal.services.storage import get_store

    try:
        day = date.fromisoformat(today) if today else date.today()
    except ValueError:
        raise click.BadParameter("Use the YYYY-MM-DD format.", param_hint="--today")

    plants = get_store().plants
    view = project(plants, mode="nextWatering", today=day)
    due = [card for card in view.cards if card["needsWater"]]

    click.echo(f"{due_count(plants, day)} of {len(plants)} plant(s) need watering on {day.isoformat()}.")
    for card in due:
        overdue = -card["daysLeft"]
        suffix = f" (overdue {overdue} day{'' if overdue == 1 else 's'})" if overdue > 0 else ""
        click.echo(f"  - {card['name']} [{card['type']}] every {card['wateringFrequency']} days{suffix}")
