"""vibes backups command."""

from __future__ import annotations

import json
from pathlib import Path

import click

from vibes_update.apply.backup import BackupManager
from vibes_update.core.output import backups_to_dict, print_backups


@click.command()
@click.argument("target", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def backups(target: Path, as_json: bool):
    """List the backups of a Vibes app, newest first.

    The first entry is what `vibes update --rollback TARGET` restores.
    """
    artifact = target.resolve()
    entries = BackupManager().list_backups(artifact)

    if as_json:
        click.echo(json.dumps(backups_to_dict(artifact, entries), indent=2))
        return

    print_backups(artifact, entries)
