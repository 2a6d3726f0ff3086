"""Click CLI entry point for the Vibes updater."""

from __future__ import annotations

import click

from vibes_update._version import __version__


@click.group()
@click.version_option(version=__version__, prog_name="vibes")
def cli():
    """Vibes - keep single-file Vibes apps current.

    Analyze an app, see how far it has drifted from the plugin's import
    map, and apply the updates you pick. Every write is backed up.
    """
    pass


# Import and register subcommands
from vibes_update.cli.update_cmd import update  # noqa: E402
from vibes_update.cli.backups_cmd import backups  # noqa: E402

cli.add_command(update)
cli.add_command(backups)


if __name__ == "__main__":
    cli()
