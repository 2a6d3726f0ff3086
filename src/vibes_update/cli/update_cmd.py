"""vibes update command."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.prompt import Confirm

from vibes_update.apply.processor import UpdateProcessor
from vibes_update.core.config import load_config, resolve_plugin_root
from vibes_update.core.errors import UpdaterError
from vibes_update.core.log import setup_logging
from vibes_update.core.output import (
    batch_to_dict,
    console,
    file_report_to_dict,
    print_apply_report,
    print_batch_summary,
    print_error,
    print_plan,
    print_rollback,
)


@click.command()
@click.argument("target", type=click.Path(path_type=Path))
@click.option(
    "--apply", "apply_selection",
    is_flag=False, flag_value="all", default=None, metavar="[=all|1,3]",
    help="Apply updates: all of them, or a comma-separated list of plan numbers",
)
@click.option("--rollback", is_flag=True, help="Restore TARGET from its most recent backup")
@click.option("--verbose", "-v", is_flag=True, help="Show diffs and debug logging")
@click.option("--force", "-f", is_flag=True, help="Skip the confirmation prompt")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--plugin-root", type=click.Path(path_type=Path), default=None,
    help="Plugin directory holding the import map cache",
)
def update(
    target: Path,
    apply_selection: str | None,
    rollback: bool,
    verbose: bool,
    force: bool,
    as_json: bool,
    plugin_root: Path | None,
):
    """Check a Vibes app (or a directory of them) for updates.

    Without --apply this is a dry run that prints the numbered update plan.
    Put --apply after TARGET: `vibes update app.html --apply=1,3`.
    """
    setup_logging(verbose=verbose, quiet=as_json)

    config = load_config(Path.cwd())
    processor = UpdateProcessor(resolve_plugin_root(config, plugin_root), config)

    if rollback:
        report = processor.rollback(target)
        if as_json:
            click.echo(json.dumps(file_report_to_dict(report), indent=2))
        else:
            print_rollback(report)
        if not report.success:
            sys.exit(1)
        return

    if not target.exists():
        _fail(f"Path not found: {target}", as_json)

    if target.is_dir():
        _update_directory(processor, target, apply_selection, verbose, force, as_json)
    else:
        _update_file(processor, target, apply_selection, verbose, force, as_json)


def _update_file(
    processor: UpdateProcessor,
    target: Path,
    apply_selection: str | None,
    verbose: bool,
    force: bool,
    as_json: bool,
):
    """Dry run, then apply when asked and confirmed."""
    report = processor.process_file(target)
    if not report.success:
        _fail(report.error, as_json)

    if apply_selection is None:
        if as_json:
            click.echo(json.dumps(file_report_to_dict(report), indent=2))
        else:
            print_plan(report.plan)
        return

    if not as_json:
        print_plan(report.plan)
        if not report.plan.has_updates:
            return
        if not force and not Confirm.ask(f"  Apply updates to {target.name}?", default=False):
            console.print("  [dim]Skipped.[/dim]")
            return

    report = processor.process_file(target, apply_selection)
    if not report.success:
        _fail(report.error, as_json)

    if as_json:
        click.echo(json.dumps(file_report_to_dict(report, include_diffs=verbose), indent=2))
    else:
        print_apply_report(report, verbose=verbose)


def _update_directory(
    processor: UpdateProcessor,
    target: Path,
    apply_selection: str | None,
    verbose: bool,
    force: bool,
    as_json: bool,
):
    try:
        batch = processor.process_batch(target)
    except UpdaterError as e:
        _fail(str(e), as_json)

    if apply_selection is not None and batch.needing_updates:
        if not as_json:
            print_batch_summary(batch)
            count = len(batch.needing_updates)
            if not force and not Confirm.ask(f"  Apply updates to {count} file(s)?", default=False):
                console.print("  [dim]Skipped.[/dim]")
                return
        batch = processor.process_batch(target, apply_selection)
        if not as_json:
            console.print(f"\n  [bold]Applying updates to {len(batch.needing_updates)} file(s)...[/bold]")
            for report in batch.needing_updates:
                print_apply_report(report, verbose=verbose)

    if as_json:
        click.echo(json.dumps(batch_to_dict(batch, include_diffs=verbose), indent=2))
    else:
        print_batch_summary(batch)


def _fail(message: str | None, as_json: bool):
    if as_json:
        click.echo(json.dumps({"success": False, "error": message}, indent=2))
    else:
        print_error(message or "Unknown error")
    sys.exit(1)
