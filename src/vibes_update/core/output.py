"""Rich terminal formatting and JSON shapes for updater output."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from vibes_update.core.models import (
    AnalysisResult,
    AvailableUpdate,
    BackupEntry,
    BatchReport,
    ComparisonSummary,
    FileReport,
    Priority,
    UpdatePlan,
    VersionDiff,
    VersionStatus,
)

console = Console()
error_console = Console(stderr=True)


PRIORITY_COLORS = {
    Priority.IMPORTANT: "red",
    Priority.RECOMMENDED: "yellow",
    Priority.OPTIONAL: "blue",
}

STATUS_COLORS = {
    VersionStatus.CURRENT: "green",
    VersionStatus.OUTDATED: "yellow",
    VersionStatus.NEWER: "cyan",
    VersionStatus.MISSING: "red",
}


# JSON shapes


def version_diff_to_dict(diff: VersionDiff) -> dict:
    return {
        "current": diff.current,
        "target": diff.target,
        "status": diff.status.value,
        "needsUpdate": diff.needs_update,
    }


def update_to_dict(update: AvailableUpdate) -> dict:
    return {
        "id": update.id,
        "type": update.type,
        "name": update.name,
        "description": update.description,
        "priority": update.priority.value,
        "breaking": update.breaking,
        "affectedItems": list(update.affected_items),
    }


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def analysis_to_dict(analysis: AnalysisResult) -> dict:
    return {
        "file": str(analysis.path),
        "success": analysis.success,
        "templateType": analysis.template_type.value,
        "versions": dict(analysis.versions),
        "patterns": {_camel(name): value for name, value in analysis.patterns.items()},
        "components": dict(analysis.components),
    }


def summary_to_dict(summary: ComparisonSummary) -> dict:
    return {
        "outdatedLibs": summary.outdated_count,
        "patternIssueCount": summary.pattern_issue_count,
        "availableUpdateCount": summary.available_update_count,
        "hasRecommendedUpdates": summary.has_recommended_updates,
        "hasImportantUpdates": summary.has_important_updates,
    }


def plan_to_dict(plan: UpdatePlan) -> dict:
    return {
        "file": str(plan.path),
        "templateType": plan.template_type.value,
        "hasUpdates": plan.has_updates,
        "versions": {dep: version_diff_to_dict(d) for dep, d in plan.version_diffs.items()},
        "patternIssues": [
            {"id": i.id, "description": i.description, "severity": i.severity.value}
            for i in plan.pattern_issues
        ],
        "updates": [
            {"number": entry.number, **update_to_dict(entry.update)}
            for entry in plan.entries
        ],
        "cache": {"source": plan.cache_source, "lastUpdated": plan.cache_last_updated},
        "analysis": analysis_to_dict(plan.analysis) if plan.analysis is not None else None,
        "summary": summary_to_dict(plan.summary),
    }


def file_report_to_dict(report: FileReport, include_diffs: bool = False) -> dict:
    data = {
        "file": str(report.path),
        "mode": report.mode,
        "success": report.success,
    }
    if report.error:
        data["error"] = report.error
    if report.plan is not None:
        data["plan"] = plan_to_dict(report.plan)
    if report.mode == "apply":
        data["applied"] = [
            {"id": a.id, "name": a.name, **({"diff": a.diff} if include_diffs else {})}
            for a in report.applied
        ]
        data["failed"] = [{"id": f.id, "name": f.name, "error": f.error} for f in report.failed]
        data["validationWarnings"] = list(report.validation_warnings)
    if report.backup_path is not None:
        data["backupPath"] = str(report.backup_path)
    return data


def batch_to_dict(batch: BatchReport, include_diffs: bool = False) -> dict:
    return {
        "directory": str(batch.directory),
        "mode": batch.mode,
        "success": True,
        "fileCount": batch.file_count,
        "needingUpdates": len(batch.needing_updates),
        "upToDate": len(batch.up_to_date),
        "failures": len(batch.failures),
        "totalUpdates": batch.total_updates,
        "results": [file_report_to_dict(r, include_diffs) for r in batch.reports],
    }


def backups_to_dict(artifact: Path, entries: list[BackupEntry]) -> dict:
    return {
        "file": str(artifact),
        "backups": [
            {"path": str(e.path), "timestamp": e.timestamp, "legacy": e.timestamp is None}
            for e in entries
        ],
    }


# Terminal rendering


def format_version_table(plan: UpdatePlan) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Dependency")
    table.add_column("Current")
    table.add_column("Target")
    table.add_column("Status")
    for dep, diff in plan.version_diffs.items():
        color = STATUS_COLORS[diff.status]
        table.add_row(
            dep,
            diff.current or "[dim]-[/dim]",
            diff.target,
            f"[{color}]{diff.status.value}[/{color}]",
        )
    return table


def format_update(number: int, update: AvailableUpdate) -> str:
    color = PRIORITY_COLORS[update.priority]
    lines = [
        f"  [bold]{number}.[/bold] {escape(update.name)}  "
        f"[{color}]({update.priority.value})[/{color}]",
        f"     [dim]{escape(update.description)}[/dim]",
    ]
    for item in update.affected_items:
        lines.append(f"     - {escape(item)}")
    return "\n".join(lines)


def print_plan(plan: UpdatePlan) -> None:
    """Print the dry-run report for one artifact."""
    border = "yellow" if plan.has_updates else "green"

    console.print()
    console.print(Panel(
        format_version_table(plan),
        title=f"[bold]{escape(plan.path.name)}[/bold]  [dim]{plan.template_type.value}[/dim]",
        border_style=border,
        padding=(0, 1),
    ))

    if plan.pattern_issues:
        console.print("\n  [bold]Pattern issues[/bold]")
        for issue in plan.pattern_issues:
            console.print(f"  [yellow]●[/yellow] {issue.id}  {escape(issue.description)}")

    if not plan.has_updates:
        console.print("\n  [green]✅ Up to date.[/green]")
    else:
        console.print(f"\n  [bold]Available updates ({len(plan.entries)})[/bold]\n")
        for entry in plan.entries:
            console.print(format_update(entry.number, entry.update))
        console.print()
        console.print(f"  Apply all: [bold]vibes update {escape(plan.path.name)} --apply[/bold]")
        console.print(f"  Apply some: [bold]vibes update {escape(plan.path.name)} --apply=1,2[/bold]")

    cache = plan.cache_source
    if plan.cache_last_updated:
        cache += f", updated {plan.cache_last_updated}"
    console.print(f"  [dim]Target: {escape(cache)}[/dim]\n")


def print_diff(diff: str) -> None:
    for line in diff.splitlines():
        if line.startswith(("+++", "---")):
            console.print(f"      [dim]{escape(line)}[/dim]")
        elif line.startswith("-"):
            console.print(f"      [red]{escape(line)}[/red]")
        elif line.startswith("+"):
            console.print(f"      [green]{escape(line)}[/green]")
        else:
            console.print(f"      {escape(line)}")


def print_apply_report(report: FileReport, verbose: bool = False) -> None:
    """Print what an apply run did to one artifact."""
    console.print(f"\n  [bold]Applied updates to:[/bold] {escape(report.path.name)}\n")

    if not report.applied and not report.failed:
        console.print("  [yellow]No updates to apply.[/yellow]\n")
        return

    if report.applied:
        console.print(f"  [green]✅ Applied ({len(report.applied)}):[/green]")
        for applied in report.applied:
            console.print(f"     {escape(applied.name)}")
            if verbose and applied.diff:
                print_diff(applied.diff)
        console.print()

    if report.failed:
        console.print(f"  [red]❌ Failed ({len(report.failed)}):[/red]")
        for failed in report.failed:
            console.print(f"     {escape(failed.name or failed.id)}: {escape(failed.error)}")
        console.print()

    if report.validation_warnings:
        console.print("  [yellow]⚠️  Validation warnings:[/yellow]")
        for warning in report.validation_warnings:
            console.print(f"     {escape(warning)}")
        console.print()

    if report.backup_path:
        console.print(f"  [dim]Backup: {escape(str(report.backup_path))}[/dim]")
        console.print(f"  [dim]Run `vibes update --rollback {escape(report.path.name)}` to restore.[/dim]")
    else:
        console.print("  [dim]File left unchanged.[/dim]")
    console.print()


def print_batch_summary(batch: BatchReport) -> None:
    """Print the per-file table and totals for a directory run."""
    if not batch.reports:
        console.print(f"\n  [yellow]No HTML files found in: {escape(str(batch.directory))}[/yellow]\n")
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("File")
    table.add_column("Template")
    table.add_column("Updates", justify="right")
    table.add_column("Status")

    for report in batch.reports:
        if report.path.is_relative_to(batch.directory):
            name = escape(str(report.path.relative_to(batch.directory)))
        else:
            name = escape(report.path.name)
        if not report.success:
            table.add_row(name, "-", "-", f"[red]{escape(report.error or 'failed')}[/red]")
        elif report.update_count:
            status = "[green]updated[/green]" if report.applied else "[yellow]needs update[/yellow]"
            table.add_row(name, report.plan.template_type.value, str(report.update_count), status)
        else:
            table.add_row(name, report.plan.template_type.value, "0", "[green]up to date[/green]")

    border = "red" if batch.failures else "yellow" if batch.needing_updates else "green"
    console.print()
    console.print(Panel(
        table,
        title=f"[bold]Batch {'apply' if batch.mode == 'batch-apply' else 'analysis'}[/bold]  "
              f"{escape(str(batch.directory))}",
        border_style=border,
        padding=(0, 1),
    ))
    console.print(
        f"  {batch.file_count} file(s) | "
        f"{len(batch.needing_updates)} need updates | "
        f"{len(batch.up_to_date)} up to date | "
        f"{len(batch.failures)} failed"
    )
    if batch.mode == "batch-analyze" and batch.needing_updates:
        console.print(f"  Apply all: [bold]vibes update {escape(str(batch.directory))} --apply[/bold]")
    console.print()


def print_rollback(report: FileReport) -> None:
    if report.success:
        console.print(f"  [green]✅ Restored from backup:[/green] {escape(str(report.path))}")
        console.print(f"     [dim]{escape(str(report.backup_path))}[/dim]")
    else:
        error_console.print(f"  [red]❌ Rollback failed:[/red] {escape(report.error or '')}")


def print_backups(artifact: Path, entries: list[BackupEntry]) -> None:
    if not entries:
        console.print(f"\n  No backups found for {escape(artifact.name)}.\n")
        return

    console.print(f"\n  [bold]Backups for {escape(artifact.name)}[/bold]  [dim](newest first)[/dim]\n")
    for i, entry in enumerate(entries, start=1):
        label = entry.timestamp or "legacy"
        marker = "  [dim]<- rollback target[/dim]" if i == 1 else ""
        console.print(f"  {i}. {label}  {escape(entry.path.name)}{marker}")
    console.print()


def print_error(message: str) -> None:
    error_console.print(f"  [red]Error:[/red] {escape(message)}")
