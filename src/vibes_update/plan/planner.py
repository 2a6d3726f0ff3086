"""Plan generation, selection and batch aggregation."""

from __future__ import annotations

from pathlib import Path

from vibes_update.core.models import (
    AvailableUpdate,
    BatchReport,
    ComparisonResult,
    FileReport,
    PlanEntry,
    UpdatePlan,
)

SELECT_ALL = "all"


def generate_plan(comparison: ComparisonResult) -> UpdatePlan:
    """Number the available updates: highest priority first, then detection order."""
    ordered = sorted(
        enumerate(comparison.available_updates),
        key=lambda pair: (-pair[1].priority.rank, pair[0]),
    )
    entries = [
        PlanEntry(number=i, update=update)
        for i, (_, update) in enumerate(ordered, start=1)
    ]

    return UpdatePlan(
        path=comparison.analysis.path,
        template_type=comparison.analysis.template_type,
        entries=entries,
        version_diffs=dict(comparison.version_diffs),
        pattern_issues=list(comparison.pattern_issues),
        cache_source=comparison.target.source,
        cache_last_updated=comparison.target.last_updated,
        analysis=comparison.analysis,
        summary=comparison.summary,
    )


def parse_selection(selection: str) -> list[int]:
    """Parse ``"1,3"`` into ordinals, skipping blanks and non-numeric tokens."""
    ordinals = []
    for token in selection.split(","):
        token = token.strip()
        if token.isdigit():
            ordinals.append(int(token))
    return ordinals


def filter_updates(plan: UpdatePlan, selection: str | None) -> list[AvailableUpdate]:
    """Select plan entries to execute.

    ``None`` selects nothing (report only), ``"all"`` selects every entry,
    and a comma-separated list of 1-based ordinals selects those entries in
    plan order. Out-of-range ordinals are ignored.
    """
    if selection is None:
        return []

    if selection.strip().lower() == SELECT_ALL:
        return plan.updates

    wanted = set(parse_selection(selection))
    return [entry.update for entry in plan.entries if entry.number in wanted]


def summarize_batch(directory: Path, reports: list[FileReport], apply: bool = False) -> BatchReport:
    """Collect per-file outcomes into one report; failures sit beside successes."""
    return BatchReport(
        directory=directory,
        mode="batch-apply" if apply else "batch-analyze",
        reports=list(reports),
    )
