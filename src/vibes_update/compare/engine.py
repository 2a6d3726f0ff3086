"""Comparator: drift between an analyzed artifact and the target configuration."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from vibes_update.compare.target import TargetLoader
from vibes_update.compare.versions import compare_base, compare_versions, is_prerelease
from vibes_update.core.config import UpdaterConfig
from vibes_update.core.errors import ParseFailureError, TargetUnavailableError
from vibes_update.core.models import (
    AnalysisResult,
    AvailableUpdate,
    ComparisonResult,
    ComparisonSummary,
    IssueSeverity,
    PatternIssue,
    Priority,
    TargetConfiguration,
    TemplateType,
    VersionDiff,
    VersionStatus,
)


def diff_version(current: str | None, target: str) -> VersionDiff:
    """Classify one dependency against its target version."""
    if not current:
        return VersionDiff(current=None, target=target, status=VersionStatus.MISSING, needs_update=True)

    result = compare_versions(current, target)
    if result < 0:
        return VersionDiff(current, target, VersionStatus.OUTDATED, needs_update=True)

    # Same base, pinned to a dev/preview build while the target is stable.
    if result > 0 and compare_base(current, target) == 0 and is_prerelease(current):
        return VersionDiff(current, target, VersionStatus.OUTDATED, needs_update=True)

    if result > 0:
        return VersionDiff(current, target, VersionStatus.NEWER, needs_update=False)
    return VersionDiff(current, target, VersionStatus.CURRENT, needs_update=False)


def prerelease_pins(analysis: AnalysisResult, target_versions: dict[str, str]) -> dict[str, str]:
    """Tracked dependencies pinned to a pre-release that differs from the target."""
    pins = {}
    for dep, version in analysis.versions.items():
        target = target_versions.get(dep)
        if target and is_prerelease(version) and version != target:
            pins[dep] = version
    return pins


class PatternCheck(ABC):
    """A structural convention check producing at most one issue."""

    check_id: str = ""
    severity: IssueSeverity = IssueSeverity.RECOMMENDED
    templates: tuple[TemplateType, ...] = tuple(TemplateType)

    @abstractmethod
    def run(self, analysis: AnalysisResult, target: TargetConfiguration) -> PatternIssue | None:
        ...

    def applies_to(self, template_type: TemplateType) -> bool:
        return template_type in self.templates

    def _make_issue(self, description: str) -> PatternIssue:
        return PatternIssue(id=self.check_id, description=description, severity=self.severity)


class DepsToExternalCheck(PatternCheck):
    """``?deps=`` pins React into each bundle; ``?external=`` keeps one singleton."""

    check_id = "deps-to-external"
    severity = IssueSeverity.RECOMMENDED
    templates = (TemplateType.VIBES_BASIC, TemplateType.SELL)

    def run(self, analysis, target):
        if analysis.patterns.get("uses_deps") and not analysis.patterns.get("uses_external"):
            return self._make_issue("Using ?deps= instead of ?external= for React singleton")
        return None


class MissingExternalCheck(PatternCheck):
    """Only raised where there is an import map to add the query to."""

    check_id = "missing-external"
    severity = IssueSeverity.IMPORTANT
    templates = (TemplateType.VIBES_BASIC, TemplateType.SELL)

    def run(self, analysis, target):
        if not analysis.patterns.get("has_import_map"):
            return None
        if not analysis.patterns.get("uses_external") and not analysis.patterns.get("uses_deps"):
            return self._make_issue("Missing ?external= parameter on use-vibes imports")
        return None


class DevVersionCheck(PatternCheck):
    check_id = "dev-version"
    severity = IssueSeverity.RECOMMENDED

    def run(self, analysis, target):
        pins = prerelease_pins(analysis, target.versions)
        if not pins:
            return None
        listed = ", ".join(f"{dep}@{version}" for dep, version in pins.items())
        return self._make_issue(f"Using development version ({listed})")


PATTERN_CHECKS: list[PatternCheck] = [
    DepsToExternalCheck(),
    MissingExternalCheck(),
    DevVersionCheck(),
]

# Remediation action for each pattern issue id.
REMEDIATIONS: dict[str, AvailableUpdate] = {
    "deps-to-external": AvailableUpdate(
        id="deps-to-external",
        type="deps-to-external",
        name="Fix React singleton pattern",
        description="Migrate ?deps= to ?external= for proper React singleton",
        priority=Priority.RECOMMENDED,
    ),
    "missing-external": AvailableUpdate(
        id="add-external",
        type="import-map-replace",
        name="Add ?external= parameters",
        description="Add ?external=react,react-dom to prevent duplicate React instances",
        priority=Priority.IMPORTANT,
    ),
    "dev-version": AvailableUpdate(
        id="import-map",
        type="import-map-replace",
        name="Update import map",
        description="Pin development builds to the latest stable release",
        priority=Priority.RECOMMENDED,
    ),
}


def dedupe_updates(updates: list[AvailableUpdate]) -> list[AvailableUpdate]:
    """Drop repeated ids, keeping the first entry but the highest priority seen."""
    merged: dict[str, AvailableUpdate] = {}
    for update in updates:
        existing = merged.get(update.id)
        if existing is None:
            merged[update.id] = update
            continue
        if update.priority.rank > existing.priority.rank:
            merged[update.id] = AvailableUpdate(
                id=existing.id,
                type=existing.type,
                name=existing.name,
                description=existing.description,
                priority=update.priority,
                breaking=existing.breaking or update.breaking,
                affected_items=existing.affected_items,
            )
    return list(merged.values())


class Comparator:
    """Computes version deltas, pattern issues and candidate updates."""

    def __init__(
        self,
        plugin_root: Path,
        config: UpdaterConfig | None = None,
        loader: TargetLoader | None = None,
    ):
        self.config = config or UpdaterConfig()
        self.loader = loader or TargetLoader(plugin_root, self.config.target)
        self.checks = list(PATTERN_CHECKS)

    def load_target(self) -> TargetConfiguration:
        target = self.loader.load()
        if target is None:
            raise TargetUnavailableError(
                'Could not load plugin cache. Run "vibes sync" first.'
            )
        return target

    def compare(self, analysis: AnalysisResult, target: TargetConfiguration | None = None) -> ComparisonResult:
        if not analysis.success:
            raise ParseFailureError(analysis.error or f"Analysis failed for {analysis.path}")

        if target is None:
            target = self.load_target()

        return build_comparison(analysis, target, self.config.analyze.tracked, self.checks)


def build_comparison(
    analysis: AnalysisResult,
    target: TargetConfiguration,
    tracked: list[str],
    checks: list[PatternCheck] | None = None,
) -> ComparisonResult:
    """Pure comparison of an analysis against a loaded target."""
    checks = PATTERN_CHECKS if checks is None else checks
    target_versions = target.versions
    has_import_map = bool(analysis.patterns.get("has_import_map"))

    version_diffs: dict[str, VersionDiff] = {}
    for dep in tracked:
        target_version = target_versions.get(dep)
        if not target_version:
            continue
        diff = diff_version(analysis.versions.get(dep), target_version)
        if diff.status == VersionStatus.MISSING and not has_import_map:
            # Nowhere to add it; reported but not actionable.
            diff = VersionDiff(None, target_version, VersionStatus.MISSING, needs_update=False)
        version_diffs[dep] = diff

    pattern_issues: list[PatternIssue] = []
    for check in checks:
        if not check.applies_to(analysis.template_type):
            continue
        issue = check.run(analysis, target)
        if issue is not None:
            pattern_issues.append(issue)

    candidates: list[AvailableUpdate] = []

    outdated = {dep: d for dep, d in version_diffs.items() if d.needs_update}
    if outdated:
        candidates.append(AvailableUpdate(
            id="import-map",
            type="import-map-replace",
            name="Update import map",
            description="Update library versions to latest stable",
            priority=Priority.RECOMMENDED,
            breaking=False,
            affected_items=[
                f"{dep}: {d.current or '(missing)'} -> {d.target}" for dep, d in outdated.items()
            ],
        ))

    for issue in pattern_issues:
        remediation = REMEDIATIONS.get(issue.id)
        if remediation is not None:
            candidates.append(remediation)

    if (
        analysis.components.get("VibesSwitch") == "v1"
        and "VibesSwitch" in target.components
    ):
        candidates.append(AvailableUpdate(
            id="vibes-switch",
            type="component-replace",
            name="Update VibesSwitch component",
            description="Update to latest VibesSwitch with improved animations",
            priority=Priority.OPTIONAL,
        ))

    available_updates = dedupe_updates(candidates)

    summary = ComparisonSummary(
        outdated_count=len(outdated),
        pattern_issue_count=len(pattern_issues),
        available_update_count=len(available_updates),
        has_important_updates=any(u.priority == Priority.IMPORTANT for u in available_updates),
        has_recommended_updates=any(u.priority == Priority.RECOMMENDED for u in available_updates),
    )

    return ComparisonResult(
        analysis=analysis,
        target=target,
        version_diffs=version_diffs,
        pattern_issues=pattern_issues,
        available_updates=available_updates,
        summary=summary,
    )
