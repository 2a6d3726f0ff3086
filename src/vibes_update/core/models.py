"""Shared data models used across the update pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

from vibes_update.compare.versions import extract_version


class TemplateType(enum.Enum):
    VIBES_BASIC = "vibes-basic"
    SELL = "sell"
    UNKNOWN = "unknown"


class Priority(enum.Enum):
    IMPORTANT = "important"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"

    @property
    def rank(self) -> int:
        return {
            Priority.IMPORTANT: 2,
            Priority.RECOMMENDED: 1,
            Priority.OPTIONAL: 0,
        }[self]


class IssueSeverity(enum.Enum):
    IMPORTANT = "important"
    RECOMMENDED = "recommended"


class VersionStatus(enum.Enum):
    CURRENT = "current"
    OUTDATED = "outdated"
    NEWER = "newer"
    MISSING = "missing"


@dataclass(frozen=True)
class AnalysisResult:
    """Facts extracted from one artifact read."""

    path: Path
    success: bool = True
    error: str | None = None
    template_type: TemplateType = TemplateType.UNKNOWN
    versions: dict[str, str] = field(default_factory=dict)
    patterns: dict[str, bool | str] = field(default_factory=dict)
    components: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TargetConfiguration:
    """Desired-state snapshot loaded from the import map cache."""

    imports: dict[str, str]
    source: str
    last_updated: str | None = None
    components: dict[str, str] = field(default_factory=dict)
    origin: str = ""  # upstream URL recorded by the sync step

    @property
    def versions(self) -> dict[str, str]:
        versions = {}
        for name, url in self.imports.items():
            version = extract_version(url)
            if version:
                versions[name] = version
        return versions


@dataclass(frozen=True)
class VersionDiff:
    current: str | None
    target: str
    status: VersionStatus
    needs_update: bool


@dataclass(frozen=True)
class PatternIssue:
    id: str
    description: str
    severity: IssueSeverity


@dataclass(frozen=True)
class AvailableUpdate:
    """A candidate corrective action proposed by the comparator."""

    id: str
    type: str
    name: str
    description: str
    priority: Priority
    breaking: bool = False
    affected_items: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ComparisonSummary:
    outdated_count: int = 0
    pattern_issue_count: int = 0
    available_update_count: int = 0
    has_important_updates: bool = False
    has_recommended_updates: bool = False


@dataclass(frozen=True)
class ComparisonResult:
    """Drift between an analyzed artifact and the target configuration."""

    analysis: AnalysisResult
    target: TargetConfiguration
    version_diffs: dict[str, VersionDiff] = field(default_factory=dict)
    pattern_issues: list[PatternIssue] = field(default_factory=list)
    available_updates: list[AvailableUpdate] = field(default_factory=list)
    summary: ComparisonSummary = field(default_factory=ComparisonSummary)


@dataclass(frozen=True)
class PlanEntry:
    number: int  # 1-based, stable across runs
    update: AvailableUpdate


@dataclass(frozen=True)
class UpdatePlan:
    """Ordered, numbered rendering of a comparison."""

    path: Path
    template_type: TemplateType
    entries: list[PlanEntry] = field(default_factory=list)
    version_diffs: dict[str, VersionDiff] = field(default_factory=dict)
    pattern_issues: list[PatternIssue] = field(default_factory=list)
    cache_source: str = ""
    cache_last_updated: str | None = None
    analysis: AnalysisResult | None = None
    summary: ComparisonSummary = field(default_factory=ComparisonSummary)

    @property
    def has_updates(self) -> bool:
        return bool(self.entries)

    @property
    def updates(self) -> list[AvailableUpdate]:
        return [entry.update for entry in self.entries]


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of running one update definition."""

    success: bool
    html: str | None = None
    error: str | None = None
    diff: str | None = None


@dataclass(frozen=True)
class AppliedUpdate:
    id: str
    name: str
    diff: str | None = None


@dataclass(frozen=True)
class FailedUpdate:
    id: str
    name: str
    error: str


@dataclass
class ExecutionResult:
    """Text produced by threading a selection of updates, plus per-update outcomes."""

    html: str
    applied: list[AppliedUpdate] = field(default_factory=list)
    failed: list[FailedUpdate] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.applied)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BackupEntry:
    path: Path
    timestamp: str | None = None  # None for the legacy single backup


@dataclass
class FileReport:
    """Per-file outcome of the analyze/apply pipeline."""

    path: Path
    mode: str  # "analyze", "apply", "rollback"
    success: bool
    error: str | None = None
    plan: UpdatePlan | None = None
    applied: list[AppliedUpdate] = field(default_factory=list)
    failed: list[FailedUpdate] = field(default_factory=list)
    validation_warnings: list[str] = field(default_factory=list)
    backup_path: Path | None = None

    @property
    def update_count(self) -> int:
        return len(self.plan.entries) if self.plan else 0


@dataclass
class BatchReport:
    """Aggregated outcome of a directory run."""

    directory: Path
    mode: str  # "batch-analyze" or "batch-apply"
    reports: list[FileReport] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.reports)

    @property
    def failures(self) -> list[FileReport]:
        return [r for r in self.reports if not r.success]

    @property
    def needing_updates(self) -> list[FileReport]:
        return [r for r in self.reports if r.success and r.update_count > 0]

    @property
    def up_to_date(self) -> list[FileReport]:
        return [r for r in self.reports if r.success and r.update_count == 0]

    @property
    def total_updates(self) -> int:
        return sum(r.update_count for r in self.reports)
