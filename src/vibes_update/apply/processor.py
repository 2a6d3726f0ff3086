"""Single-file pipeline and batch driver.

analyze -> compare -> plan for a dry run; the same chain plus
execute -> backup -> write -> validate when applying. Files in a batch are
processed one after another and every per-file failure is captured in its
report rather than aborting the run.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from vibes_update.analyzer.engine import Analyzer, read_artifact
from vibes_update.apply.backup import BackupManager, atomic_write, is_backup_file
from vibes_update.apply.validator import validate_output
from vibes_update.compare.engine import Comparator
from vibes_update.core.config import UpdaterConfig
from vibes_update.core.errors import ArtifactNotFoundError, UpdaterError
from vibes_update.core.models import BatchReport, FileReport, TargetConfiguration
from vibes_update.plan.planner import filter_updates, generate_plan, summarize_batch
from vibes_update.updates.registry import execute_updates

logger = logging.getLogger("vibes_update.processor")

ARTIFACT_SUFFIX = ".html"


class UpdateProcessor:
    """Runs the update pipeline for files and directories."""

    def __init__(
        self,
        plugin_root: Path,
        config: UpdaterConfig | None = None,
        backups: BackupManager | None = None,
        registry=None,
    ):
        self.config = config or UpdaterConfig()
        self.analyzer = Analyzer(self.config)
        self.comparator = Comparator(plugin_root, self.config)
        self.backups = backups or BackupManager()
        self.registry = registry
        self._target: TargetConfiguration | None = None

    def target(self) -> TargetConfiguration:
        """Target configuration, loaded once and held for the whole run."""
        if self._target is None:
            self._target = self.comparator.load_target()
        return self._target

    def process_file(self, path: Path | str, apply_selection: str | None = None) -> FileReport:
        """Analyze one artifact and, when a selection is given, apply it."""
        file_path = Path(path).resolve()
        mode = "apply" if apply_selection is not None else "analyze"

        try:
            text = read_artifact(file_path, self.config)
            analysis = self.analyzer.analyze_text(text, file_path)
            comparison = self.comparator.compare(analysis, self.target())
        except UpdaterError as e:
            logger.debug("Pipeline failed for %s: %s", file_path, e)
            return FileReport(path=file_path, mode=mode, success=False, error=str(e))

        plan = generate_plan(comparison)
        report = FileReport(path=file_path, mode=mode, success=True, plan=plan)

        selected = filter_updates(plan, apply_selection)
        if not selected:
            return report

        execution = execute_updates(selected, text, analysis, comparison, self.registry)
        report.applied = execution.applied
        report.failed = execution.failed

        if not execution.changed:
            logger.info("No updates applied to %s; file left untouched", file_path.name)
            return report

        report.backup_path = self.backups.create(file_path)
        atomic_write(file_path, execution.html)
        logger.info("Wrote %d update(s) to %s", len(execution.applied), file_path)

        validation = validate_output(execution.html)
        report.validation_warnings = validation.warnings
        for warning in validation.warnings:
            logger.warning("%s: %s", file_path.name, warning)

        return report

    def rollback(self, path: Path | str) -> FileReport:
        file_path = Path(path).resolve()
        try:
            backup = self.backups.restore(file_path)
        except UpdaterError as e:
            return FileReport(path=file_path, mode="rollback", success=False, error=str(e))
        return FileReport(path=file_path, mode="rollback", success=True, backup_path=backup)

    def discover(self, directory: Path) -> list[Path]:
        """Artifacts under ``directory``, skipping backups, hidden and excluded dirs."""
        excluded = {entry.strip("/") for entry in self.config.exclude}
        found = []
        for root, dirs, files in os.walk(directory):
            dirs[:] = sorted(d for d in dirs if not d.startswith(".") and d not in excluded)
            for name in sorted(files):
                if Path(name).suffix.lower() != ARTIFACT_SUFFIX or is_backup_file(name):
                    continue
                found.append(Path(root) / name)
        return found

    def process_batch(self, directory: Path | str, apply_selection: str | None = None) -> BatchReport:
        """Dry-run every artifact, then apply to those with pending updates."""
        dir_path = Path(directory).resolve()
        if not dir_path.is_dir():
            raise ArtifactNotFoundError(dir_path, "not a directory")

        files = self.discover(dir_path)
        logger.info("Found %d HTML file(s) in %s", len(files), dir_path)

        reports = []
        for file_path in files:
            report = self.process_file(file_path)
            if not report.success:
                report.error = f"{file_path.name}: {report.error}"
            elif apply_selection is not None and report.update_count:
                report = self.process_file(file_path, apply_selection)
            reports.append(report)

        return summarize_batch(dir_path, reports, apply=apply_selection is not None)
