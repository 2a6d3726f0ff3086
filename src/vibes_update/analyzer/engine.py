"""Analyzer engine: runs the extraction rules over one artifact."""

from __future__ import annotations

import logging
from pathlib import Path

from vibes_update.analyzer.rules import (
    COMPONENT_RULES,
    PATTERN_RULES,
    ComponentRule,
    ExtractionRule,
    VersionRule,
    detect_template_type,
    find_import_map,
)
from vibes_update.core.config import UpdaterConfig
from vibes_update.core.errors import ArtifactNotFoundError, ParseFailureError
from vibes_update.core.models import AnalysisResult, TemplateType

logger = logging.getLogger("vibes_update.analyzer")


class Analyzer:
    """Extracts declared versions, template type, patterns and components."""

    def __init__(self, config: UpdaterConfig | None = None):
        self.config = config or UpdaterConfig()
        self.version_rules: list[VersionRule] = [
            VersionRule(dep) for dep in self.config.analyze.tracked
        ]
        self.pattern_rules: list[ExtractionRule] = list(PATTERN_RULES)
        self.component_rules: list[ComponentRule] = list(COMPONENT_RULES)

    def analyze(self, path: Path | str) -> AnalysisResult:
        """Read and analyze one artifact. Read-only."""
        return self.analyze_text(read_artifact(path, self.config), Path(path))

    def analyze_text(self, text: str, path: Path | None = None) -> AnalysisResult:
        """Analyze artifact content already held in memory."""
        path = path or Path("<memory>")

        if not text.strip():
            return AnalysisResult(path=path)

        versions: dict[str, str] = {}
        for rule in self.version_rules:
            version = rule.extract(text)
            if version:
                versions[rule.dependency] = version

        if not versions and find_import_map(text) is None:
            raise ParseFailureError(
                f"No recognizable version declarations in {path.name}"
            )

        patterns: dict[str, bool | str] = {}
        for rule in self.pattern_rules:
            value = rule.extract(text)
            if value is not None:
                patterns[rule.name] = value

        components: dict[str, str] = {}
        for rule in self.component_rules:
            tag = rule.extract(text)
            if tag:
                components[rule.component] = tag

        template_type = detect_template_type(text)
        if template_type == TemplateType.UNKNOWN:
            logger.debug("No template fingerprint matched %s", path)

        return AnalysisResult(
            path=path,
            template_type=template_type,
            versions=versions,
            patterns=patterns,
            components=components,
        )


def read_artifact(path: Path | str, config: UpdaterConfig | None = None) -> str:
    """Read an artifact as UTF-8 with its line endings untouched.

    Unreadable paths raise ArtifactNotFoundError; bytes that are not UTF-8
    raise ParseFailureError.
    """
    config = config or UpdaterConfig()
    file_path = Path(path)

    if not file_path.is_file():
        raise ArtifactNotFoundError(file_path)

    size = file_path.stat().st_size
    if size > config.large_file_threshold:
        logger.warning(
            "Large file (%.1fMB): %s. Processing may be slow.",
            size / (1024 * 1024),
            file_path.name,
        )

    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise ArtifactNotFoundError(file_path, str(e)) from e

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseFailureError(f"{file_path.name} is not valid UTF-8: {e}") from e
