"""Bulk version update of the import map."""

from __future__ import annotations

import json
import logging

from vibes_update.analyzer.rules import dependency_version_re, find_import_map
from vibes_update.compare.engine import prerelease_pins
from vibes_update.core.errors import UpdateExecutionError
from vibes_update.core.models import AnalysisResult, ComparisonResult, VersionStatus
from vibes_update.updates.base import UpdateDefinition

logger = logging.getLogger("vibes_update.updates")

EXTERNAL_QUERY = "?external=react,react-dom"


def is_react_package(name: str) -> bool:
    """True for react, react-dom and their subpath entries."""
    return name in ("react", "react-dom") or name.startswith(("react/", "react-dom/"))


def with_external(name: str, url: str) -> str:
    """Mark a non-React CDN import as sharing the page's React instance."""
    if is_react_package(name) or "?" in url:
        return url
    return url + EXTERNAL_QUERY


def _indent_of(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def render_import_map(data: dict, original_body: str) -> str:
    """Serialize ``data`` reusing the indentation and line endings of the original JSON body."""
    newline = "\r\n" if "\r\n" in original_body else "\n"
    if not original_body.strip():
        return newline + json.dumps(data, indent=2, ensure_ascii=False).replace("\n", newline) + newline

    lines = [line for line in original_body.splitlines() if line.strip()]
    base = _indent_of(lines[0])
    unit = 2
    if len(lines) > 1:
        step = len(_indent_of(lines[1])) - len(base)
        if step > 0:
            unit = step

    dumped = json.dumps(data, indent=unit, ensure_ascii=False)
    rendered = newline.join(base + line for line in dumped.splitlines())

    leading = original_body[: len(original_body) - len(original_body.lstrip())]
    trailing = original_body[len(original_body.rstrip()):]
    return leading + rendered.lstrip() + trailing


class ImportMapUpdate(UpdateDefinition):
    """Move every outdated or pre-release pin to the target version.

    Versions are rewritten in place wherever ``<dep>@<version>`` occurs, so
    subpath entries and loose imports outside the map follow along. Missing
    dependencies are added to the import map JSON when the artifact has one;
    otherwise they are logged and the version rewrites still go through.
    """

    id = "import-map"
    name = "Update import map"
    description = "Update library versions to latest stable"

    def apply(self, text: str, analysis: AnalysisResult, comparison: ComparisonResult) -> str:
        target_versions = comparison.target.versions

        rewrites = {
            dep: diff.target
            for dep, diff in comparison.version_diffs.items()
            if diff.needs_update and diff.current
        }
        for dep in prerelease_pins(analysis, target_versions):
            rewrites[dep] = target_versions[dep]

        missing = [
            dep for dep, diff in comparison.version_diffs.items()
            if diff.status == VersionStatus.MISSING and diff.needs_update
        ]

        new_text = text
        for dep, version in rewrites.items():
            pinned = f"{dep}@{version}"
            new_text = dependency_version_re(dep).sub(lambda _m: pinned, new_text)

        if missing:
            new_text = self._add_missing(new_text, missing, comparison)

        if new_text == text:
            raise UpdateExecutionError("Import map already matches the target versions")
        return new_text

    def _add_missing(self, text: str, missing: list[str], comparison: ComparisonResult) -> str:
        block = find_import_map(text)
        if block is None:
            logger.warning(
                "%s: no import map to add missing dependencies to: %s",
                comparison.analysis.path.name,
                ", ".join(missing),
            )
            return text

        body = block.group(2)
        try:
            data = json.loads(body) if body.strip() else {}
        except json.JSONDecodeError as e:
            raise UpdateExecutionError(f"Import map is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise UpdateExecutionError("Import map is not a JSON object")
        imports = data.setdefault("imports", {})
        if not isinstance(imports, dict):
            raise UpdateExecutionError('Import map "imports" is not a JSON object')

        for dep in missing:
            imports[dep] = with_external(dep, comparison.target.imports[dep])

        rendered = render_import_map(data, body)
        return text[: block.start(2)] + rendered + text[block.end(2):]
