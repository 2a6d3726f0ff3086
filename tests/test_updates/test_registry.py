"""Tests for the update registry and executor."""

from __future__ import annotations

from pathlib import Path

from vibes_update.analyzer.engine import Analyzer
from vibes_update.compare.engine import build_comparison
from vibes_update.core.config import AnalyzeConfig
from vibes_update.core.errors import UpdateExecutionError
from vibes_update.core.models import AvailableUpdate, Priority, TargetConfiguration
from vibes_update.updates import REGISTRY, execute_update, execute_updates, get_applicable_updates, get_update_by_id
from vibes_update.updates.base import UpdateDefinition


class _Exploding(UpdateDefinition):
    id = "explode"
    name = "Always fails"

    def apply(self, text, analysis, comparison):
        raise UpdateExecutionError("kaboom")


class _Appending(UpdateDefinition):
    id = "append"
    name = "Append marker"

    def apply(self, text, analysis, comparison):
        return text + "<!-- marker -->\n"


def _context(text: str, imports: dict):
    analysis = Analyzer().analyze_text(text, Path("app.html"))
    target = TargetConfiguration(imports=imports, source="working-cache")
    return analysis, build_comparison(analysis, target, AnalyzeConfig().tracked)


def _available(update_id: str) -> AvailableUpdate:
    return AvailableUpdate(update_id, "test", update_id, "", Priority.RECOMMENDED)


class TestRegistry:
    def test_builtin_ids(self):
        assert set(REGISTRY) == {"import-map", "deps-to-external", "add-external", "vibes-switch"}

    def test_lookup(self):
        assert get_update_by_id("import-map").name == "Update import map"
        assert get_update_by_id("does-not-exist") is None

    def test_applicable_updates_follow_comparison(self, app_html: str, target_imports: dict):
        _, comparison = _context(app_html, target_imports)
        assert [d.id for d in get_applicable_updates(comparison)] == ["import-map"]


class TestExecuteUpdate:
    def test_success_carries_diff(self, app_html: str, target_imports: dict):
        analysis, comparison = _context(app_html, target_imports)
        result = execute_update(REGISTRY["import-map"], app_html, analysis, comparison)

        assert result.success is True
        assert "-      \"react\": \"https://esm.sh/react@18.2.0\"," in result.diff
        assert "+      \"react\": \"https://esm.sh/react@18.3.1\"," in result.diff

    def test_failure_is_returned_not_raised(self, app_html: str, target_imports: dict):
        analysis, comparison = _context(app_html, target_imports)
        result = execute_update(_Exploding(), app_html, analysis, comparison)

        assert result.success is False
        assert result.error == "kaboom"
        assert result.html is None


class TestExecuteUpdates:
    def test_partial_failure_is_contained(self, app_html: str, target_imports: dict):
        analysis, comparison = _context(app_html, target_imports)
        registry = {"explode": _Exploding(), "append": _Appending(), **REGISTRY}

        result = execute_updates(
            [_available("import-map"), _available("explode"), _available("missing"), _available("append")],
            app_html,
            analysis,
            comparison,
            registry,
        )

        assert [a.id for a in result.applied] == ["import-map", "append"]
        assert [(f.id, f.error) for f in result.failed] == [
            ("explode", "kaboom"),
            ("missing", "Update not found in registry"),
        ]
        # Later updates see the output of earlier successful ones.
        assert "react@18.3.1" in result.html
        assert result.html.endswith("<!-- marker -->\n")
        assert result.changed is True

    def test_all_failing_leaves_text_unchanged(self, app_html: str, target_imports: dict):
        analysis, comparison = _context(app_html, target_imports)

        result = execute_updates([_available("explode")], app_html, analysis, comparison, {"explode": _Exploding()})

        assert result.html == app_html
        assert result.changed is False
