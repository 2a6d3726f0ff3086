"""Embedded component replacement."""

from __future__ import annotations

from vibes_update.analyzer.rules import find_function_block
from vibes_update.core.errors import UpdateExecutionError
from vibes_update.core.models import AnalysisResult, ComparisonResult
from vibes_update.updates.base import UpdateDefinition


class ComponentReplaceUpdate(UpdateDefinition):
    """Swap an embedded component definition for the cached upstream source."""

    def __init__(self, update_id: str, component: str, name: str, description: str = ""):
        self.id = update_id
        self.component = component
        self.name = name
        self.description = description

    def apply(self, text: str, analysis: AnalysisResult, comparison: ComparisonResult) -> str:
        span = find_function_block(text, self.component)
        if span is None:
            raise UpdateExecutionError(f"{self.component} definition not found")

        source = comparison.target.components.get(self.component)
        if not source:
            raise UpdateExecutionError(
                f'No cached {self.component} source. Run "vibes sync" first.'
            )

        replacement = source.strip().replace("\r\n", "\n")
        if "\r\n" in text:
            replacement = replacement.replace("\n", "\r\n")
        if find_function_block(replacement, self.component) is None:
            raise UpdateExecutionError(f"Cached source does not define {self.component}")

        new_text = text[: span.start] + replacement + text[span.end:]
        if new_text == text:
            raise UpdateExecutionError(f"{self.component} is already up to date")
        return new_text
