"""React singleton fixes: ``?deps=`` migration and missing ``?external=``."""

from __future__ import annotations

import re

from vibes_update.analyzer.rules import DEPS_RE, find_import_map
from vibes_update.core.errors import UpdateExecutionError
from vibes_update.core.models import AnalysisResult, ComparisonResult
from vibes_update.updates.base import UpdateDefinition
from vibes_update.updates.import_map import EXTERNAL_QUERY, is_react_package

# "key": "value" with either quote style.
IMPORT_ENTRY_RE = re.compile(r"([\"'])([^\"']+)\1(\s*:\s*)([\"'])([^\"']*)\4")


class DepsToExternalUpdate(UpdateDefinition):
    id = "deps-to-external"
    name = "Fix React singleton pattern"
    description = "Migrate ?deps= to ?external= for proper React singleton"

    def apply(self, text: str, analysis: AnalysisResult, comparison: ComparisonResult) -> str:
        new_text, count = DEPS_RE.subn(lambda _m: EXTERNAL_QUERY, text)
        if count == 0:
            raise UpdateExecutionError("No ?deps= parameters found")
        return new_text


class AddExternalUpdate(UpdateDefinition):
    """Append ``?external=react,react-dom`` to non-React import map entries."""

    id = "add-external"
    name = "Add ?external= parameters"
    description = "Add ?external=react,react-dom to prevent duplicate React instances"

    def apply(self, text: str, analysis: AnalysisResult, comparison: ComparisonResult) -> str:
        block = find_import_map(text)
        if block is None:
            raise UpdateExecutionError("No import map found")

        changed = 0

        def add_query(match: re.Match) -> str:
            nonlocal changed
            key, url = match.group(2), match.group(5)
            if is_react_package(key) or "?" in url or not url.startswith(("http://", "https://")):
                return match.group(0)
            changed += 1
            quote = match.group(4)
            return f"{match.group(1)}{key}{match.group(1)}{match.group(3)}{quote}{url}{EXTERNAL_QUERY}{quote}"

        body = IMPORT_ENTRY_RE.sub(add_query, block.group(2))
        if changed == 0:
            raise UpdateExecutionError("No eligible imports to add ?external= to")
        return text[: block.start(2)] + body + text[block.end(2):]
