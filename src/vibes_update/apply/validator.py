"""Structural validation of a written artifact."""

from __future__ import annotations

import re

from vibes_update.analyzer.rules import BABEL_SCRIPT_RE, ENTRY_POINT_RE
from vibes_update.core.models import ValidationResult

IMPORT_MAP_TAG_RE = re.compile(r"<script\b[^>]*\btype=[\"']importmap[\"']", re.IGNORECASE)
HTML_OPEN_RE = re.compile(r"<html\b", re.IGNORECASE)
HTML_CLOSE_RE = re.compile(r"</html>", re.IGNORECASE)
SCRIPT_OPEN_RE = re.compile(r"<script\b", re.IGNORECASE)
SCRIPT_CLOSE_RE = re.compile(r"</script>", re.IGNORECASE)


def validate_output(html: str) -> ValidationResult:
    """Check invariants independent of which updates ran.

    Problems are warnings: the caller decides whether to roll back.
    """
    warnings = []

    if not IMPORT_MAP_TAG_RE.search(html):
        warnings.append('Missing import map (<script type="importmap">)')

    if not BABEL_SCRIPT_RE.search(html):
        warnings.append('Missing Babel script (<script type="text/babel">)')

    if not ENTRY_POINT_RE.search(html):
        warnings.append("Missing App component (export default function App)")

    if not HTML_OPEN_RE.search(html):
        warnings.append("Missing <html> tag")
    if not HTML_CLOSE_RE.search(html):
        warnings.append("Missing closing </html> tag")

    opens = len(SCRIPT_OPEN_RE.findall(html))
    closes = len(SCRIPT_CLOSE_RE.findall(html))
    if opens != closes:
        warnings.append(f"Mismatched script tags ({opens} opens, {closes} closes)")

    return ValidationResult(valid=not warnings, warnings=warnings)
