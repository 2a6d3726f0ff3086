"""Named extraction rules used by the analyzer.

Each rule is tolerant: it looks for a conventionally formatted declaration
and returns ``None`` (or ``False``) when the declaration is absent or
malformed, so one unreadable field never fails the whole analysis.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from vibes_update.compare.versions import VERSION_PATTERN
from vibes_update.core.models import TemplateType

IMPORT_MAP_RE = re.compile(
    r"(<script\b[^>]*\btype=[\"']importmap[\"'][^>]*>)(.*?)(</script>)",
    re.IGNORECASE | re.DOTALL,
)
BABEL_SCRIPT_RE = re.compile(
    r"<script\b[^>]*\btype=[\"']text/babel[\"']", re.IGNORECASE
)
ENTRY_POINT_RE = re.compile(r"export\s+default\s+function\s+App\b", re.IGNORECASE)
EXTERNAL_RE = re.compile(r"\?external=([^\"'&\s]+)")
DEPS_RE = re.compile(r"\?deps=([^\"'&\s]*)")


@dataclass(frozen=True)
class Span:
    start: int
    end: int


def find_import_map(text: str) -> re.Match | None:
    """Locate the import map ``<script>`` block.

    Group 1 is the opening tag, group 2 the JSON body, group 3 the closing tag.
    """
    return IMPORT_MAP_RE.search(text)


def dependency_version_re(dependency: str) -> re.Pattern:
    """Pattern matching ``<dependency>@<version>`` with the version in group 1.

    The lookbehind keeps ``react`` from matching inside ``preact@`` or
    ``my-react@``; ``react-dom@`` never matches because ``@`` must follow
    the name directly.
    """
    return re.compile(
        r"(?<![\w\-])" + re.escape(dependency) + r"@(" + VERSION_PATTERN + r")"
    )


def import_map_entry_re(dependency: str) -> re.Pattern:
    """Pattern for the ``"<dependency>": "<url>"`` entry of an import map."""
    return re.compile(r"[\"']" + re.escape(dependency) + r"[\"']\s*:\s*[\"']([^\"']*)[\"']")


def _match_close(text: str, start: int, open_char: str, close_char: str) -> int:
    """Index just past the bracket that closes the one at ``start``, or -1."""
    depth = 0
    for i in range(start, len(text)):
        char = text[i]
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return i + 1
    return -1


BODY_OPEN_RE = re.compile(r"\s*(?:=>\s*)?\{")


def find_function_block(text: str, name: str) -> Span | None:
    """Find a top-level component definition and its brace-matched body.

    Supports ``function Name(...) {`` and ``const Name = (...) => {``.
    The parameter list is paren-matched first so destructured props such as
    ``({ isOn, onToggle })`` are never mistaken for the body. Brackets are
    counted literally; component sources rarely carry unbalanced brackets
    inside strings.
    """
    escaped = re.escape(name)
    pattern = re.compile(
        r"function\s+" + escaped + r"\s*(?=\()"
        r"|const\s+" + escaped + r"\s*=\s*(?=\()"
        r"|const\s+" + escaped + r"\s*=\s*\w+\s*(?==>)"
    )
    match = pattern.search(text)
    if not match:
        return None

    pos = match.end()
    if text[pos] == "(":
        pos = _match_close(text, pos, "(", ")")
        if pos == -1:
            return None

    body = BODY_OPEN_RE.match(text, pos)
    if not body:
        return None

    end = _match_close(text, body.end() - 1, "{", "}")
    if end == -1:
        return None
    return Span(match.start(), end)


class ExtractionRule(ABC):
    """A single named fact pulled out of an artifact."""

    name: str = ""

    @abstractmethod
    def extract(self, text: str):
        ...


class VersionRule(ExtractionRule):
    """Declared version of one dependency.

    The import map entry keyed by the dependency wins; otherwise the first
    loose ``<dependency>@<version>`` anywhere in the document is used.
    """

    def __init__(self, dependency: str):
        self.name = dependency
        self.dependency = dependency
        self._version_re = dependency_version_re(dependency)
        self._entry_re = import_map_entry_re(dependency)

    def extract(self, text: str) -> str | None:
        block = find_import_map(text)
        if block:
            entry = self._entry_re.search(block.group(2))
            if entry:
                match = self._version_re.search(entry.group(1))
                if match:
                    return match.group(1)

        match = self._version_re.search(text)
        return match.group(1) if match else None


class PatternRule(ExtractionRule):
    """Boolean presence check of a regular expression."""

    def __init__(self, name: str, pattern: re.Pattern):
        self.name = name
        self.pattern = pattern

    def extract(self, text: str) -> bool:
        return self.pattern.search(text) is not None


class CaptureRule(ExtractionRule):
    """First captured value of a regular expression, or None."""

    def __init__(self, name: str, pattern: re.Pattern):
        self.name = name
        self.pattern = pattern

    def extract(self, text: str) -> str | None:
        match = self.pattern.search(text)
        return match.group(1) if match else None


class ComponentRule(ExtractionRule):
    """Version tag of an embedded component, keyed on a marker in its body."""

    def __init__(self, component: str, v2_marker: str):
        self.name = component
        self.component = component
        self.v2_marker = v2_marker

    def extract(self, text: str) -> str | None:
        span = find_function_block(text, self.component)
        if span is None:
            return None
        body = text[span.start:span.end]
        return "v2" if self.v2_marker in body else "v1"


class TemplateFingerprint:
    """Structural fingerprint: the template matches when any marker is present."""

    def __init__(self, template_type: TemplateType, any_of: list[re.Pattern]):
        self.template_type = template_type
        self.any_of = any_of

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.any_of)


PATTERN_RULES: list[ExtractionRule] = [
    PatternRule("has_import_map", IMPORT_MAP_RE),
    PatternRule("has_babel_script", BABEL_SCRIPT_RE),
    PatternRule("uses_external", re.compile(r"\?external=")),
    PatternRule("uses_deps", re.compile(r"\?deps=")),
    CaptureRule("external_value", EXTERNAL_RE),
]

COMPONENT_RULES: list[ComponentRule] = [
    ComponentRule("VibesSwitch", v2_marker="useMobile"),
]

# Checked in order; the first match wins.
TEMPLATE_FINGERPRINTS: list[TemplateFingerprint] = [
    TemplateFingerprint(
        TemplateType.SELL,
        any_of=[
            re.compile(r"\buseTenant\b"),
            re.compile(r"\bClerkProvider\b"),
            re.compile(r"__CLERK_PUBLISHABLE_KEY__"),
        ],
    ),
    TemplateFingerprint(
        TemplateType.VIBES_BASIC,
        any_of=[IMPORT_MAP_RE, BABEL_SCRIPT_RE],
    ),
]


def detect_template_type(text: str) -> TemplateType:
    for fingerprint in TEMPLATE_FINGERPRINTS:
        if fingerprint.matches(text):
            return fingerprint.template_type
    return TemplateType.UNKNOWN
