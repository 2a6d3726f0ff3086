"""Version parsing and ordering for CDN-pinned dependencies.

Versions come from URLs such as ``https://esm.sh/use-vibes@0.19.0-dev-preview-50``.
A version is split into a numeric dotted base and an optional pre-release
suffix (anything after the first ``-``). Ordering compares bases component
by component, padding the shorter one with zeros. When the bases match, a
pre-release build sorts *after* its stable counterpart: an app pinned to
``0.19.0-dev`` must be moved onto ``0.19.0`` rather than considered ahead of it.
"""

from __future__ import annotations

import re

VERSION_PATTERN = r"\d+(?:\.\d+)*(?:-[0-9A-Za-z][0-9A-Za-z.\-]*)?"

_URL_VERSION_RE = re.compile(r"@(" + VERSION_PATTERN + r")")


def extract_version(url: str | None) -> str | None:
    """Return the version after the first ``@`` in a URL-like string, if any."""
    if not url:
        return None
    match = _URL_VERSION_RE.search(url)
    return match.group(1) if match else None


def split_version(version: str) -> tuple[tuple[int, ...], str | None]:
    """Split ``"1.2.3-dev.4"`` into ``((1, 2, 3), "dev.4")``.

    Non-numeric base components count as zero.
    """
    base, sep, suffix = version.strip().partition("-")
    parts = []
    for piece in base.split("."):
        digits = re.match(r"\d+", piece)
        parts.append(int(digits.group(0)) if digits else 0)
    return tuple(parts), (suffix if sep else None)


def is_prerelease(version: str | None) -> bool:
    if not version:
        return False
    return split_version(version)[1] is not None


def compare_base(v1: str, v2: str) -> int:
    """Compare only the numeric bases of two versions."""
    parts1, _ = split_version(v1)
    parts2, _ = split_version(v2)
    width = max(len(parts1), len(parts2))
    for i in range(width):
        p1 = parts1[i] if i < len(parts1) else 0
        p2 = parts2[i] if i < len(parts2) else 0
        if p1 < p2:
            return -1
        if p1 > p2:
            return 1
    return 0


def compare_versions(v1: str | None, v2: str | None) -> int:
    """Order two versions for upgrade detection.

    Returns -1 when ``v1`` is older than ``v2`` (upgrade to ``v2``), 0 when
    they are equivalent, and 1 when ``v1`` is newer. A missing side compares
    equal.

    >>> compare_versions("0.18.9", "0.19.0")
    -1
    >>> compare_versions("0.19.0-dev", "0.19.0")
    1
    >>> compare_versions("0.19.0-dev", "0.19.0-preview-2")
    0
    """
    if not v1 or not v2:
        return 0

    base = compare_base(v1, v2)
    if base != 0:
        return base

    v1_pre = is_prerelease(v1)
    v2_pre = is_prerelease(v2)
    if v1_pre and not v2_pre:
        return 1
    if v2_pre and not v1_pre:
        return -1
    return 0


def version_sort_key(version: str):
    """Key usable with ``sorted`` that follows :func:`compare_versions`."""
    parts, suffix = split_version(version)
    # Trailing zeros do not change ordering ("1.2" == "1.2.0").
    trimmed = list(parts)
    while trimmed and trimmed[-1] == 0:
        trimmed.pop()
    return (tuple(trimmed), 1 if suffix is not None else 0)
