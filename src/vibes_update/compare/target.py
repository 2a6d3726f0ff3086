"""Target configuration loading from the import map cache.

The cache is written by the sync step as JSON::

    {"lastUpdated": "...", "source": "<upstream url>", "imports": {"react": "https://esm.sh/react@19.2.1", ...}}

Two tiers are tried in order: the working cache under the plugin root, then
the default shipped with the plugin. A tier that is missing, unparseable or
structurally invalid is skipped with a warning.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from vibes_update.core.config import TargetConfig
from vibes_update.core.models import TargetConfiguration

logger = logging.getLogger("vibes_update.compare")

COMPONENTS_DIRNAME = "components"


def validate_cache_schema(cache: object, required_keys: list[str] | None = None) -> bool:
    """Check that a parsed cache holds a usable, non-empty ``imports`` mapping."""
    if required_keys is None:
        required_keys = TargetConfig().required_keys
    if not isinstance(cache, dict):
        return False
    imports = cache.get("imports")
    if not isinstance(imports, dict) or not imports:
        return False
    if not all(isinstance(v, str) for v in imports.values()):
        return False
    return any(key in imports for key in required_keys)


def load_components(cache_dir: Path) -> dict[str, str]:
    """Read cached component sources (``components/<Name>.js``) next to a cache file."""
    components_dir = cache_dir / COMPONENTS_DIRNAME
    if not components_dir.is_dir():
        return {}
    components = {}
    for source in sorted(components_dir.glob("*.js")):
        components[source.stem] = source.read_text(encoding="utf-8")
    return components


class TargetLoader:
    """Loads the target configuration from an explicit plugin root."""

    def __init__(self, plugin_root: Path, config: TargetConfig | None = None):
        self.plugin_root = Path(plugin_root)
        self.config = config or TargetConfig()

    @property
    def tiers(self) -> list[tuple[str, Path]]:
        return [
            ("working-cache", self.plugin_root / self.config.working_cache),
            ("shipped-cache", self.plugin_root / self.config.shipped_cache),
        ]

    def load(self) -> TargetConfiguration | None:
        """Return the first valid cache tier, or None if none is usable."""
        for source, cache_path in self.tiers:
            target = self._load_tier(source, cache_path)
            if target is not None:
                return target
        return None

    def _load_tier(self, source: str, cache_path: Path) -> TargetConfiguration | None:
        if not cache_path.is_file():
            logger.debug("No %s at %s", source, cache_path)
            return None

        try:
            cache = json.loads(cache_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Could not parse %s import map at %s: %s", source, cache_path, e)
            return None

        if not validate_cache_schema(cache, self.config.required_keys):
            logger.warning("%s import map has invalid structure: %s", source.capitalize(), cache_path)
            return None

        logger.debug("Loaded target configuration from %s (%s)", source, cache_path)
        return TargetConfiguration(
            imports=dict(cache["imports"]),
            source=source,
            last_updated=cache.get("lastUpdated"),
            components=load_components(cache_path.parent),
            origin=cache.get("source", ""),
        )
