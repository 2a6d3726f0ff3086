"""Configuration management (vibes-update.toml parsing + defaults)."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from vibes_update.compare.versions import version_sort_key

CONFIG_FILENAME = "vibes-update.toml"
PLUGIN_ROOT_ENV = "VIBES_PLUGIN_ROOT"
INSTALLED_PLUGIN_DIR = Path.home() / ".claude" / "plugins" / "cache" / "vibes-cli" / "vibes"


@dataclass
class AnalyzeConfig:
    tracked: list[str] = field(
        default_factory=lambda: [
            "react",
            "react-dom",
            "use-vibes",
            "call-ai",
            "use-fireproof",
        ]
    )
    large_file_mb: float = 10.0


@dataclass
class TargetConfig:
    plugin_root: Path | None = None
    working_cache: str = "cache/import-map.json"
    shipped_cache: str = "skills/vibes/cache/import-map.json"
    required_keys: list[str] = field(default_factory=lambda: ["react", "use-vibes"])


@dataclass
class UpdaterConfig:
    """Complete updater configuration."""

    exclude: list[str] = field(
        default_factory=lambda: [
            "node_modules/",
        ]
    )
    analyze: AnalyzeConfig = field(default_factory=AnalyzeConfig)
    target: TargetConfig = field(default_factory=TargetConfig)

    @property
    def large_file_threshold(self) -> int:
        return int(self.analyze.large_file_mb * 1024 * 1024)


def load_config(project_path: Path | None = None) -> UpdaterConfig:
    """Load configuration from vibes-update.toml if present, otherwise return defaults."""
    config = UpdaterConfig()

    if project_path is None:
        project_path = Path.cwd()

    config_file = project_path / CONFIG_FILENAME
    if not config_file.exists():
        return config

    with open(config_file, "rb") as f:
        data = tomllib.load(f)

    if "general" in data:
        gen = data["general"]
        if "exclude" in gen:
            config.exclude = gen["exclude"]

    if "analyze" in data:
        a = data["analyze"]
        if "tracked" in a:
            config.analyze.tracked = a["tracked"]
        if "large_file_mb" in a:
            config.analyze.large_file_mb = a["large_file_mb"]

    if "target" in data:
        t = data["target"]
        if "plugin_root" in t:
            root = Path(t["plugin_root"]).expanduser()
            if not root.is_absolute():
                root = project_path / root
            config.target.plugin_root = root
        for attr in ("working_cache", "shipped_cache", "required_keys"):
            if attr in t:
                setattr(config.target, attr, t[attr])

    return config


def find_installed_plugin(base: Path | None = None) -> Path | None:
    """Return the newest installed plugin version directory, if any."""
    base = base or INSTALLED_PLUGIN_DIR
    if not base.is_dir():
        return None

    versions = [
        entry for entry in base.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    ]
    if not versions:
        return None

    return max(versions, key=lambda p: version_sort_key(p.name))


def resolve_plugin_root(
    config: UpdaterConfig,
    override: Path | str | None = None,
) -> Path:
    """Pick the plugin root that holds the import map cache.

    Priority: explicit override > VIBES_PLUGIN_ROOT > config file >
    newest installed plugin > current directory.
    """
    if override:
        return Path(override).expanduser().resolve()

    env_root = os.environ.get(PLUGIN_ROOT_ENV)
    if env_root:
        return Path(env_root).expanduser().resolve()

    if config.target.plugin_root:
        return config.target.plugin_root.resolve()

    installed = find_installed_plugin()
    if installed:
        return installed

    return Path.cwd()
