"""Vibes updater - bring single-file Vibes apps up to the current import map."""

from vibes_update._version import __version__
from vibes_update.analyzer.engine import Analyzer
from vibes_update.apply.processor import UpdateProcessor
from vibes_update.compare.engine import Comparator
from vibes_update.plan.planner import filter_updates, generate_plan

__all__ = [
    "__version__",
    "Analyzer",
    "Comparator",
    "UpdateProcessor",
    "filter_updates",
    "generate_plan",
]
