"""Update registry and executor."""

from __future__ import annotations

import difflib
import logging
from collections.abc import Mapping

from vibes_update.core.errors import UpdateExecutionError
from vibes_update.core.models import (
    AnalysisResult,
    AppliedUpdate,
    AvailableUpdate,
    ComparisonResult,
    ExecutionResult,
    FailedUpdate,
    UpdateResult,
)
from vibes_update.updates.base import UpdateDefinition
from vibes_update.updates.components import ComponentReplaceUpdate
from vibes_update.updates.external import AddExternalUpdate, DepsToExternalUpdate
from vibes_update.updates.import_map import ImportMapUpdate

logger = logging.getLogger("vibes_update.updates")


def _build_registry(*definitions: UpdateDefinition) -> dict[str, UpdateDefinition]:
    return {d.id: d for d in definitions}


REGISTRY: dict[str, UpdateDefinition] = _build_registry(
    ImportMapUpdate(),
    DepsToExternalUpdate(),
    AddExternalUpdate(),
    ComponentReplaceUpdate(
        "vibes-switch",
        component="VibesSwitch",
        name="Update VibesSwitch component",
        description="Update to latest VibesSwitch with improved animations",
    ),
)


def get_update_by_id(
    update_id: str,
    registry: Mapping[str, UpdateDefinition] | None = None,
) -> UpdateDefinition | None:
    registry = REGISTRY if registry is None else registry
    return registry.get(update_id)


def get_applicable_updates(
    comparison: ComparisonResult,
    registry: Mapping[str, UpdateDefinition] | None = None,
) -> list[UpdateDefinition]:
    """Definitions backing each available update, in comparison order."""
    definitions = []
    for update in comparison.available_updates:
        definition = get_update_by_id(update.id, registry)
        if definition is not None:
            definitions.append(definition)
    return definitions


def make_diff(before: str, after: str, label: str = "artifact") -> str:
    """Unified diff between two versions of the artifact text."""
    return "\n".join(
        difflib.unified_diff(
            before.splitlines(),
            after.splitlines(),
            fromfile=f"a/{label}",
            tofile=f"b/{label}",
            n=1,
            lineterm="",
        )
    )


def execute_update(
    definition: UpdateDefinition,
    text: str,
    analysis: AnalysisResult,
    comparison: ComparisonResult,
) -> UpdateResult:
    """Run one definition; failures are returned, never raised."""
    try:
        new_text = definition.apply(text, analysis, comparison)
    except UpdateExecutionError as e:
        return UpdateResult(success=False, error=str(e))

    return UpdateResult(
        success=True,
        html=new_text,
        diff=make_diff(text, new_text, analysis.path.name),
    )


def execute_updates(
    updates: list[AvailableUpdate],
    text: str,
    analysis: AnalysisResult,
    comparison: ComparisonResult,
    registry: Mapping[str, UpdateDefinition] | None = None,
) -> ExecutionResult:
    """Apply updates in order, threading each output into the next.

    A failing update is recorded and skipped; later updates still run on the
    latest successful text.
    """
    result = ExecutionResult(html=text)

    for update in updates:
        definition = get_update_by_id(update.id, registry)
        if definition is None:
            result.failed.append(FailedUpdate(update.id, update.name, "Update not found in registry"))
            continue

        outcome = execute_update(definition, result.html, analysis, comparison)
        if outcome.success:
            result.html = outcome.html
            result.applied.append(AppliedUpdate(update.id, update.name, outcome.diff))
            logger.debug("Applied %s to %s", update.id, analysis.path.name)
        else:
            result.failed.append(FailedUpdate(update.id, update.name, outcome.error or "Unknown error"))
            logger.info("Update %s failed on %s: %s", update.id, analysis.path.name, outcome.error)

    return result
