"""Error taxonomy for the update pipeline."""

from __future__ import annotations

from pathlib import Path


class UpdaterError(Exception):
    """Base class for every failure the pipeline reports per file."""


class ArtifactNotFoundError(UpdaterError):
    """The artifact path does not resolve to a readable file."""

    def __init__(self, path: Path | str, reason: str = ""):
        self.path = Path(path)
        message = f"File not found: {path}"
        if reason:
            message = f"Could not read file {path}: {reason}"
        super().__init__(message)


class ParseFailureError(UpdaterError):
    """The artifact carries no recognizable version declarations."""


class TargetUnavailableError(UpdaterError):
    """Neither cache tier holds a usable target configuration."""


class UpdateExecutionError(UpdaterError):
    """A single update definition could not be applied."""


class NoBackupFoundError(UpdaterError):
    """Rollback was requested but nothing can be restored."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"No backup file found for: {path}")
