"""Timestamped backups beside the artifact, and rollback."""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

from vibes_update.core.errors import NoBackupFoundError
from vibes_update.core.models import BackupEntry

logger = logging.getLogger("vibes_update.backup")

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
# Both "app.20251231-120000.bak.html" and the legacy "app.bak.html".
BACKUP_NAME_RE = re.compile(r"\.bak(\.[^.]+)?$")


def is_backup_file(name: str) -> bool:
    return BACKUP_NAME_RE.search(name) is not None


def backup_name(artifact: Path, timestamp: str) -> str:
    return f"{artifact.stem}.{timestamp}.bak{artifact.suffix}"


def legacy_backup_name(artifact: Path) -> str:
    return f"{artifact.stem}.bak{artifact.suffix}"


def atomic_write(path: Path, content: str) -> None:
    """Replace ``path`` in one step: write a sibling temp file, then rename."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        shutil.copymode(path, tmp_name)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class BackupManager:
    """Creates, lists and restores backups named ``<stem>.<YYYYMMDD-HHMMSS>.bak<ext>``."""

    def __init__(self, now: Callable[[], datetime] = datetime.now):
        self.now = now

    def create(self, artifact: Path) -> Path:
        """Copy the artifact byte for byte to a new timestamped backup."""
        stamp = self.now().replace(microsecond=0)
        latest = self._latest_stamp(artifact)
        if latest is not None:
            # The new backup must sort after every existing one, gaps included.
            stamp = max(stamp, latest + timedelta(seconds=1))
        backup = artifact.with_name(backup_name(artifact, stamp.strftime(TIMESTAMP_FORMAT)))

        shutil.copyfile(artifact, backup)
        logger.info("Backup created: %s", backup)
        return backup

    def _latest_stamp(self, artifact: Path) -> datetime | None:
        stamps = [e.timestamp for e in self.list_backups(artifact) if e.timestamp]
        if not stamps:
            return None
        return datetime.strptime(max(stamps), TIMESTAMP_FORMAT)

    def list_backups(self, artifact: Path) -> list[BackupEntry]:
        """Timestamped backups newest first, then the legacy backup if present."""
        directory = artifact.parent
        if not directory.is_dir():
            return []

        pattern = re.compile(
            "^" + re.escape(artifact.stem) + r"\.(\d{8}-\d{6})\.bak" + re.escape(artifact.suffix) + "$"
        )
        entries = []
        for candidate in directory.iterdir():
            match = pattern.match(candidate.name)
            if match and candidate.is_file():
                entries.append(BackupEntry(path=candidate, timestamp=match.group(1)))
        entries.sort(key=lambda e: e.timestamp, reverse=True)

        legacy = directory / legacy_backup_name(artifact)
        if legacy.is_file():
            entries.append(BackupEntry(path=legacy, timestamp=None))
        return entries

    def find_latest(self, artifact: Path) -> Path | None:
        entries = self.list_backups(artifact)
        return entries[0].path if entries else None

    def restore(self, artifact: Path) -> Path:
        """Overwrite the artifact with its most recent backup; return the backup used."""
        backup = self.find_latest(artifact)
        if backup is None:
            raise NoBackupFoundError(artifact)

        shutil.copyfile(backup, artifact)
        logger.info("Restored %s from %s", artifact, backup)
        return backup
