"""Lock file guarding a target directory against overlapping scans."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .constants import LOCK_FILENAME
from .errors import ConcurrencyError

LOGGER = logging.getLogger(__name__)


class RunLock:
    """Exclusive run guard backed by `<target_directory>/link_scanner_lock_file`.

    The marker is a plain file, so it is visible to other processes and
    outlives a crashed run until `clear()` removes it. A disabled lock
    acquires and releases without touching the filesystem.
    """

    def __init__(self, target_directory: str | Path, *, enabled: bool = True) -> None:
        self.path = Path(target_directory) / LOCK_FILENAME
        self.enabled = enabled
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def is_locked(self) -> bool:
        """Return True when any process currently holds the marker."""

        return self.path.exists()

    def acquire(self) -> None:
        if not self.enabled:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            # O_EXCL makes create-if-absent atomic across processes.
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as exc:
            raise ConcurrencyError(
                f"Lock file `{self.path}` already exists, maybe a scan is already "
                "in progress. If not, remove it manually or run with --force"
            ) from exc

        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(f"{os.getpid()}\n")
        self._held = True
        LOGGER.debug("Acquired run lock %s", self.path)

    def release(self) -> None:
        if not self._held:
            return
        self.path.unlink(missing_ok=True)
        self._held = False
        LOGGER.debug("Released run lock %s", self.path)

    def clear(self) -> bool:
        """Remove a stale marker left by another run. Returns True if one existed."""

        existed = self.path.exists()
        self.path.unlink(missing_ok=True)
        if existed:
            LOGGER.info("Removed stale lock file %s", self.path)
        return existed

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


__all__ = ["RunLock"]
