"""Advisory lock markers: freeze published assets.

Once ``<lock_path>/<key>.lock`` exists, the publisher treats the asset as
immutable and skips every existence and freshness check for it.  Markers
are never removed here; delete them by hand to republish.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .exceptions import LockError

log = logging.getLogger("assetpub")

LOCK_SUFFIX = ".lock"


class LockManager:
    """Lock markers stored as empty files under *lock_path*."""

    def __init__(self, lock_path: str | os.PathLike) -> None:
        self.lock_path = os.fspath(lock_path)

    def marker(self, key: str) -> str:
        return os.path.join(self.lock_path, key + LOCK_SUFFIX)

    def is_locked(self, key: str) -> bool:
        return os.path.exists(self.marker(key))

    def ensure_dir(self) -> None:
        """Create the lock directory if missing; failures are only logged."""
        try:
            os.makedirs(self.lock_path, exist_ok=True)
        except OSError as exc:
            log.warning("[lock] cannot create lock directory %s: %s", self.lock_path, exc)

    def lock(self, key: str) -> None:
        """Create or touch the marker for *key*.

        Raises :class:`LockError` if the directory or marker cannot be
        written.
        """
        try:
            os.makedirs(self.lock_path, exist_ok=True)
            Path(self.marker(key)).touch()
        except OSError as exc:
            raise LockError(f"Cannot lock {key!r} in {self.lock_path}: {exc}") from exc
        log.debug("[lock] %s", key)

    def list(self) -> list[str]:
        """Sorted keys of all existing markers."""
        try:
            names = os.listdir(self.lock_path)
        except FileNotFoundError:
            return []
        return sorted(n[:-len(LOCK_SUFFIX)] for n in names if n.endswith(LOCK_SUFFIX))
