from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from .errors import CatalogReadError, UnknownPictureError

logger = logging.getLogger(__name__)


class Catalog:
    """Cached listing of the pictures directory.

    The directory is the only source of truth: pictures are added or removed
    by writing or deleting files and calling refresh(). Each refresh publishes
    a new immutable tuple, so readers always see one complete listing.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()
        # Held across list and publish.
        self._refresh_lock = threading.Lock()
        self._snapshot: tuple[str, ...] = ()

    def refresh(self) -> tuple[str, ...]:
        with self._refresh_lock:
            return self._refresh()

    def _refresh(self) -> tuple[str, ...]:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with os.scandir(self.directory) as entries:
                names = sorted(
                    entry.name
                    for entry in entries
                    if not entry.name.startswith(".") and not entry.is_dir()
                )
        except OSError as exc:
            logger.warning("could not read pictures directory %s: %s", self.directory, exc)
            raise CatalogReadError(f"cannot read {self.directory}: {exc}") from exc

        snapshot = tuple(names)
        with self._lock:
            self._snapshot = snapshot
        return snapshot

    def snapshot(self) -> tuple[str, ...]:
        with self._lock:
            return self._snapshot

    def path_for(self, identifier: str) -> Path:
        """Absolute path of a picture; rejects anything that is not a bare file name."""
        if not identifier or Path(identifier).name != identifier or identifier in (".", ".."):
            raise UnknownPictureError(f"invalid picture name: {identifier!r}")
        return (self.directory / identifier).resolve()
