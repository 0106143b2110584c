from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, NamedTuple, Sequence

from .catalog import Catalog
from .errors import EmptyCatalogError, OutOfRangeError

logger = logging.getLogger(__name__)


class CurrentPicture(NamedTuple):
    index: int | None
    identifier: str | None
    ok: bool


class DisplayState:
    """Which catalog entry is on the panel, and when the last rotation happened.

    The index is only meaningful together with the identifier committed with
    it: when the catalog changes underneath (a delete shifts or shrinks the
    listing) current() reports no valid picture instead of pointing at
    whatever file now sits at the old position.
    """

    def __init__(self, catalog: Catalog, state_file: Path | None = None) -> None:
        self._catalog = catalog
        self._state_file = state_file
        self._lock = threading.Lock()
        self._index: int | None = None
        self._identifier: str | None = None
        self._last_rotation: datetime | None = None

    @property
    def last_rotation(self) -> datetime | None:
        with self._lock:
            return self._last_rotation

    def current(self, snapshot: Sequence[str] | None = None) -> CurrentPicture:
        with self._lock:
            snapshot = self._catalog.snapshot() if snapshot is None else snapshot
            if self._is_valid(snapshot):
                return CurrentPicture(self._index, self._identifier, True)
            return CurrentPicture(None, None, False)

    def set_current(self, index: int, snapshot: Sequence[str] | None = None) -> str:
        with self._lock:
            snapshot = self._catalog.snapshot() if snapshot is None else snapshot
            identifier = self._validate(index, snapshot)
            self._index = index
            self._identifier = identifier
            self._save()
        return identifier

    def advance(self, snapshot: Sequence[str] | None = None) -> int:
        """Index the next rotation should show. Nothing is committed here."""
        with self._lock:
            snapshot = self._catalog.snapshot() if snapshot is None else snapshot
            if not snapshot:
                raise EmptyCatalogError("no pictures to rotate through")
            if not self._is_valid(snapshot):
                return 0
            return (self._index + 1) % len(snapshot)

    def commit_rotation(self, index: int, snapshot: Sequence[str], when: datetime) -> str:
        with self._lock:
            identifier = self._validate(index, snapshot)
            self._index = index
            self._identifier = identifier
            self._last_rotation = when
            self._save()
        return identifier

    def revalidate(self) -> bool:
        """Drop the current picture if the catalog no longer backs it."""
        with self._lock:
            if self._index is None or self._is_valid(self._catalog.snapshot()):
                return self._index is not None
            logger.info("current picture %s is gone, clearing display state", self._identifier)
            self._index = None
            self._identifier = None
            self._save()
            return False

    def _is_valid(self, snapshot: Sequence[str]) -> bool:
        index = self._index
        return index is not None and 0 <= index < len(snapshot) and snapshot[index] == self._identifier

    @staticmethod
    def _validate(index: int, snapshot: Sequence[str]) -> str:
        if not 0 <= index < len(snapshot):
            raise OutOfRangeError(f"index {index} outside catalog of {len(snapshot)}")
        return snapshot[index]

    def load(self) -> None:
        if self._state_file is None or not self._state_file.exists():
            return

        try:
            with self._state_file.open("r", encoding="utf-8") as f:
                data: dict[str, Any] = json.load(f)
            last_rotation = data.get("last_rotation")
            last_rotation = datetime.fromisoformat(last_rotation) if last_rotation else None
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("ignoring unreadable state file %s: %s", self._state_file, exc)
            return

        with self._lock:
            index = data.get("index")
            self._index = index if isinstance(index, int) and index >= 0 else None
            self._identifier = data.get("identifier") if self._index is not None else None
            self._last_rotation = last_rotation
        logger.info("restored display state: index=%s identifier=%s", self._index, self._identifier)

    def _save(self) -> None:
        if self._state_file is None:
            return

        state = {
            "index": self._index,
            "identifier": self._identifier,
            "last_rotation": self._last_rotation.isoformat() if self._last_rotation else None,
        }
        try:
            self._state_file.parent.mkdir(parents=True, exist_ok=True)
            with self._state_file.open("w", encoding="utf-8") as f:
                json.dump(state, f, indent=2)
        except OSError as exc:
            logger.warning("could not persist display state to %s: %s", self._state_file, exc)
