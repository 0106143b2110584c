from __future__ import annotations

import logging
import os
import shlex
import subprocess
import threading
from pathlib import Path
from typing import Callable, Mapping, Sequence

from .catalog import Catalog
from .errors import OutOfRangeError, RenderFailedError, RendererBusyError, RenderUnavailableError

logger = logging.getLogger(__name__)

PATH_PLACEHOLDER = "{path}"


def build_command(command: str | Sequence[str], image_path: Path) -> list[str]:
    """Renderer argv for one picture: `{path}` is substituted, otherwise the path is appended."""
    args = shlex.split(command) if isinstance(command, str) else list(command)
    if not args:
        raise RenderUnavailableError("no renderer command configured")

    path = str(image_path)
    if any(PATH_PLACEHOLDER in arg for arg in args):
        return [arg.replace(PATH_PLACEHOLDER, path) for arg in args]
    return [*args, path]


class RendererGateway:
    """The single way a picture reaches the panel.

    Renders run one at a time. The renderer is an external program that gets
    the absolute path of a ready-to-show picture and reports success through
    its exit status.
    """

    def __init__(
        self,
        catalog: Catalog,
        command: str | Sequence[str],
        *,
        timeout: float | None = None,
        busy_timeout: float = 0,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._catalog = catalog
        self._command = command
        self._timeout = timeout
        self._busy_timeout = busy_timeout
        self._env = {**os.environ, **env} if env else None
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def display(
        self,
        index: int,
        snapshot: Sequence[str] | None = None,
        *,
        wait: bool = True,
        on_success: Callable[[], object] | None = None,
    ) -> Path:
        snapshot = self._catalog.snapshot() if snapshot is None else snapshot
        if not 0 <= index < len(snapshot):
            raise OutOfRangeError(f"index {index} outside catalog of {len(snapshot)}")
        image_path = self._catalog.path_for(snapshot[index])

        acquired = self._lock.acquire() if wait else self._lock.acquire(timeout=self._busy_timeout)
        if not acquired:
            raise RendererBusyError("another picture is being rendered")
        try:
            self._run(image_path)
            if on_success is not None:
                on_success()
        finally:
            self._lock.release()
        return image_path

    def _run(self, image_path: Path) -> None:
        args = build_command(self._command, image_path)
        logger.info("rendering %s", image_path)
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                env=self._env,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            logger.warning("renderer timed out after %ss for %s", exc.timeout, image_path)
            raise RenderFailedError(f"renderer timed out after {exc.timeout}s") from exc
        except OSError as exc:
            logger.warning("renderer %s could not be started: %s", args[0], exc)
            raise RenderUnavailableError(f"cannot start renderer {args[0]}: {exc}") from exc

        if result.returncode != 0:
            diagnostic = (result.stderr or result.stdout or "").strip()
            logger.warning("renderer exited with %s for %s: %s", result.returncode, image_path, diagnostic)
            raise RenderFailedError(f"renderer exited with status {result.returncode}: {diagnostic}")
        logger.info("displayed %s", image_path)
