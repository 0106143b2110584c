from __future__ import annotations

import logging
from pathlib import Path

from . import config
from .catalog import Catalog
from .display_state import CurrentPicture, DisplayState
from .errors import CatalogReadError, UnknownPictureError
from .image_ops import PanelSize, normalize, save_picture, stored_name
from .renderer import RendererGateway
from .scheduler import RotationScheduler

logger = logging.getLogger(__name__)


class PictureFrame:
    """Operations the web layer performs on the frame."""

    def __init__(
        self,
        catalog: Catalog,
        state: DisplayState,
        gateway: RendererGateway,
        scheduler: RotationScheduler,
        panel_size: PanelSize = (config.PANEL_WIDTH, config.PANEL_HEIGHT),
    ) -> None:
        self.catalog = catalog
        self.state = state
        self.gateway = gateway
        self.scheduler = scheduler
        self.panel_size = panel_size

    @classmethod
    def from_config(cls) -> PictureFrame:
        catalog = Catalog(config.PICTURES_DIR)
        state = DisplayState(catalog, config.STATE_FILE)
        gateway = RendererGateway(
            catalog,
            config.RENDER_COMMAND,
            timeout=config.RENDER_TIMEOUT_SECONDS,
            busy_timeout=config.RENDER_BUSY_SECONDS,
        )
        scheduler = RotationScheduler(
            catalog,
            state,
            gateway,
            poll_seconds=config.POLL_SECONDS,
            rotation_seconds=config.ROTATION_SECONDS,
            start_hour=config.ACTIVE_START_HOUR,
            end_hour=config.ACTIVE_END_HOUR,
        )
        return cls(catalog, state, gateway, scheduler, (config.PANEL_WIDTH, config.PANEL_HEIGHT))

    def start(self) -> None:
        self.state.load()
        try:
            self.catalog.refresh()
        except CatalogReadError:
            # The scheduler retries on every wake.
            pass
        self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()

    def list_pictures(self) -> list[str]:
        return list(self.catalog.refresh())

    def ingest(self, raw: bytes, suggested_name: str | None) -> str:
        image = normalize(raw, self.panel_size)
        identifier = stored_name(suggested_name)
        save_picture(image, self.catalog.directory, identifier)
        self.catalog.refresh()
        return identifier

    def remove(self, identifier: str) -> None:
        path = self.catalog.path_for(identifier)
        if identifier not in self.catalog.refresh():
            raise UnknownPictureError(f"no picture named {identifier!r}")
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise UnknownPictureError(f"no picture named {identifier!r}") from exc
        logger.info("removed picture %s", identifier)
        self.catalog.refresh()
        self.state.revalidate()

    def display_now(self, identifier: str) -> Path:
        snapshot = self.catalog.refresh()
        try:
            index = snapshot.index(identifier)
        except ValueError as exc:
            raise UnknownPictureError(f"no picture named {identifier!r}") from exc

        return self.gateway.display(
            index,
            snapshot,
            wait=False,
            on_success=lambda: self.state.set_current(index, snapshot),
        )

    def current(self) -> CurrentPicture:
        self.catalog.refresh()
        return self.state.current()
