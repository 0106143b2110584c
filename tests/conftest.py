from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from slideframe.catalog import Catalog
from slideframe.display_state import DisplayState
from slideframe.renderer import RendererGateway

RECORDER = """\
import sys
with open(sys.argv[1], "a", encoding="utf-8") as f:
    f.write(sys.argv[2] + "\\n")
"""

FAILING_RENDERER = [sys.executable, "-c", "import sys; sys.stderr.write('panel not found'); sys.exit(3)"]


def image_bytes(width: int, height: int, color=(200, 30, 30), fmt: str = "PNG") -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


def add_pictures(directory: Path, *names: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_bytes(image_bytes(8, 6))


@pytest.fixture
def pictures_dir(tmp_path: Path) -> Path:
    path = tmp_path / "pictures"
    path.mkdir()
    return path


@pytest.fixture
def catalog(pictures_dir: Path) -> Catalog:
    return Catalog(pictures_dir)


@pytest.fixture
def state(catalog: Catalog) -> DisplayState:
    return DisplayState(catalog)


class RenderLog:
    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def calls(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def render_log(tmp_path: Path) -> RenderLog:
    return RenderLog(tmp_path / "renders.log")


@pytest.fixture
def recording_command(tmp_path: Path, render_log: RenderLog) -> list[str]:
    script = tmp_path / "recorder.py"
    script.write_text(RECORDER, encoding="utf-8")
    return [sys.executable, str(script), str(render_log.path), "{path}"]


@pytest.fixture
def gateway(catalog: Catalog, recording_command: list[str]) -> RendererGateway:
    return RendererGateway(catalog, recording_command, timeout=30)


@pytest.fixture
def failing_gateway(catalog: Catalog) -> RendererGateway:
    return RendererGateway(catalog, FAILING_RENDERER, timeout=30)
