import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name)
    return Path(value).expanduser().resolve() if value else default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


DATA_DIR = _env_path("SLIDEFRAME_DATA_DIR", BASE_DIR / "data")
PICTURES_DIR = _env_path("SLIDEFRAME_PICTURES_DIR", DATA_DIR / "pictures")
STATE_FILE = _env_path("SLIDEFRAME_STATE_FILE", DATA_DIR / "state.json")
STATIC_DIR = _env_path("SLIDEFRAME_STATIC_DIR", BASE_DIR / "static")

PANEL_WIDTH = _env_int("SLIDEFRAME_PANEL_WIDTH", 800)
PANEL_HEIGHT = _env_int("SLIDEFRAME_PANEL_HEIGHT", 480)

ACTIVE_START_HOUR = _env_int("SLIDEFRAME_ACTIVE_START_HOUR", 8)
ACTIVE_END_HOUR = _env_int("SLIDEFRAME_ACTIVE_END_HOUR", 20)
ROTATION_SECONDS = _env_int("SLIDEFRAME_ROTATION_SECONDS", 2 * 60 * 60)
POLL_SECONDS = _env_int("SLIDEFRAME_POLL_SECONDS", 10 * 60)

RENDER_COMMAND = os.environ.get(
    "SLIDEFRAME_RENDER_COMMAND",
    f"{sys.executable} -m slideframe.inky_render --file {{path}}",
)
RENDER_TIMEOUT_SECONDS = _env_int("SLIDEFRAME_RENDER_TIMEOUT", 120)
RENDER_BUSY_SECONDS = _env_int("SLIDEFRAME_RENDER_BUSY_SECONDS", 30)

MAX_UPLOAD_BYTES = _env_int("SLIDEFRAME_MAX_UPLOAD_BYTES", 10 << 20)

HOST = os.environ.get("SLIDEFRAME_HOST", "0.0.0.0")
PORT = _env_int("SLIDEFRAME_PORT", 8080)
