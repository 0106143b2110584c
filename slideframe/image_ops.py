from __future__ import annotations

import logging
import os
import uuid
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .config import PANEL_HEIGHT, PANEL_WIDTH
from .errors import DecodeError, StoreError

logger = logging.getLogger(__name__)

PanelSize = tuple[int, int]

DEFAULT_SUFFIX = ".png"
# Formats that round-trip a full-size RGB canvas.
STORED_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp", ".tif", ".tiff"})


def _decode(raw: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(raw))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError, SyntaxError, ValueError) as exc:
        raise DecodeError(f"not a usable image: {exc}") from exc
    return image


def padded_size(src_w: int, src_h: int, panel_size: PanelSize = (PANEL_WIDTH, PANEL_HEIGHT)) -> PanelSize:
    """Smallest canvas with the panel's aspect ratio that holds a src_w x src_h image."""
    panel_w, panel_h = panel_size
    if src_w <= 0 or src_h <= 0:
        raise ValueError("image dimensions must be positive")

    # Compare src_w/src_h against panel_w/panel_h without float division.
    if src_w * panel_h > panel_w * src_h:
        # Wider than the panel: keep width, pad height.
        return src_w, round(src_w * panel_h / panel_w)
    # Taller than (or as tall as) the panel: keep height, pad width.
    return round(src_h * panel_w / panel_h), src_h


def orient(image: Image.Image) -> Image.Image:
    """Turn portrait pictures on their side so they use more of the landscape panel."""
    if image.width < image.height:
        return image.transpose(Image.Transpose.ROTATE_90)
    return image


def pad_to_aspect(image: Image.Image, panel_size: PanelSize = (PANEL_WIDTH, PANEL_HEIGHT)) -> Image.Image:
    canvas_w, canvas_h = padded_size(image.width, image.height, panel_size)
    canvas = Image.new("RGB", (canvas_w, canvas_h), (255, 255, 255))

    offset_x = (canvas_w - image.width) // 2
    offset_y = (canvas_h - image.height) // 2

    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        source = image.convert("RGBA")
        canvas.paste(source, (offset_x, offset_y), source)
    else:
        canvas.paste(image.convert("RGB"), (offset_x, offset_y))
    return canvas


def normalize(raw: bytes, panel_size: PanelSize = (PANEL_WIDTH, PANEL_HEIGHT)) -> Image.Image:
    """Decode an upload, orient it and letterbox it onto a white canvas.

    The source pixels are never scaled or cropped; only padding is added so the
    result matches the panel's aspect ratio. Raises DecodeError when the bytes
    are not a readable image.
    """
    image = orient(_decode(raw))
    return pad_to_aspect(image, panel_size)


def stored_name(suggested: str | None) -> str:
    """Identifier a normalized upload is stored under."""
    # Browsers on Windows may send the full client path.
    name = Path((suggested or "").replace("\\", "/")).name
    stem = Path(name).stem
    suffix = Path(name).suffix.lower()

    if not stem or name.startswith("."):
        stem = str(uuid.uuid4())
    if suffix not in STORED_SUFFIXES or Image.registered_extensions().get(suffix) not in Image.SAVE:
        suffix = DEFAULT_SUFFIX
    return f"{stem}{suffix}"


def save_picture(image: Image.Image, directory: Path, name: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / name
    tmp_path = directory / f".{name}.{uuid.uuid4().hex}.tmp"

    image_format = Image.registered_extensions().get(target.suffix.lower(), "PNG")
    try:
        image.save(tmp_path, format=image_format)
        os.replace(tmp_path, target)
    except (OSError, ValueError, KeyError) as exc:
        tmp_path.unlink(missing_ok=True)
        logger.warning("could not store picture %s: %s", target, exc)
        raise StoreError(f"cannot store {name}: {exc}") from exc
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("stored picture %s (%dx%d)", target, image.width, image.height)
    return target
