"""Show one picture on the attached Inky panel.

This is the default renderer command: the server runs it once per picture
with the absolute path of a normalized image and reads the exit status.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from PIL import Image, ImageOps

logger = logging.getLogger("slideframe.inky_render")


def display(image_path: Path, saturation: float) -> None:
    from inky.auto import auto

    inky_display = auto()
    logger.info("initialised display with resolution: %s", inky_display.resolution)

    with Image.open(image_path) as im:
        logger.info("loaded image from path: %s", image_path)
        frame = ImageOps.pad(im.convert("RGB"), inky_display.resolution, Image.Resampling.LANCZOS, color="white")
        try:
            inky_display.set_image(frame, saturation=saturation)
        except TypeError:
            # Monochrome and red/yellow boards take no saturation argument.
            inky_display.set_image(frame)
        inky_display.show()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--file", required=True, type=Path, help="picture to display")
    parser.add_argument("--saturation", type=float, default=0.5)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s", stream=sys.stderr)
    try:
        display(args.file, args.saturation)
    except Exception as exc:
        logger.error("could not display %s: %s", args.file, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
