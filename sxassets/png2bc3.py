"""Convert a PNG image into a BC3 texture file."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence

from PIL import Image

from .bc3 import write_bc3

__all__ = ["convert", "main"]


def convert(src: str | os.PathLike[str], dst: str | os.PathLike[str]) -> tuple[int, int]:
    """Read an image, compress it to BC3 and write it; return (width, height)."""
    with Image.open(src) as image:
        rgba = image.convert("RGBA")
        width, height = rgba.size
        pixels = rgba.tobytes()
    write_bc3(dst, width, height, pixels)
    return width, height


def main(argv: Sequence[str] | None = None) -> int:
    """Command line entry: png2bc3 input.png output.bc3."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print("usage: png2bc3 input.png output.bc3", file=sys.stderr)
        return 1
    try:
        convert(args[0], args[1])
    except OSError as exc:
        print(f"[png2bc3] failed to convert {args[0]!r}: {exc}", file=sys.stderr)
        return 2
    return 0