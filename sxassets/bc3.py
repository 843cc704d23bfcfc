"""Reading and writing uncompressed-container BC3 (DXT5) texture files."""

from __future__ import annotations

import os
import struct
from collections.abc import Sequence
from dataclasses import dataclass

from .dxt import DxtMode, compress_dxt_block

__all__ = ["BC3_MAGIC", "BC3_VERSION", "Bc3Error", "Bc3Image", "encode_bc3", "write_bc3", "read_bc3"]

BC3_MAGIC = (ord("z") << 24) | (ord("3") << 16) | (ord("c") << 8) | ord("b")
BC3_VERSION = 1

_HEADER = struct.Struct("<4I")
_BLOCK_BYTES = 16


class Bc3Error(Exception):
    """Raised when a BC3 file cannot be read or is malformed."""


def _block_counts(width: int, height: int) -> tuple[int, int]:
    return (width + 3) // 4, (height + 3) // 4


@dataclass(frozen=True)
class Bc3Image:
    """A BC3-compressed image: dimensions and the raw block data."""

    width: int
    height: int
    data: bytes

    @property
    def num_blocks(self) -> int:
        bx, by = _block_counts(self.width, self.height)
        return bx * by


def _check_dimensions(width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise ValueError(f"invalid image size {width}x{height}")


def encode_bc3(width: int, height: int, rgba: Sequence[int]) -> bytes:
    """Compress 8-bit RGBA pixels into BC3 blocks in row-major block order.

    Blocks that reach past the image edge repeat the border pixels.
    """
    _check_dimensions(width, height)
    data = bytes(rgba)
    if len(data) != 4 * width * height:
        raise ValueError(f"expected {4 * width * height} bytes of RGBA data, got {len(data)}")

    bx, by = _block_counts(width, height)
    out = bytearray()
    for block_y in range(by):
        rows = [min(4 * block_y + jj, height - 1) for jj in range(4)]
        for block_x in range(bx):
            cols = [min(4 * block_x + ii, width - 1) for ii in range(4)]
            block = bytearray()
            for y in rows:
                for x in cols:
                    offset = 4 * (width * y + x)
                    block += data[offset:offset + 4]
            out += compress_dxt_block(block, True, DxtMode.HIGHQUAL)
    return bytes(out)


def write_bc3(path: str | os.PathLike[str], width: int, height: int, rgba: Sequence[int]) -> None:
    """Compress RGBA pixels and write them as a BC3 file."""
    blocks = encode_bc3(width, height, rgba)
    with open(path, "wb") as f:
        f.write(_HEADER.pack(BC3_MAGIC, BC3_VERSION, width, height))
        f.write(blocks)


def read_bc3(path: str | os.PathLike[str]) -> Bc3Image:
    """Read a BC3 file and return its dimensions and block data."""
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as exc:
        raise Bc3Error(f"cannot open {os.fspath(path)!r}") from exc

    if len(raw) < _HEADER.size:
        raise Bc3Error(f"{os.fspath(path)!r}: truncated header")
    magic, version, width, height = _HEADER.unpack_from(raw)
    if magic != BC3_MAGIC or version != BC3_VERSION:
        raise Bc3Error(f"{os.fspath(path)!r}: not a version {BC3_VERSION} bc3 file")

    bx, by = _block_counts(width, height)
    size = _BLOCK_BYTES * bx * by
    payload = raw[_HEADER.size:_HEADER.size + size]
    if len(payload) < size:
        raise Bc3Error(f"{os.fspath(path)!r}: truncated block data")
    return Bc3Image(width, height, payload)