"""Single-channel block compression (DXT5 alpha, BC4 and BC5 blocks)."""

from __future__ import annotations

from collections.abc import Sequence

__all__ = ["compress_alpha_block", "compress_bc4_block", "compress_bc5_block"]

_PIXELS = 16
_BLOCK_BYTES = 8


def _channel(src: Sequence[int], stride: int) -> list[int]:
    if stride < 1:
        raise ValueError(f"stride must be positive, got {stride}")
    needed = (_PIXELS - 1) * stride + 1
    if len(src) < needed:
        raise ValueError(f"need at least {needed} bytes for a block, got {len(src)}")
    values = [int(src[i * stride]) for i in range(_PIXELS)]
    for value in values:
        if not 0 <= value <= 255:
            raise ValueError(f"byte value out of range: {value}")
    return values


def _index_for(value: int, bias: int, dist: int) -> int:
    """Pick the optimal 3-bit index for one value between the endpoints."""
    dist2, dist4 = 2 * dist, 4 * dist
    a = value * 7 + bias
    index = 0
    if a >= dist4:
        index += 4
        a -= dist4
    if a >= dist2:
        index += 2
        a -= dist2
    if a >= dist:
        index += 1
    # map the linear scale onto the block's index order (0 and 1 are the endpoints)
    index = -index & 7
    if index < 2:
        index ^= 1
    return index


def compress_alpha_block(src: Sequence[int], stride: int = 1) -> bytes:
    """Compress 16 single-channel values read every `stride` bytes into 8 bytes."""
    values = _channel(src, stride)
    low, high = min(values), max(values)

    dist = high - low
    bias = dist - 1 if dist < 8 else dist // 2 + 2
    bias -= low * 7

    packed = 0
    for position, value in enumerate(values):
        packed |= _index_for(value, bias, dist) << (3 * position)

    return bytes((high, low)) + packed.to_bytes(_BLOCK_BYTES - 2, "little")


def compress_bc4_block(src: Sequence[int]) -> bytes:
    """Compress a 4x4 block of one-byte pixels into a BC4 block."""
    return compress_alpha_block(src, 1)


def compress_bc5_block(src: Sequence[int]) -> bytes:
    """Compress a 4x4 block of two-byte pixels into a BC5 block."""
    return compress_alpha_block(src, 2) + compress_alpha_block(src[1:], 2)