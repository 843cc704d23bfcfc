"""Terrain heightfield lookups: ground height and surface normal in world space."""

from __future__ import annotations

import math
import os
from collections.abc import Sequence
from dataclasses import dataclass

from PIL import Image

from .c3model import ft2m

__all__ = ["TERRAIN_PERIOD", "Heightfield"]

# world space extent (metres) that one copy of the heightmap covers
TERRAIN_PERIOD = 3.0 * 0.3048 * 2048.0
_SCALE = 1.0 / TERRAIN_PERIOD
_HIGH_MODES = ("I", "F")


@dataclass(frozen=True)
class Heightfield:
    """A tiling 8-bit heightmap with its vertical range in metres.

    ``low`` is the height of sample value 0 and ``high`` the range that a full
    256 steps would span.
    """

    width: int
    height: int
    samples: bytes
    low: float
    high: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"invalid heightfield size {self.width}x{self.height}")
        if len(self.samples) != self.width * self.height:
            raise ValueError(
                f"expected {self.width * self.height} samples, got {len(self.samples)}"
            )

    @classmethod
    def from_scaled(
        cls,
        width: int,
        height: int,
        samples: Sequence[int],
        elevation: float,
        terrain_scale: int,
    ) -> "Heightfield":
        """Build from raw samples, base elevation in feet and the scale bits (21 = 768 ft)."""
        return cls(
            width=width,
            height=height,
            samples=bytes(samples),
            low=ft2m(elevation),
            high=ft2m(768.0 * 2.0 ** (terrain_scale - 21.0)),
        )

    @classmethod
    def from_png(
        cls, path: str | os.PathLike[str], elevation: float, terrain_scale: int
    ) -> "Heightfield":
        """Load an 8-bit image and use its first channel as heights."""
        with Image.open(path) as image:
            if image.mode.startswith(_HIGH_MODES) or ";16" in image.mode:
                raise ValueError(f"{os.fspath(path)!r}: only 8-bit heightmaps are supported")
            rgba = image.convert("RGBA")
            width, height = rgba.size
            red = rgba.getchannel("R").tobytes()
        return cls.from_scaled(width, height, red, elevation, terrain_scale)

    def _coords(self, p: Sequence[float]) -> tuple[int, int]:
        wd, ht = self.width, self.height
        cx = int(math.fmod(wd * 100 + wd * p[0] * _SCALE, wd)) % wd
        cy = int(math.fmod(ht * 100 + ht * p[2] * _SCALE, ht)) % ht
        return cx, cy

    def _sample(self, cx: int, cy: int) -> float:
        wd, ht = self.width, self.height
        cx %= wd
        cy %= ht
        value = self.samples[wd * (ht - 1 - cy) + wd - 1 - cx]
        return self.low + self.high / 256.0 * value

    def height_at(self, p: Sequence[float]) -> float:
        """Ground height below the world space point p (x, y, z)."""
        return self._sample(*self._coords(p))

    def normal_at(self, p: Sequence[float]) -> tuple[float, float, float]:
        """Unit surface normal from central differences around p."""
        cx, cy = self._coords(p)
        h0 = self._sample(cx - 1, cy)
        h1 = self._sample(cx + 1, cy)
        h2 = self._sample(cx, cy - 1)
        h3 = self._sample(cx, cy + 1)
        u = (2.0, h1 - h0, 0.0)
        v = (0.0, h3 - h2, 2.0)
        n = (
            v[1] * u[2] - v[2] * u[1],
            v[2] * u[0] - v[0] * u[2],
            v[0] * u[1] - v[1] * u[0],
        )
        length = math.sqrt(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])
        return (n[0] / length, n[1] / length, n[2] / length)