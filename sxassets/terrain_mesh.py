"""Jittered, centre-weighted quad grid used to rasterise terrain."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["TERRAIN_SIZE", "TERRAIN_RESOLUTION", "TerrainMesh", "build_terrain_mesh"]

TERRAIN_SIZE = 4096.0  # half extent in metres
TERRAIN_RESOLUTION = 129  # vertices per side


class _Random(Protocol):
    def random(self) -> float: ...


@dataclass
class TerrainMesh:
    """Vertex positions in world space and quads as four vertex indices."""

    vertices: list[tuple[float, float, float]] = field(default_factory=list)
    quads: list[tuple[int, int, int, int]] = field(default_factory=list)


def build_terrain_mesh(rng: _Random | None = None) -> TerrainMesh:
    """Build a square grid, jittered and stretched to put more detail at the centre."""
    rng = random.Random() if rng is None else rng
    wd = TERRAIN_RESOLUTION
    step = wd - 1.0
    mesh = TerrainMesh()
    for j in range(wd):
        for i in range(wd):
            z = j / step
            x = i / step
            z += 0.5 * rng.random() / step
            x += 0.5 * rng.random() / step
            z = -1.0 + 2.0 * z
            x = -1.0 + 2.0 * x
            rad = max(abs(x), abs(z)) ** 2
            mesh.vertices.append((x * rad * TERRAIN_SIZE, 0.0, z * rad * TERRAIN_SIZE))
            if i and j:
                mesh.quads.append((
                    wd * (j - 1) + i - 1,
                    wd * (j - 1) + i,
                    wd * j + i,
                    wd * j + i - 1,
                ))
    return mesh