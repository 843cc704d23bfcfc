"""Parser for .jim waypoint files."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field

__all__ = ["Waypoint", "JimData", "parse_jim", "load_jim"]

_WAYPOINT = struct.Struct("<4H")
_START = 9
_GROUPS = 6
_NAME_STRIDE = 16


@dataclass(frozen=True)
class Waypoint:
    """Raw waypoint coordinates; doubled x values match those in the .mis file."""

    x0: int
    x1: int
    y0: int
    y1: int


@dataclass
class JimData:
    """Waypoint groups and the names that follow them."""

    groups: list[list[Waypoint]] = field(default_factory=list)
    names: list[str] = field(default_factory=list)


def parse_jim(data: bytes) -> JimData:
    """Parse the contents of a .jim file."""
    data = bytes(data)
    size = len(data)
    result = JimData()
    i = _START
    for _ in range(_GROUPS):
        group: list[Waypoint] = []
        while i < size:
            if i + 1 >= size:
                raise ValueError(f"truncated waypoint data at offset {i}")
            if data[i] == 0 and data[i + 1] == 0:
                i += 2
                break
            i += 1
            if i + _WAYPOINT.size > size:
                raise ValueError(f"truncated waypoint record at offset {i}")
            group.append(Waypoint(*_WAYPOINT.unpack_from(data, i)))
            i += _WAYPOINT.size
            if i < size and data[i] == 0:
                i += 1
                break
        result.groups.append(group)

    while i < size:
        end = data.find(b"\0", i)
        if end == -1:
            end = size
        result.names.append(data[i:end].decode("latin-1"))
        i += _NAME_STRIDE
        if i < size and data[i] == 0:
            break
    return result


def load_jim(path: str | os.PathLike[str]) -> JimData:
    """Read and parse a .jim file."""
    with open(path, "rb") as f:
        return parse_jim(f.read())