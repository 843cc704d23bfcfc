"""Parser for .inf mission files holding radio message texts."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable

__all__ = ["inf_path_for", "parse_radio_messages", "load_radio_messages"]

_RADIO = re.compile(r">rm\s*([+-]?\d+)")
_MAX_MESSAGES = 100


def inf_path_for(mission_filename: str | os.PathLike[str]) -> str:
    """Return the .inf file name that belongs to a mission file."""
    name = os.fspath(mission_filename)
    if len(name) < 3:
        raise ValueError(f"mission file name too short: {name!r}")
    return name[:-3] + "inf"


def parse_radio_messages(lines: Iterable[str]) -> dict[int, str]:
    """Collect radio messages, keyed by their number 1..99.

    The mission briefing between ``>text`` and ``<`` is skipped.
    """
    messages: dict[int, str] = {}
    stream = (line.rstrip("\r\n") for line in lines)
    for line in stream:
        if not line.startswith(">"):
            continue
        if line[1:5] == "text":
            for inner in stream:
                if inner.startswith("<"):
                    break
            continue
        match = _RADIO.match(line)
        num = int(match.group(1)) if match else 0
        if 0 < num < _MAX_MESSAGES:
            text = next(stream, None)
            if text is None:
                break
            messages[num] = text
    return messages


def load_radio_messages(mission_filename: str | os.PathLike[str]) -> dict[int, str]:
    """Read the radio messages of the .inf file next to a mission file."""
    with open(inf_path_for(mission_filename), encoding="latin-1", newline="") as f:
        return parse_radio_messages(f.read().splitlines())