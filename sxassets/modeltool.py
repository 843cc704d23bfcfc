"""Command line tools that inspect .3do models and .kda animations."""

from __future__ import annotations

import struct
import sys
from collections.abc import Sequence

from .c3model import Model, ModelError, parse_kda

__all__ = ["describe_model", "main", "anim_main"]

_F32 = struct.Struct("<f")
_UNIT = float(0xFFFF)


def _feet(value: int) -> float:
    return _F32.unpack(_F32.pack(_F32.unpack(_F32.pack(value))[0] / _UNIT))[0]


def _signed32(value: int) -> int:
    return value - (1 << 32) if value & 0x80000000 else value


def describe_model(model: Model) -> str:
    """Describe header bits, child offsets, bounding boxes and materials."""
    h = model.header
    d = h.dunno1
    lines = [
        "header bits:",
        f"{_signed32(d)} -- {d >> 24} {(d >> 16) & 0xFF} {(d >> 8) & 0xFF} {d & 0xFF}",
        "child offsets:",
    ]
    for x, y, z in model.children:
        lines.append(
            " %8d\t%8d\t%8d -- %g %g %g" % (x, y, z, _feet(x), _feet(y), _feet(z))
        )

    lines.append("".join(f"{v} " for v in h.aabb))
    # bounds in the file's flipped axis order, starting from the origin
    box = [0] * 6
    for vertex in model.vertices:
        x, y, z = vertex.pos
        box[0] = min(box[0], z)
        box[1] = max(box[1], z)
        box[2] = min(box[2], -y)
        box[3] = max(box[3], -y)
        box[4] = min(box[4], x)
        box[5] = max(box[5], x)
    lines.append("".join(f"{v} " for v in box) + " (<= real aabb)")
    lines.append("".join("%g " % _feet(v) for v in box) + " (<= real aabb in feet)")

    for material in model.materials:
        raw = struct.pack("<4I", *material.dunno)
        lines.append("%12s" % material.texname + "".join(" %3u" % b for b in raw))
    return "\n".join(lines) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    """Describe a .3do model and optionally dump it as .obj: model <in.3do> [out.obj]."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: model <input.3do> [output.obj]", file=sys.stderr)
        return 1
    try:
        with open(args[0], "rb") as f:
            data = f.read()
        model = Model.from_bytes(data)
    except (OSError, ModelError) as exc:
        print(f"[model] failed to load {args[0]!r}: {exc}", file=sys.stderr)
        return 1
    if model.header.off_eof != len(data):
        print(
            f"[model] end of file offset {model.header.off_eof} does not match size {len(data)}",
            file=sys.stderr,
        )
        return 1

    sys.stderr.write(describe_model(model))

    if len(args) > 1:
        try:
            model.dump_obj(args[1])
        except OSError as exc:
            print(f"[model] failed to write {args[1]!r}: {exc}", file=sys.stderr)
            return 1
    return 0


def anim_main(argv: Sequence[str] | None = None) -> int:
    """Print the samples of a .kda animation file, one per line."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: anim <input.kda>", file=sys.stderr)
        return 1
    try:
        with open(args[0], "rb") as f:
            samples = parse_kda(f.read())
    except (OSError, ModelError) as exc:
        print(f"[anim] failed to load {args[0]!r}: {exc}", file=sys.stderr)
        return 1
    sys.stdout.write("".join(f"{s}\n" for s in samples))
    return 0