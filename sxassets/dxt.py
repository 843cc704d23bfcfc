"""DXT1/DXT5 (BC1/BC3) colour block compression."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntFlag
from functools import lru_cache

from .dxt_alpha import compress_alpha_block

__all__ = ["DxtMode", "compress_dxt_block"]

_F32 = struct.Struct("<f")
_COLOR_BLOCK = struct.Struct("<HHI")

Pixel = tuple[int, int, int, int]
Rgb = tuple[int, int, int]


class DxtMode(IntFlag):
    """Compression mode flags."""

    NORMAL = 0
    DITHER = 1  # Floyd-Steinberg dithering; not for normal maps and the like
    HIGHQUAL = 2  # two refinement steps instead of one


def _f32(x: float) -> float:
    """Round a value to single precision."""
    return _F32.unpack(_F32.pack(x))[0]


def _mul8bit(a: int, b: int) -> int:
    t = a * b + 128
    return (t + (t >> 8)) >> 8


def _lerp13(a: int, b: int) -> int:
    """Interpolate at the 1/3 point between a and b, without rounding bias."""
    return (2 * a + b) // 3


@dataclass(frozen=True)
class _Tables:
    expand5: tuple[int, ...]
    expand6: tuple[int, ...]
    quant_rb: tuple[int, ...]
    quant_g: tuple[int, ...]
    omatch5: tuple[tuple[int, int], ...]
    omatch6: tuple[tuple[int, int], ...]


def _prepare_opt_table(expand: Sequence[int]) -> tuple[tuple[int, int], ...]:
    """For every 8-bit value, the (max, min) endpoint pair that reproduces it best."""
    # Many endpoint pairs share the same interpolated value and penalty; only the
    # first pair of each kind (in search order) can ever win a strict comparison.
    first: dict[tuple[int, int], tuple[int, int]] = {}
    for mn, mine in enumerate(expand):
        for mx, maxe in enumerate(expand):
            # the DX10 spec allows 3% interpolation error, count it against the pair
            key = (_lerp13(maxe, mine), abs(maxe - mine) * 3 // 100)
            first.setdefault(key, (mx, mn))
    candidates = list(first.items())

    table = []
    for value in range(256):
        best_err = 256
        choice = (0, 0)
        for (lerp, penalty), pair in candidates:
            err = abs(lerp - value) + penalty
            if err < best_err:
                best_err, choice = err, pair
        table.append(choice)
    return tuple(table)


@lru_cache(maxsize=1)
def _tables() -> _Tables:
    expand5 = tuple((i << 3) | (i >> 2) for i in range(32))
    expand6 = tuple((i << 2) | (i >> 4) for i in range(64))
    clamped = [min(max(i - 8, 0), 255) for i in range(256 + 16)]
    return _Tables(
        expand5=expand5,
        expand6=expand6,
        quant_rb=tuple(expand5[_mul8bit(v, 31)] for v in clamped),
        quant_g=tuple(expand6[_mul8bit(v, 63)] for v in clamped),
        omatch5=_prepare_opt_table(expand5),
        omatch6=_prepare_opt_table(expand6),
    )


def _from16bit(v: int, t: _Tables) -> Rgb:
    return (
        t.expand5[(v & 0xF800) >> 11],
        t.expand6[(v & 0x07E0) >> 5],
        t.expand5[v & 0x001F],
    )


def _as16bit(r: int, g: int, b: int) -> int:
    return (_mul8bit(r, 31) << 11) + (_mul8bit(g, 63) << 5) + _mul8bit(b, 31)


def _lerp13rgb(p1: Rgb, p2: Rgb) -> Rgb:
    return (_lerp13(p1[0], p2[0]), _lerp13(p1[1], p2[1]), _lerp13(p1[2], p2[2]))


def _eval_colors(c0: int, c1: int, t: _Tables) -> list[Rgb]:
    first = _from16bit(c0, t)
    second = _from16bit(c1, t)
    return [first, second, _lerp13rgb(first, second), _lerp13rgb(second, first)]


def _single_color(r: int, g: int, b: int, t: _Tables) -> tuple[int, int]:
    """Endpoints that reproduce one constant colour as closely as possible."""
    max16 = (t.omatch5[r][0] << 11) | (t.omatch6[g][0] << 5) | t.omatch5[b][0]
    min16 = (t.omatch5[r][1] << 11) | (t.omatch6[g][1] << 5) | t.omatch5[b][1]
    return max16, min16


def _diffusion(k: int, cur: Sequence[int], prev: Sequence[int]) -> int:
    """Floyd-Steinberg error term (scaled by 16) for column k of a 4-wide row."""
    if k == 0:
        return 3 * prev[1] + 5 * prev[0]
    if k == 3:
        return 7 * cur[2] + 5 * prev[3] + prev[2]
    return 7 * cur[k - 1] + 3 * prev[k + 1] + 5 * prev[k] + prev[k - 1]


def _dither_block(pixels: Sequence[Pixel], t: _Tables) -> list[Pixel]:
    """Dither a block to 565 RGB."""
    out = [[0, 0, 0, 0] for _ in range(16)]
    last = len(t.quant_rb) - 1
    for ch in range(3):
        quant = t.quant_g if ch == 1 else t.quant_rb
        cur, prev = [0] * 4, [0] * 4
        for y in range(4):
            for k in range(4):
                src = pixels[4 * y + k][ch]
                index = 8 + src + (_diffusion(k, cur, prev) >> 4)
                value = quant[min(max(index, 0), last)]
                out[4 * y + k][ch] = value
                cur[k] = src - value
            cur, prev = prev, cur
    return [tuple(p) for p in out]  # type: ignore[misc]


def _select(dot: int, c0_point: int, half_point: int, c3_point: int) -> int:
    if dot < half_point:
        return 1 if dot < c0_point else 3
    return 2 if dot < c3_point else 0


def _match_colors(pixels: Sequence[Pixel], color: Sequence[Rgb], dither: bool) -> int:
    """Assign every pixel one of the four palette entries, projected on a line."""
    dirr = color[0][0] - color[1][0]
    dirg = color[0][1] - color[1][1]
    dirb = color[0][2] - color[1][2]
    dots = [p[0] * dirr + p[1] * dirg + p[2] * dirb for p in pixels]
    stops = [c[0] * dirr + c[1] * dirg + c[2] * dirb for c in color]

    c0_point = (stops[1] + stops[3]) >> 1
    half_point = (stops[3] + stops[2]) >> 1
    c3_point = (stops[2] + stops[0]) >> 1

    mask = 0
    if not dither:
        for dot in reversed(dots):
            mask = (mask << 2) | _select(dot, c0_point, half_point, c3_point)
        return mask

    c0_point <<= 4
    half_point <<= 4
    c3_point <<= 4
    cur, prev = [0] * 4, [0] * 4
    for y in range(4):
        row = dots[4 * y:4 * y + 4]
        row_mask = 0
        for k, dot in enumerate(row):
            step = _select((dot << 4) + _diffusion(k, cur, prev), c0_point, half_point, c3_point)
            cur[k] = dot - stops[step]
            row_mask |= step << (2 * k)
        mask |= row_mask << (8 * y)
        cur, prev = prev, cur
    return mask


def _dot3_f32(a: Sequence[float], b: Sequence[float]) -> float:
    return _f32(_f32(_f32(a[0] * b[0]) + _f32(a[1] * b[1])) + _f32(a[2] * b[2]))


def _optimize_colors(pixels: Sequence[Pixel]) -> tuple[int, int]:
    """Pick endpoints at the extremes along the principal axis of the colours."""
    mu, low, high = [], [], []
    for ch in range(3):
        values = [p[ch] for p in pixels]
        mu.append((sum(values) + 8) >> 4)
        low.append(min(values))
        high.append(max(values))

    cov = [0] * 6
    for p in pixels:
        r, g, b = p[0] - mu[0], p[1] - mu[1], p[2] - mu[2]
        cov[0] += r * r
        cov[1] += r * g
        cov[2] += r * b
        cov[3] += g * g
        cov[4] += g * b
        cov[5] += b * b
    covf = [_f32(c / 255.0) for c in cov]

    vec = [float(high[ch] - low[ch]) for ch in range(3)]
    rows = (
        (covf[0], covf[1], covf[2]),
        (covf[1], covf[3], covf[4]),
        (covf[2], covf[4], covf[5]),
    )
    for _ in range(4):  # power iteration
        vec = [_dot3_f32(vec, row) for row in rows]

    magn = max(abs(v) for v in vec)
    if magn < 4.0:  # too small, default to luminance
        axis = (299, 587, 114)
    else:
        scale = 512.0 / magn
        axis = tuple(int(v * scale) for v in vec)

    min_dot, max_dot = 0x7FFFFFFF, -0x7FFFFFFF
    min_p = max_p = pixels[0]
    for p in pixels:
        dot = p[0] * axis[0] + p[1] * axis[1] + p[2] * axis[2]
        if dot < min_dot:
            min_dot, min_p = dot, p
        if dot > max_dot:
            max_dot, max_p = dot, p

    return _as16bit(*max_p[:3]), _as16bit(*min_p[:3])


def _sclamp(y: float, low: int, high: int) -> int:
    return min(max(int(y), low), high)


def _solve(numerator: int, scale: float, top: int) -> int:
    return _sclamp(_f32(_f32(numerator * scale) + 0.5), 0, top)


_W1 = (3, 0, 2, 1)
_PRODS = (0x090000, 0x000900, 0x040102, 0x010402)


def _refine(
    pixels: Sequence[Pixel], max16: int, min16: int, mask: int, t: _Tables
) -> tuple[bool, int, int]:
    """Least-squares endpoint fit for the given index assignment."""
    old_max, old_min = max16, min16

    if ((mask ^ (mask << 2)) & 0xFFFFFFFF) < 4:
        # all pixels share one index: the system is singular, match the mean colour
        r = (8 + sum(p[0] for p in pixels)) >> 4
        g = (8 + sum(p[1] for p in pixels)) >> 4
        b = (8 + sum(p[2] for p in pixels)) >> 4
        new_max, new_min = _single_color(r, g, b, t)
    else:
        akku = 0
        at1 = [0, 0, 0]
        at2 = [0, 0, 0]
        for i, p in enumerate(pixels):
            step = (mask >> (2 * i)) & 3
            w1 = _W1[step]
            akku += _PRODS[step]
            for ch in range(3):
                at1[ch] += w1 * p[ch]
                at2[ch] += p[ch]
        at2 = [3 * at2[ch] - at1[ch] for ch in range(3)]

        xx = akku >> 16
        yy = (akku >> 8) & 0xFF
        xy = akku & 0xFF

        frb = _f32(_f32(93.0 / 255.0) / (xx * yy - xy * xy))
        fg = _f32(_f32(frb * 63.0) / 31.0)
        scales = (frb, fg, frb)
        tops = (31, 63, 31)
        shifts = (11, 5, 0)

        new_max = 0
        new_min = 0
        for ch in range(3):
            new_max |= _solve(at1[ch] * yy - at2[ch] * xy, scales[ch], tops[ch]) << shifts[ch]
            new_min |= _solve(at2[ch] * xx - at1[ch] * xy, scales[ch], tops[ch]) << shifts[ch]

    return (old_min != new_min or old_max != new_max), new_max, new_min


def _compress_color_block(pixels: Sequence[Pixel], mode: DxtMode, t: _Tables) -> bytes:
    dither = bool(mode & DxtMode.DITHER)
    refine_count = 2 if mode & DxtMode.HIGHQUAL else 1

    if all(p == pixels[0] for p in pixels):
        r, g, b = pixels[0][:3]
        mask = 0xAAAAAAAA
        max16, min16 = _single_color(r, g, b, t)
    else:
        source = _dither_block(pixels, t) if dither else pixels
        max16, min16 = _optimize_colors(source)
        if max16 != min16:
            mask = _match_colors(pixels, _eval_colors(max16, min16, t), dither)
        else:
            mask = 0

        for _ in range(refine_count):
            last_mask = mask
            changed, max16, min16 = _refine(source, max16, min16, mask, t)
            if changed:
                if max16 != min16:
                    mask = _match_colors(pixels, _eval_colors(max16, min16, t), dither)
                else:
                    mask = 0
                    break
            if mask == last_mask:
                break

    if max16 < min16:
        max16, min16 = min16, max16
        mask ^= 0x55555555

    return _COLOR_BLOCK.pack(max16, min16, mask)


def compress_dxt_block(
    src: Sequence[int], alpha: bool = False, mode: DxtMode | int = DxtMode.NORMAL
) -> bytes:
    """Compress a 4x4 row-major RGBA block (64 bytes).

    Returns an 8-byte DXT1 block, or a 16-byte DXT5 block when ``alpha`` is set.
    """
    data = bytes(src)
    if len(data) != 64:
        raise ValueError(f"a block needs 64 bytes of RGBA data, got {len(data)}")
    mode = DxtMode(mode)

    head = b""
    if alpha:
        head = compress_alpha_block(data[3:], 4)
        # colour constancy is tested on whole pixels, so make alpha opaque
        pixels = [tuple(data[4 * i:4 * i + 3]) + (255,) for i in range(16)]
    else:
        pixels = [tuple(data[4 * i:4 * i + 4]) for i in range(16)]

    return head + _compress_color_block(pixels, mode, _tables())  # type: ignore[arg-type]