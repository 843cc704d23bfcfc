import random
import struct

import pytest

from sxassets.dxt import DxtMode, compress_dxt_block
from sxassets.dxt_alpha import compress_alpha_block

ALL_MODES = [DxtMode.NORMAL, DxtMode.DITHER, DxtMode.HIGHQUAL, DxtMode.DITHER | DxtMode.HIGHQUAL]


def _expand(v):
    r, g, b = (v >> 11) & 31, (v >> 5) & 63, v & 31
    return ((r << 3) | (r >> 2), (g << 2) | (g >> 4), (b << 3) | (b >> 2))


def _decode_color(block):
    c0, c1, mask = struct.unpack("<HHI", bytes(block[:8]))
    e0, e1 = _expand(c0), _expand(c1)
    palette = [
        e0,
        e1,
        tuple((2 * a + b) // 3 for a, b in zip(e0, e1)),
        tuple((a + 2 * b) // 3 for a, b in zip(e0, e1)),
    ]
    return [palette[(mask >> (2 * i)) & 3] for i in range(16)]


def _block(pixels):
    return bytes(v for p in pixels for v in p)


def test_constant_white_block():
    src = _block([(255, 255, 255, 255)] * 16)
    assert compress_dxt_block(src) == bytes.fromhex("ffffffffaaaaaaaa")


def test_constant_black_block():
    src = _block([(0, 0, 0, 255)] * 16)
    assert compress_dxt_block(src) == bytes.fromhex("00000000aaaaaaaa")


@pytest.mark.parametrize("mode", ALL_MODES)
def test_two_color_block_decodes_closely(mode):
    pixels = [(255, 0, 0, 255)] * 8 + [(0, 0, 255, 255)] * 8
    out = compress_dxt_block(_block(pixels), False, mode)
    assert len(out) == 8
    decoded = _decode_color(out)
    for got, want in zip(decoded, pixels):
        assert all(abs(g - w) <= 8 for g, w in zip(got, want[:3]))


@pytest.mark.parametrize("mode", [DxtMode.NORMAL, DxtMode.HIGHQUAL])
def test_gray_ramp_error_is_bounded(mode):
    pixels = [(17 * i, 17 * i, 17 * i, 255) for i in range(16)]
    decoded = _decode_color(compress_dxt_block(_block(pixels), False, mode))
    for got, want in zip(decoded, pixels):
        assert all(abs(g - w) <= 48 for g, w in zip(got, want[:3]))


@pytest.mark.parametrize("mode", ALL_MODES)
def test_first_endpoint_is_not_smaller(mode):
    rng = random.Random(1234)
    for _ in range(20):
        src = bytes(rng.randrange(256) for _ in range(64))
        out = compress_dxt_block(src, False, mode)
        c0, c1 = struct.unpack("<HH", out[:4])
        assert c0 >= c1


def test_alpha_block_prefix_matches_alpha_compressor():
    rng = random.Random(7)
    src = bytes(rng.randrange(256) for _ in range(64))
    out = compress_dxt_block(src, True, DxtMode.HIGHQUAL)
    assert len(out) == 16
    assert out[:8] == compress_alpha_block(src[3:], 4)


def test_colour_part_ignores_alpha_when_alpha_enabled():
    rng = random.Random(99)
    rgb = [(rng.randrange(256), rng.randrange(256), rng.randrange(256)) for _ in range(16)]
    opaque = _block([c + (255,) for c in rgb])
    varied = _block([c + (rng.randrange(256),) for c in rgb])
    assert compress_dxt_block(opaque, True)[8:] == compress_dxt_block(varied, True)[8:]


def test_constant_colour_with_varied_alpha_uses_single_colour_path():
    src = _block([(255, 255, 255, 16 * i) for i in range(16)])
    out = compress_dxt_block(src, True)
    assert out[8:] == compress_dxt_block(_block([(255, 255, 255, 255)] * 16))


def test_wrong_length_is_rejected():
    with pytest.raises(ValueError):
        compress_dxt_block(bytes(63))


def test_out_of_range_value_is_rejected():
    src = [0] * 63 + [256]
    with pytest.raises(ValueError):
        compress_dxt_block(src)