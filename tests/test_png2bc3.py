from PIL import Image

from sxassets.bc3 import encode_bc3, read_bc3
from sxassets.png2bc3 import convert, main


def _rgba_image(width, height):
    pixels = [
        ((x * 37) % 256, (y * 53) % 256, ((x + y) * 11) % 256, (x * y * 7) % 256)
        for y in range(height)
        for x in range(width)
    ]
    image = Image.new("RGBA", (width, height))
    image.putdata(pixels)
    return image, bytes(c for p in pixels for c in p)


def test_convert_round_trip(tmp_path):
    image, raw = _rgba_image(5, 3)
    src = tmp_path / "in.png"
    dst = tmp_path / "out.bc3"
    image.save(src)
    assert convert(src, dst) == (5, 3)
    result = read_bc3(dst)
    assert (result.width, result.height) == (5, 3)
    assert result.data == encode_bc3(5, 3, raw)


def test_file_starts_with_magic(tmp_path):
    image, _ = _rgba_image(4, 4)
    src = tmp_path / "in.png"
    dst = tmp_path / "out.bc3"
    image.save(src)
    convert(src, dst)
    assert dst.read_bytes()[:4] == b"bc3z"


def test_rgb_image_gets_opaque_alpha(tmp_path):
    image = Image.new("RGB", (4, 4), (10, 200, 30))
    src = tmp_path / "rgb.png"
    dst = tmp_path / "rgb.bc3"
    image.save(src)
    convert(src, dst)
    expected = encode_bc3(4, 4, bytes((10, 200, 30, 255)) * 16)
    assert read_bc3(dst).data == expected


def test_main_usage_error():
    assert main(["only-one"]) == 1


def test_main_missing_input(tmp_path):
    assert main([str(tmp_path / "missing.png"), str(tmp_path / "out.bc3")]) == 2


def test_main_success(tmp_path):
    image, raw = _rgba_image(8, 4)
    src = tmp_path / "in.png"
    dst = tmp_path / "out.bc3"
    image.save(src)
    assert main([str(src), str(dst)]) == 0
    assert read_bc3(dst).data == encode_bc3(8, 4, raw)