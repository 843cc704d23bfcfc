import struct

from sxassets.c3model import Model
from sxassets.modeltool import anim_main, describe_model, main


def build(materials=(), vertices=(), triangles=(), normals=(), children=(),
          aabb=(0, 0, 0, 0, 0, 0), dunno1=0, extra=b""):
    mat = b"".join(struct.pack("<12s4I", name, *dunno) for name, dunno in materials)
    vtx = b"".join(struct.pack("<11i", *pos, 0, 0, 0, 0, 0, *st, 0) for pos, st in vertices)
    tri = b"".join(
        struct.pack("<8i", 0, m * 28, *(v * 44 for v in vs), *(n * 16 for n in ns))
        for m, vs, ns in triangles
    )
    nrm = b"".join(struct.pack("<4i", *n, 0) for n in normals)
    chl = b"".join(struct.pack("<3i", *c) for c in children)
    off_mat = 92
    off_vtx = off_mat + len(mat)
    off_tri = off_vtx + len(vtx)
    off_nrm = off_tri + len(tri)
    off_chl = off_nrm + len(nrm)
    off_eof = off_chl + len(chl)
    header = struct.pack(
        "<4sI8sI6i6I6I", b"TEST", 257, b"model\0\0\0", dunno1, *aabb,
        len(materials), len(vertices), len(triangles), len(normals), len(children), 0,
        off_mat, off_vtx, off_tri, off_nrm, off_chl, off_eof,
    )
    return header + mat + vtx + tri + nrm + chl + extra


def model_bytes(extra=b""):
    return build(
        materials=[(b"TEX.PCX", (0, 0, 0, 0))],
        vertices=[((65535, 0, 0), (0, 0)), ((0, 65535, 0), (0, 0)), ((0, 0, 65535), (0, 0))],
        triangles=[(0, (0, 1, 2), (0, 1, 2))],
        normals=[(65535, 0, 0), (0, 65535, 0), (0, 0, 65535)],
        children=[(65535, 0, 0)],
        aabb=(1, 2, 3, 4, 5, 6),
        dunno1=0x01020304,
        extra=extra,
    )


def test_describe_model_sections():
    text = describe_model(Model.from_bytes(model_bytes()))
    lines = text.splitlines()
    assert lines[0] == "header bits:"
    assert lines[1] == "16909060 -- 1 2 3 4"
    assert lines[2] == "child offsets:"
    assert lines[3].endswith("-- 1 0 0")
    assert lines[4] == "1 2 3 4 5 6 "
    assert lines[5].endswith(" (<= real aabb)")
    assert lines[6].endswith(" (<= real aabb in feet)")
    assert lines[7].startswith("     TEX.PCX")


def test_describe_model_bounds_include_vertices():
    text = describe_model(Model.from_bytes(model_bytes()))
    box_line = [line for line in text.splitlines() if line.endswith(" (<= real aabb)")][0]
    values = [int(v) for v in box_line.split(" (<=")[0].split()]
    assert values == [0, 65535, -65535, 0, 0, 65535]


def test_main_writes_obj(tmp_path, capsys):
    src = tmp_path / "m.3do"
    src.write_bytes(model_bytes())
    out = tmp_path / "m.obj"
    assert main([str(src), str(out)]) == 0
    assert "f 1/1/1 2/2/2 3/3/3" in out.read_text().splitlines()
    assert (tmp_path / "m.mtl").exists()
    assert "header bits:" in capsys.readouterr().err


def test_main_rejects_size_mismatch(tmp_path):
    src = tmp_path / "m.3do"
    src.write_bytes(model_bytes(extra=b"\0" * 8))
    assert main([str(src)]) == 1


def test_main_missing_file(tmp_path):
    assert main([str(tmp_path / "absent.3do")]) == 1


def test_main_without_arguments():
    assert main([]) == 1


def test_anim_main_prints_samples(tmp_path, capsys):
    src = tmp_path / "a.kda"
    src.write_bytes(b"SAMP" + struct.pack("<I", 2) + b"\0" * 8 + bytes([1, 255]))
    assert anim_main([str(src)]) == 0
    assert capsys.readouterr().out == "1\n-1\n"


def test_anim_main_missing_file(tmp_path):
    assert anim_main([str(tmp_path / "absent.kda")]) == 1