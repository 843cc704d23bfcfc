"""Reader for the .3do model format and the .kda animation format."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field

__all__ = [
    "ModelError",
    "Header",
    "Material",
    "Vertex",
    "Triangle",
    "Normal",
    "Tri",
    "FloatArrays",
    "Model",
    "ft2m",
    "parse_kda",
]

_HEADER = struct.Struct("<4sI8sI6i6I6I")
_MATERIAL = struct.Struct("<12s4I")
_VERTEX = struct.Struct("<11i")
_TRIANGLE = struct.Struct("<8i")
_NORMAL = struct.Struct("<4i")
_CHILD = struct.Struct("<3i")
_KDA = struct.Struct("<4sI2I")
_F32 = struct.Struct("<f")

_UNIT = float(0xFFFF)
_SIZE_T = 1 << 64

Vec3 = tuple[float, float, float]


class ModelError(ValueError):
    """Raised when model or animation data is malformed."""


def ft2m(feet: float) -> float:
    """Convert feet to metres."""
    return feet * 0.3048


def _f32(x: float) -> float:
    return _F32.unpack(_F32.pack(x))[0]


def _unit(value: int) -> float:
    """Scale a fixed-point value where 0xffff means 1.0, in single precision."""
    return _f32(_f32(value) / _UNIT)


def _slot(offset: int, size: int) -> int:
    """Turn a byte offset into a record index the way an unsigned division does."""
    return (offset % _SIZE_T) // size


def _cstr(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


@dataclass(frozen=True)
class Header:
    """The fixed 92-byte file header."""

    magic: bytes
    version: int
    filename: str
    dunno1: int
    aabb: tuple[int, int, int, int, int, int]
    num_mats: int
    num_verts: int
    num_tris: int
    num_normals: int
    num_child_offsets: int
    num_end: int
    off_mat: int
    off_vtx: int
    off_tri: int
    off_nrm: int
    off_chl: int
    off_eof: int


@dataclass(frozen=True)
class Material:
    """A material record: texture name and four unknown words."""

    texname: str
    dunno: tuple[int, int, int, int]


@dataclass(frozen=True)
class Vertex:
    """A vertex record with position and texture coordinates."""

    pos: tuple[int, int, int]
    dunno0: tuple[int, int, int, int, int]
    st: tuple[int, int]
    dunno1: int


@dataclass(frozen=True)
class Triangle:
    """A triangle record referring to material, vertices and normals by byte offset."""

    dunno: int
    moff: int
    voff: tuple[int, int, int]
    noff: tuple[int, int, int]


@dataclass(frozen=True)
class Normal:
    """A normal record in signed 16-bit fixed point."""

    normal: tuple[int, int, int]
    dunno: int


@dataclass(frozen=True)
class Tri:
    """One triangle resolved to floating point vertices, normals and uvs."""

    v: tuple[Vec3, Vec3, Vec3]
    n: tuple[Vec3, Vec3, Vec3]
    st: tuple[tuple[float, float], tuple[float, float], tuple[float, float]]


@dataclass
class FloatArrays:
    """Renderable arrays: one normal and uv per vertex, three indices per triangle.

    The third uv component holds the material index.
    """

    vertices: list[Vec3]
    normals: list[Vec3]
    uvs: list[Vec3]
    indices: list[int]


@dataclass
class Model:
    """A parsed .3do model."""

    header: Header
    materials: list[Material] = field(default_factory=list)
    vertices: list[Vertex] = field(default_factory=list)
    triangles: list[Triangle] = field(default_factory=list)
    normals: list[Normal] = field(default_factory=list)
    children: list[tuple[int, int, int]] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Model":
        """Parse a model from the contents of a .3do file."""
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise ModelError(f"model data too short for header: {len(data)} bytes")
        values = _HEADER.unpack_from(data)
        header = Header(
            magic=values[0],
            version=values[1],
            filename=_cstr(values[2]),
            dunno1=values[3],
            aabb=tuple(values[4:10]),  # type: ignore[arg-type]
            num_mats=values[10],
            num_verts=values[11],
            num_tris=values[12],
            num_normals=values[13],
            num_child_offsets=values[14],
            num_end=values[15],
            off_mat=values[16],
            off_vtx=values[17],
            off_tri=values[18],
            off_nrm=values[19],
            off_chl=values[20],
            off_eof=values[21],
        )
        bounds = (header.off_mat, header.off_vtx, header.off_tri, header.off_nrm, header.off_chl)
        if any(a > b for a, b in zip(bounds, bounds[1:])):
            raise ModelError("section offsets are not in ascending order")
        if header.off_chl > len(data):
            raise ModelError("section offsets point past the end of the data")

        def records(start: int, end: int, layout: struct.Struct) -> list[tuple[int, ...]]:
            count = (end - start) // layout.size
            return [layout.unpack_from(data, start + i * layout.size) for i in range(count)]

        materials = [
            Material(_cstr(r[0]), tuple(r[1:]))  # type: ignore[arg-type]
            for r in records(header.off_mat, header.off_vtx, _MATERIAL)
        ]
        vertices = [
            Vertex(tuple(r[0:3]), tuple(r[3:8]), tuple(r[8:10]), r[10])  # type: ignore[arg-type]
            for r in records(header.off_vtx, header.off_tri, _VERTEX)
        ]
        triangles = [
            Triangle(r[0], r[1], tuple(r[2:5]), tuple(r[5:8]))  # type: ignore[arg-type]
            for r in records(header.off_tri, header.off_nrm, _TRIANGLE)
        ]
        normals = [
            Normal(tuple(r[0:3]), r[3])  # type: ignore[arg-type]
            for r in records(header.off_nrm, header.off_chl, _NORMAL)
        ]
        children: list[tuple[int, int, int]] = []
        if header.off_eof > header.off_chl:
            declared = (header.off_eof - header.off_chl) // _CHILD.size
            available = (len(data) - header.off_chl) // _CHILD.size
            children = [
                _CHILD.unpack_from(data, header.off_chl + i * _CHILD.size)
                for i in range(min(declared, available))
            ]
        return cls(header, materials, vertices, triangles, normals, children)

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> "Model":
        """Read and parse a .3do file."""
        with open(path, "rb") as f:
            return cls.from_bytes(f.read())

    def aabb(self) -> list[float]:
        """Bounding box in metres as (xmin, ymin, zmin, xmax, ymax, zmax) in local axes."""
        a = self.header.aabb
        return [
            ft2m(a[4] / _UNIT),
            -ft2m(a[3] / _UNIT),
            ft2m(a[0] / _UNIT),
            ft2m(a[5] / _UNIT),
            -ft2m(a[2] / _UNIT),
            ft2m(a[1] / _UNIT),
        ]

    def _vertex_index(self, offset: int) -> int:
        index = _slot(offset, _VERTEX.size)
        if index >= len(self.vertices):
            raise ModelError(f"vertex offset {offset} out of range")
        return index

    def _normal_index(self, offset: int) -> int:
        index = _slot(offset, _NORMAL.size)
        if index >= len(self.normals):
            raise ModelError(f"normal offset {offset} out of range")
        return index

    def pack_tri(self, index: int) -> Tri:
        """Resolve one triangle into floating point positions, normals and uvs."""
        if not 0 <= index < len(self.triangles):
            raise IndexError(f"triangle {index} out of range")
        tri = self.triangles[index]
        verts = [self.vertices[self._vertex_index(off)] for off in tri.voff]
        norms = [self.normals[self._normal_index(off)] for off in tri.noff]
        return Tri(
            v=tuple(tuple(p / 1e6 for p in v.pos) for v in verts),  # type: ignore[arg-type]
            n=tuple(tuple(c / _UNIT for c in n.normal) for n in norms),  # type: ignore[arg-type]
            st=tuple((v.st[0] / _UNIT, v.st[1] / _UNIT) for v in verts),  # type: ignore[arg-type]
        )

    def child_offsets(self) -> list[Vec3]:
        """Offsets of child parts in metres, converted to local axes."""
        return [
            (ft2m(-x / _UNIT), ft2m(z / _UNIT), ft2m(-y / _UNIT))
            for x, y, z in self.children
        ]

    def to_float_arrays(self) -> FloatArrays:
        """Build renderable arrays, duplicating vertices used with different normals."""
        num_vertices = len(self.vertices)
        num_tris = len(self.triangles)
        hard_length = num_tris * 6
        if hard_length < num_vertices:
            hard_length = 2 * num_vertices

        owner: list[int | None] = [None] * hard_length
        zero = (0.0, 0.0, 0.0)
        vertices: list[Vec3] = [zero] * hard_length
        normals: list[Vec3] = [zero] * hard_length
        uvs: list[Vec3] = [zero] * hard_length
        indices: list[int] = []
        num_dup = num_vertices

        for tri in self.triangles:
            mi = _slot(tri.moff, _MATERIAL.size)
            for voff, noff in zip(tri.voff, tri.noff):
                source = self._vertex_index(voff)
                ni = self._normal_index(noff)
                key = (ni | (mi << 16)) & 0xFFFFFFFF
                vi = source
                write = owner[vi] != key
                if owner[vi] is None:
                    owner[vi] = key
                elif owner[vi] != key:
                    vi = num_dup
                    num_dup += 1
                    if num_dup > hard_length:
                        raise ModelError("too many duplicated vertices")
                    owner[vi] = key
                indices.append(vi)
                if not write:
                    continue
                v0 = self.vertices[source]
                n0 = self.normals[ni]
                vertices[vi] = tuple(ft2m(p / _UNIT) for p in v0.pos)  # type: ignore[assignment]
                uvs[vi] = (v0.st[0] / _UNIT, v0.st[1] / _UNIT, float(mi))
                normals[vi] = tuple(c / _UNIT for c in n0.normal)  # type: ignore[assignment]

        return FloatArrays(
            vertices=vertices[:num_dup],
            normals=normals[:num_dup],
            uvs=uvs[:num_dup],
            indices=indices,
        )

    def dump_obj(self, path: str | os.PathLike[str]) -> None:
        """Write the model as a Wavefront .obj file plus a .mtl file beside it."""
        name = os.fspath(path)
        dot = name.rfind(".")
        mtl_path = name[: max(dot, 0)] + ".mtl"

        with open(name, "w", newline="\n") as obj, open(mtl_path, "w", newline="\n") as mtl:
            for v in self.vertices:
                obj.write("v %g %g %g\n" % tuple(_unit(p) for p in v.pos))
                obj.write("vt %g %g\n" % tuple(_f32(1.0 - _unit(s)) for s in v.st))
            for n in self.normals:
                obj.write("vn %g %g %g\n" % tuple(_unit(c) for c in n.normal))

            for m, material in enumerate(self.materials):
                tex = _texture_file(material.texname, m)
                mat = f"{name}_{tex}"
                obj.write(f"usemtl {mat}\n")
                obj.write(f"o {mat}\n")
                mtl.write(
                    f"newmtl {mat}\n"
                    "Ns 0\n"
                    "Ka 0.000000 0.000000 0.000000\n"
                    "Kd 0.800000 0.800000 0.800000\n"
                    "Ks 0.000000 0.000000 0.000000\n"
                    "Ni 1.000000\n"
                    "d 1.000000\n"
                    "illum 1\n"
                    f"map_Kd {tex}\n"
                )
                for tri in self.triangles:
                    if _slot(tri.moff, _MATERIAL.size) != m:
                        continue
                    corners = [
                        "%d/%d/%d" % (
                            1 + _slot(voff, _VERTEX.size),
                            1 + _slot(voff, _VERTEX.size),
                            1 + _slot(noff, _NORMAL.size),
                        )
                        for voff, noff in zip(tri.voff, tri.noff)
                    ]
                    obj.write("f " + " ".join(corners) + "\n")


def _texture_file(texname: str, index: int) -> str:
    """Map a texture name to the lower case .png it was converted to."""
    dot = texname.rfind(".")
    if dot <= 0:
        return "%04d" % index
    return (texname[:dot] + ".png").lower()


def parse_kda(data: bytes) -> tuple[int, ...]:
    """Return the signed byte samples of a .kda animation file."""
    data = bytes(data)
    if len(data) < _KDA.size:
        raise ModelError(f"animation data too short for header: {len(data)} bytes")
    _magic, length, _a, _b = _KDA.unpack_from(data)
    payload = data[_KDA.size:_KDA.size + length]
    if len(payload) < length:
        raise ModelError(f"animation declares {length} samples, found {len(payload)}")
    return tuple(b - 256 if b > 127 else b for b in payload)