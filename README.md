# sxassets

Readers, converters and small command-line tools for the asset files of a
classic helicopter simulation: `.3do` models, `.kda` animation curves, BC3
(DXT5) compressed textures, `.inf` radio-message files, `.jim` waypoint
files and 8-bit terrain heightfields.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command-line tools

`sx-model` reads a `.3do` model and writes a description to standard error:
the header bits, the child offsets, the bounding box stored in the header and
the one computed from the vertices, and the raw bytes of every material. With
a second argument it also writes the model as a Wavefront `.obj` file, with a
`.mtl` file of the same name beside it. It exits with status 1 if the file
cannot be read or its end-of-file offset does not match its size.

```
sx-model model.3do
sx-model model.3do model.obj
```

`sx-anim` prints the signed byte samples of a `.kda` animation file to
standard output, one per line:

```
sx-anim rotor.kda
```

`sx-png2bc3` converts any image Pillow can open into a BC3 file, after
converting it to 8-bit RGBA:

```
sx-png2bc3 input.png output.bc3
```

## Library

- `sxassets.dxt` – `compress_dxt_block(src, alpha, mode)` compresses one
  4×4 RGBA block (64 bytes) into an 8-byte DXT1 block, or a 16-byte DXT5
  block when `alpha` is set. `DxtMode` holds the flags `NORMAL`, `DITHER`
  and `HIGHQUAL`.
- `sxassets.dxt_alpha` – `compress_alpha_block`, `compress_bc4_block` and
  `compress_bc5_block` for single-channel blocks.
- `sxassets.bc3` – `encode_bc3(width, height, rgba)` returns the block data
  (edge blocks repeat the border pixels), `write_bc3` writes it with a
  16-byte header, and `read_bc3` returns a `Bc3Image` with `width`,
  `height`, `data` and `num_blocks`. Bad or truncated files raise `Bc3Error`.
- `sxassets.matrix3` – 3×3 matrices as flat row-major lists: `zero`,
  `identity`, `add`, `sub`, `mul`, `mulv`, `tmulv`, `transpose`, `det`,
  `inv` and `invert_sub2`; the inverses raise `SingularMatrixError`.
- `sxassets.c3model` – `Model.load(path)` and `Model.from_bytes(data)`
  parse a `.3do` file into `Header`, `Material`, `Vertex`, `Triangle` and
  `Normal` records. A `Model` gives `aabb()` in metres, `child_offsets()`,
  `pack_tri(index)` (a `Tri`), `to_float_arrays()` (a `FloatArrays` with one
  normal and uv per vertex, duplicating vertices where needed; the third uv
  component is the material index) and `dump_obj(path)`. `parse_kda(data)`
  returns the samples of a `.kda` file; `ft2m` converts feet to metres.
  Malformed data raises `ModelError`.
- `sxassets.modeltool` – `describe_model(model)` returns the text that
  `sx-model` prints.
- `sxassets.png2bc3` – `convert(src, dst)` returns `(width, height)`.
- `sxassets.c3inf` – `load_radio_messages(mission_filename)` reads the
  `.inf` file next to a mission file and returns a dict of messages keyed
  1 to 99; `parse_radio_messages(lines)` and `inf_path_for` are also
  available.
- `sxassets.c3jim` – `load_jim(path)` and `parse_jim(data)` return a
  `JimData` with six groups of `Waypoint`s and the names that follow them.
- `sxassets.terrain_mesh` – `build_terrain_mesh(rng)` returns a
  `TerrainMesh` of 129×129 jittered vertices and their quads, denser near
  the centre.
- `sxassets.heightfield` – `Heightfield.from_png(path, elevation,
  terrain_scale)` or `Heightfield.from_scaled(...)` build a tiling
  heightmap; `height_at(p)` and `normal_at(p)` sample it at a world-space
  point.

```python
from sxassets.c3model import Model
from sxassets.bc3 import read_bc3

model = Model.load("heli.3do")
arrays = model.to_float_arrays()
print(model.aabb(), len(arrays.indices) // 3)

image = read_bc3("texture.bc3")
print(image.width, image.height, image.num_blocks)
```

## What it does not do

The package only reads, converts and inspects asset files. It does not run
or render the simulation, play sound or music, or handle input. It does not
decode BC3 blocks back into pixels, does not read the compressed `.pcx`
image format, and does not load `.mis` mission files themselves; it only
derives the `.inf` file name from a mission file name.