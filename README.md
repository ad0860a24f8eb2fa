# untwine

Pieces for distributing large point clouds into octree voxels, written in
plain Python with no third-party dependencies, and a client that runs an
external `untwine` tiler program and follows its progress.

## What is inside

- `untwine.charbuf` – `CharBuffer`, a view over a byte buffer with separate
  read and write positions. `read`, `write`, `seekpos` and `seekoff` work as
  on a stream; `OpenMode.IN` / `OpenMode.OUT` select which position a seek
  moves. Seeking outside the buffer raises `ValueError`.
- `untwine.streams` – `MemoryStream`, `OutCbStream` and `InCbStream` byte
  streams, and the little-endian helpers `write_uint32` / `read_uint32`.
  Reading past the end of a `MemoryStream` raises `IndexError`.
- `untwine.las` – LAS point record layouts: `Point10`, `Point14`, `GpsTime`,
  `Rgb` and `Nir14`, each with a `unpack` class method (`Point14` has no
  `pack`). Too few bytes raise `LazPerfError`.
- `untwine.stats` – `Stats`, a single-pass summary of one dimension (minimum,
  maximum, mean, variance, standard deviation, skewness, kurtosis, and value
  counts when `EnumType.ENUMERATE` or `EnumType.GLOBAL` is chosen). With
  `EnumType.GLOBAL` the values are kept and `compute_global_stats` gives the
  median and median absolute deviation.
- `untwine.bounds` – `Bounds`, a 3D box that starts empty and can `grow`.
- `untwine.grid` – `Grid`, which picks an octree level from the extent and
  point count of the input and maps coordinates to voxel keys
  `(x, y, z, level)`.
- `untwine.epf_types` – `EpfFileInfo`, the description of one input file, and
  the buffer and node-size constants.
- `untwine.octant` – `FileInfo` and `OctantInfo`, the bookkeeping for the
  files that hold the points of one octree node; `merge_small_files`
  combines files of fewer than 1500 points into one.
- `untwine.buffer_cache` – `BufferCache`, a bounded pool of reusable buffers.
- `untwine.cell` – `Cell` and `CellManager`, per-voxel point buffers that are
  handed to a writer when full.
- `untwine.writer` – `Writer`, worker threads that append queued buffers to
  `<directory>/<level>-<x>-<y>-<z>.bin` and keep point totals per voxel.
- `untwine.client` – `UntwineClient`, which starts an `untwine` program,
  reads its progress and error messages through a pipe and can stop it.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Writing points to voxel files

```python
from untwine.cell import CellManager
from untwine.writer import Writer

point_size = 24
with Writer("/tmp/voxels", num_threads=4, point_size=point_size) as writer:
    cells = CellManager(point_size, writer)
    cell = cells.get((0, 0, 0, 1))
    cell.copy_point(bytes(point_size))
    cell.advance()
    cells.close()          # hand any partly filled buffers to the writer

print(writer.totals())     # {(0, 0, 0, 1): 1}
```

Leaving the `with` block calls `stop`, which waits for all queued writes and
re-raises the first error a writer thread met.

## Running the tiler from Python

```python
import time

from untwine.client import UntwineClient

with UntwineClient("/usr/local/bin/untwine") as client:
    client.start(["input.laz"], "./out", [("dims", "X, Y, Z, Intensity")])
    while client.running():
        print(client.progress_percent(), client.progress_message())
        time.sleep(1)
    print("error:", client.error_message())
```

`start` raises `RuntimeError` if a run is already in progress, `ValueError`
if no files or no output directory are given, and `OSError` if the program
cannot be started. Options may be a list of pairs or a mapping; each is
passed to the program as `--name value`, followed by `--files`,
`--output_dir` and `--progress_fd`. `stop` interrupts a running job and
returns `False` if nothing was running.

## Command line

```
untwine-client [-o OUTPUT_DIR] [--dims DIMS] [--interval SECONDS] UNTWINE FILE [FILE ...]
```

It starts the program `UNTWINE` on the given files (output to `./out` by
default), prints the percent and message every `--interval` seconds
(default 1) until the program ends, then prints any error it reported.
It exits with status 1 if the program could not be started.

## Running statistics

```python
from untwine.stats import EnumType, Stats

a = Stats("Z", EnumType.ENUMERATE)
for z in (1.0, 2.0, 2.0):
    a.insert(z)

b = Stats("Z", EnumType.ENUMERATE)
b.insert(4.0)

a.merge(b)          # ValueError unless name, EnumType and advanced match
print(a.count, a.average, a.values)
```

## What this package does not do

It does not read or write LAS/LAZ files or compress points, and it does not
build the sampled octree or write EPT or COPC output. Tiling itself is done
by a separate `untwine` program, which `UntwineClient` and `untwine-client`
only start, monitor and stop.