# halfmesh

halfmesh reads a polygon mesh and builds its doubly connected edge list
(DCEL, also called a half-edge structure). It checks whether the mesh is
a valid planar subdivision and prints the finished structure. It can
also draw the input and the DCEL as SVG files.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Input format

All values are integers. The input starts with the number of vertices
and the number of faces. Next come the `x y` coordinates of each vertex.
Then comes one line per face that lists its vertex numbers in order.
Vertex numbers start at 1.

```
4 2
0 0
10 0
10 10
0 10
1 2 3 4
1 4 3 2
```

Faces with fewer than three vertices get no half-edges. Edges that refer
to a vertex number outside the range are skipped.

## Building a DCEL

```
halfmesh < mesh.txt
```

When the mesh is valid, the output begins with a line that gives the
number of vertices, edges and faces. Next comes one line per vertex with
`x y` and the number of a half-edge that leaves it. Then comes one line
per face with the number of one of its half-edges. Last comes one line
per half-edge with its origin, twin, face, next and previous half-edge.
Every number in the output starts at 1. Where a reference is missing,
the output shows `1`.

When the mesh is not valid, halfmesh prints one line that names the
first problem it finds, and it exits with status 0:

- `aberta`: some half-edge has no proper twin on another face, so the
  mesh is open.
- `não subdivisão planar`: some edge does not border exactly two faces.
- `superposta`: two edges that share no vertex cross each other.

When the input cannot be read (missing counts or coordinates, or
negative counts), halfmesh writes `erro: falha ao carregar entrada` to
stderr and exits with status 1.

## Drawing

```
halfmesh-draw < mesh.txt
```

This writes `input_mesh.svg` to the current directory. The file shows
the faces of the input and the vertex numbers. It then runs `halfmesh`
on the same mesh in a child Python process and reads what that process
prints. If the mesh is valid, it also writes `dcel_structure.svg`, which
shows the half-edges as numbered arrows, the vertices, and a label for
each face. If the mesh is rejected, it prints
`Mesh validation failed: <reason>` and draws only the input. Open the
files in a web browser to view them.

## Library use

```python
import sys

from halfmesh.dcel import DCEL, InvalidMeshError

with open("mesh.txt", encoding="utf-8") as handle:
    dcel = DCEL.from_text(handle.read())
try:
    dcel.validate()
except InvalidMeshError as err:
    print(err.reason)
else:
    sys.stdout.write(dcel.format())
```

- `halfmesh.geometry`: `Point`, `Orientation`, and the predicates
  `orientation`, `on_segment` and `segments_intersect`.
- `halfmesh.dcel`: `parse_mesh` reads mesh text. `DCEL.build(points,
  faces)` builds a DCEL from `(x, y)` points and faces given as 1-based
  vertex numbers, and `DCEL.from_text` does the same from text. There
  are three checks, `has_open_edges`, `is_non_planar_subdivision` and
  `has_intersecting_faces`. `validate` runs them in that order and
  raises `InvalidMeshError`. `format` renders the output text and
  `edge_count` gives the number of edges. A read error raises
  `MeshError`, which is a subclass of `ValueError`.
- `halfmesh.draw`: `read_input`, `format_input` and `parse_dcel_output`
  read and write the text formats. `run_mesher(mesh, command)` sends a
  mesh to a mesher command and returns a `DrawnDCEL`, or `None`. By
  default the command is the `halfmesh` entry point. `SVGDrawer`
  renders SVG text with `render_input_mesh` and `render_dcel`, and
  writes files with `draw_input_mesh` and `draw_dcel`.