"""SVG drawings of an input polygon mesh and of the DCEL built from it."""

from __future__ import annotations

import argparse
import math
import os
import re
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .dcel import InvalidMeshError, MeshError
from .geometry import Point

_INT = re.compile(r"\s*([+-]?\d+)")
_PADDING = 50.0
_ARROW_SIZE = 8.0
_FACE_WALK_LIMIT = 20
_VALIDATION_MESSAGES = (
    InvalidMeshError.OPEN,
    InvalidMeshError.NON_PLANAR,
    InvalidMeshError.OVERLAPPING,
)


@dataclass
class InputMesh:
    """Vertex positions and faces given as 1-based vertex indices."""

    vertices: list[Point] = field(default_factory=list)
    faces: list[list[int]] = field(default_factory=list)

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)


@dataclass
class DrawnVertex:
    point: Point
    half_edge: int


@dataclass
class DrawnHalfEdge:
    origin: int
    twin: int
    face: int
    next: int
    prev: int


@dataclass
class DrawnDCEL:
    """A DCEL as read back from the mesher's text output, 1-based references."""

    vertices: list[DrawnVertex] = field(default_factory=list)
    faces: list[int] = field(default_factory=list)
    half_edges: list[DrawnHalfEdge] = field(default_factory=list)
    n_edges: int = 0

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)


class _IntReader:
    """Pulls integers off a string one at a time."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def next(self, what: str) -> int:
        match = _INT.match(self.text, self.pos)
        if match is None:
            raise MeshError(f"missing {what}")
        self.pos = match.end()
        return int(match.group(1))


def _leading_ints(line: str) -> list[int]:
    values = []
    pos = 0
    while (match := _INT.match(line, pos)) is not None:
        values.append(int(match.group(1)))
        pos = match.end()
    return values


def read_input(text: str) -> InputMesh:
    """Read a mesh: counts, coordinates, then one face per line."""
    reader = _IntReader(text)
    n_vertices = reader.next("vertex count")
    n_faces = reader.next("face count")
    if n_vertices < 0 or n_faces < 0:
        raise MeshError("counts must not be negative")

    vertices = []
    for number in range(1, n_vertices + 1):
        x = reader.next(f"x coordinate of vertex {number}")
        y = reader.next(f"y coordinate of vertex {number}")
        vertices.append(Point(x, y))

    newline = text.find("\n", reader.pos)
    lines = [] if newline < 0 else text[newline + 1:].split("\n")
    lines += [""] * max(0, n_faces - len(lines))
    faces = [_leading_ints(line) for line in lines[:n_faces]]
    return InputMesh(vertices, faces)


def format_input(mesh: InputMesh) -> str:
    """Write a mesh back in the text form read_input accepts."""
    lines = [f"{mesh.n_vertices} {mesh.n_faces}"]
    lines.extend(f"{p.x} {p.y}" for p in mesh.vertices)
    lines.extend(" ".join(str(v) for v in face) for face in mesh.faces)
    return "\n".join(lines) + "\n"


def parse_dcel_output(text: str) -> DrawnDCEL:
    """Parse the mesher's output; raise InvalidMeshError for a rejection line."""
    first, _, rest = text.partition("\n")
    first = first.rstrip("\r")
    if first in _VALIDATION_MESSAGES:
        raise InvalidMeshError(first)

    header = _IntReader(first)
    n_vertices = header.next("vertex count")
    n_edges = header.next("edge count")
    n_faces = header.next("face count")
    if n_vertices < 0 or n_edges < 0 or n_faces < 0:
        raise MeshError("counts must not be negative")

    reader = _IntReader(rest)
    vertices = []
    for number in range(1, n_vertices + 1):
        what = f"vertex {number}"
        x, y, edge = (reader.next(what) for _ in range(3))
        vertices.append(DrawnVertex(Point(x, y), edge))
    faces = [reader.next(f"face {number}") for number in range(1, n_faces + 1)]
    half_edges = []
    for number in range(1, 2 * n_edges + 1):
        what = f"half-edge {number}"
        half_edges.append(DrawnHalfEdge(*(reader.next(what) for _ in range(5))))
    return DrawnDCEL(vertices, faces, half_edges, n_edges)


def run_mesher(mesh: InputMesh, command: Optional[Sequence[str]] = None) -> Optional[DrawnDCEL]:
    """Feed the mesh to the mesher command and parse its DCEL, or return None."""
    args = list(command) if command is not None else [sys.executable, "-m", "halfmesh.cli"]
    env = {**os.environ, "PYTHONIOENCODING": "utf-8"}
    try:
        result = subprocess.run(
            args,
            input=format_input(mesh),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=env,
            check=False,
        )
    except OSError:
        return None
    if result.returncode != 0:
        return None
    try:
        return parse_dcel_output(result.stdout)
    except InvalidMeshError as exc:
        print(f"Mesh validation failed: {exc.reason}")
        return None
    except MeshError:
        return None


def _num(value: float) -> str:
    return f"{value:g}"


def _half(total: int) -> int:
    quotient = abs(total) // 2
    return quotient if total >= 0 else -quotient


def _svg_header(width: float, height: float, title: str) -> list[str]:
    return [
        '<?xml version="1.0" encoding="UTF-8"?>\n',
        f'<svg width="{_num(width)}" height="{_num(height)}" '
        'xmlns="http://www.w3.org/2000/svg">\n',
        f"<title>{title}</title>\n",
    ]


def _legend(y: int, text: str, fill: str = "black", size: int = 12, bold: bool = False) -> str:
    weight = ' font-weight="bold"' if bold else ""
    return (
        f'<text x="10" y="{y}" font-family="Arial" font-size="{size}" '
        f'fill="{fill}"{weight}>{text}</text>\n'
    )


class SVGDrawer:
    """Maps mesh coordinates onto a fixed-size SVG canvas and draws them."""

    def __init__(self, width: float = 800, height: float = 600) -> None:
        self.width = float(width)
        self.height = float(height)
        self.scale = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0

    def calculate_bounds(self, vertices: Sequence[Point]) -> None:
        """Fit the given points into the canvas with a margin; y grows upward."""
        if not vertices:
            return
        min_x = min(v.x for v in vertices)
        max_x = max(v.x for v in vertices)
        min_y = min(v.y for v in vertices)
        max_y = max(v.y for v in vertices)
        range_x = (max_x - min_x) or 1
        range_y = (max_y - min_y) or 1
        self.scale = min(
            (self.width - 2 * _PADDING) / range_x,
            (self.height - 2 * _PADDING) / range_y,
        )
        self.offset_x = _PADDING - min_x * self.scale
        self.offset_y = self.height - _PADDING + min_y * self.scale

    def transform(self, point: Point) -> Point:
        return Point(
            int(point.x * self.scale + self.offset_x),
            int(self.offset_y - point.y * self.scale),
        )

    def render_input_mesh(self, mesh: InputMesh) -> str:
        out = _svg_header(self.width, self.height, "Input Mesh")
        self.calculate_bounds(mesh.vertices)

        for i, face in enumerate(mesh.faces):
            corners = (self.transform(mesh.vertices[v - 1]) for v in face)
            points = " ".join(f"{p.x},{p.y}" for p in corners)
            colour = f"{(50 + i * 40) % 255},{(100 + i * 60) % 255},{(150 + i * 80) % 255}"
            out.append(
                f'<polygon points="{points}" fill="rgba({colour},0.3)" '
                'stroke="black" stroke-width="2"/>\n'
            )

        for number, vertex in enumerate(mesh.vertices, start=1):
            p = self.transform(vertex)
            out.append(f'<circle cx="{p.x}" cy="{p.y}" r="5" fill="red"/>\n')
            out.append(
                f'<text x="{p.x + 8}" y="{p.y - 8}" font-family="Arial" '
                f'font-size="12" fill="black">{number}</text>\n'
            )

        out.append(_legend(30, "Input Mesh", size=16, bold=True))
        out.append(_legend(50, f"Vertices: {mesh.n_vertices}"))
        out.append(_legend(70, f"Faces: {mesh.n_faces}"))
        out.append("</svg>\n")
        return "".join(out)

    def _face_center(self, dcel: DrawnDCEL, face_ref: int) -> Point:
        start = face_ref - 1
        current = start
        corners = []
        while True:
            half_edge = dcel.half_edges[current]
            corners.append(dcel.vertices[half_edge.origin - 1].point)
            current = half_edge.next - 1
            if current == start or len(corners) >= _FACE_WALK_LIMIT:
                break
        center_x = sum(p.x for p in corners) / len(corners)
        center_y = sum(p.y for p in corners) / len(corners)
        return self.transform(Point(int(center_x), int(center_y)))

    def render_dcel(self, dcel: DrawnDCEL) -> str:
        out = _svg_header(self.width, self.height, "DCEL Structure")
        self.calculate_bounds([v.point for v in dcel.vertices])

        for number, half_edge in enumerate(dcel.half_edges, start=1):
            p1 = self.transform(dcel.vertices[half_edge.origin - 1].point)
            following = dcel.half_edges[half_edge.next - 1]
            p2 = self.transform(dcel.vertices[following.origin - 1].point)

            out.append(
                f'<line x1="{p1.x}" y1="{p1.y}" x2="{p2.x}" y2="{p2.y}" '
                'stroke="blue" stroke-width="1.5"/>\n'
            )

            dx = float(p2.x - p1.x)
            dy = float(p2.y - p1.y)
            length = math.hypot(dx, dy)
            if length > 0:
                dx /= length
                dy /= length
                mid_x = p1.x + dx * length * 0.7
                mid_y = p1.y + dy * length * 0.7
                size = _ARROW_SIZE
                tip = f"{_num(mid_x + dx * size)},{_num(mid_y + dy * size)}"
                left = (
                    f"{_num(mid_x - dx * size + dy * size * 0.5)},"
                    f"{_num(mid_y - dy * size - dx * size * 0.5)}"
                )
                right = (
                    f"{_num(mid_x - dx * size - dy * size * 0.5)},"
                    f"{_num(mid_y - dy * size + dx * size * 0.5)}"
                )
                out.append(f'<polygon points="{tip} {left} {right}" fill="blue"/>\n')

            label_x = _half(p1.x + p2.x)
            label_y = _half(p1.y + p2.y)
            out.append(
                f'<text x="{label_x}" y="{label_y}" font-family="Arial" font-size="10" '
                f'fill="darkblue" text-anchor="middle">{number}</text>\n'
            )

        for number, vertex in enumerate(dcel.vertices, start=1):
            p = self.transform(vertex.point)
            out.append(
                f'<circle cx="{p.x}" cy="{p.y}" r="6" fill="red" '
                'stroke="darkred" stroke-width="2"/>\n'
            )
            out.append(
                f'<text x="{p.x + 10}" y="{p.y - 10}" font-family="Arial" '
                f'font-size="12" fill="black" font-weight="bold">{number}</text>\n'
            )

        for number, face_ref in enumerate(dcel.faces, start=1):
            center = self._face_center(dcel, face_ref)
            out.append(
                f'<text x="{center.x}" y="{center.y}" font-family="Arial" '
                'font-size="14" fill="green" font-weight="bold" '
                f'text-anchor="middle">F{number}</text>\n'
            )

        out.append(_legend(30, "DCEL Structure", size=16, bold=True))
        out.append(_legend(50, f"Vertices: {dcel.n_vertices}"))
        out.append(_legend(70, f"Edges: {dcel.n_edges}"))
        out.append(_legend(90, f"Faces: {dcel.n_faces}"))
        out.append(_legend(110, "Blue arrows: Half-edges", fill="blue"))
        out.append(_legend(130, "Red circles: Vertices", fill="red"))
        out.append(_legend(150, "Green labels: Faces", fill="green"))
        out.append("</svg>\n")
        return "".join(out)

    def draw_input_mesh(self, mesh: InputMesh, filename) -> None:
        with open(filename, "w", encoding="utf-8") as handle:
            handle.write(self.render_input_mesh(mesh))
        print(f"Input mesh drawn to: {filename}")

    def draw_dcel(self, dcel: DrawnDCEL, filename) -> None:
        with open(filename, "w", encoding="utf-8") as handle:
            handle.write(self.render_dcel(dcel))
        print(f"DCEL drawn to: {filename}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="halfmesh-draw",
        description="Draw a mesh read from standard input, and its DCEL, as SVG files.",
    )
    parser.parse_args(argv)

    print("Reading input mesh...")
    try:
        mesh = read_input(sys.stdin.read())
    except MeshError as exc:
        print(f"erro: {exc}", file=sys.stderr)
        return 1

    drawer = SVGDrawer()
    drawer.draw_input_mesh(mesh, "input_mesh.svg")

    print("Running mesher to generate DCEL...")
    dcel = run_mesher(mesh)

    if dcel is not None:
        print("DCEL is valid! Drawing DCEL structure...")
        drawer.draw_dcel(dcel, "dcel_structure.svg")
        print("\nFiles generated:")
        print("- input_mesh.svg: Original mesh visualization")
        print("- dcel_structure.svg: DCEL structure visualization")
    else:
        print("DCEL is not valid. Only input mesh was drawn.")
        print("\nFile generated:")
        print("- input_mesh.svg: Original mesh visualization")

    print("\nOpen the SVG files in a web browser to view the drawings.")
    return 0


if __name__ == "__main__":
    sys.exit(main())