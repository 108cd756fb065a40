"""Doubly connected edge list built from a polygon mesh."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from itertools import combinations
from typing import Iterable, Optional, Sequence

from .geometry import Point, segments_intersect


class MeshError(ValueError):
    """The mesh description could not be read."""


class InvalidMeshError(MeshError):
    """The mesh does not form a valid planar subdivision."""

    OPEN = "aberta"
    NON_PLANAR = "não subdivisão planar"
    OVERLAPPING = "superposta"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass(eq=False)
class Vertex:
    position: Point
    index: int
    incident_edge: Optional[HalfEdge] = field(default=None, repr=False)


@dataclass(eq=False)
class Face:
    index: int
    outer_component: Optional[HalfEdge] = field(default=None, repr=False)


@dataclass(eq=False)
class HalfEdge:
    index: int = -1
    origin: Optional[Vertex] = field(default=None, repr=False)
    twin: Optional[HalfEdge] = field(default=None, repr=False)
    incident_face: Optional[Face] = field(default=None, repr=False)
    next: Optional[HalfEdge] = field(default=None, repr=False)
    prev: Optional[HalfEdge] = field(default=None, repr=False)

    def destination(self) -> Optional[Vertex]:
        """The vertex this half-edge points to, found through its twin."""
        return self.twin.origin if self.twin is not None else None

    def segment_start(self) -> Point:
        return self.origin.position if self.origin is not None else Point()

    def segment_end(self) -> Point:
        end = self.destination()
        return end.position if end is not None else Point()


class _Scanner:
    """Reads integers from text the way formatted C input does."""

    _INT = re.compile(r"\s*([+-]?\d+)")

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def read_int(self) -> Optional[int]:
        match = self._INT.match(self._text, self._pos)
        if match is None:
            return None
        self._pos = match.end()
        return int(match.group(1))

    def at_line_end(self) -> bool:
        """Consume one character and report whether it ended the line."""
        if self._pos >= len(self._text):
            return False
        char = self._text[self._pos]
        self._pos += 1
        if char == "\r" and self._text.startswith("\n", self._pos):
            self._pos += 1
            return True
        return char == "\n"


def parse_mesh(text: str) -> tuple[list[Point], list[list[int]]]:
    """Read vertex positions and 1-based face index lists from mesh text."""
    scanner = _Scanner(text)
    n_vertices = scanner.read_int()
    n_faces = scanner.read_int()
    if n_vertices is None or n_faces is None:
        raise MeshError("missing vertex and face counts")
    if n_vertices < 0 or n_faces < 0:
        raise MeshError("counts must not be negative")

    points = []
    for number in range(1, n_vertices + 1):
        x = scanner.read_int()
        y = scanner.read_int()
        if x is None or y is None:
            raise MeshError(f"missing coordinates for vertex {number}")
        points.append(Point(x, y))

    faces = []
    for _ in range(n_faces):
        indices = []
        while (value := scanner.read_int()) is not None:
            indices.append(value)
            if scanner.at_line_end():
                break
        faces.append(indices)
    return points, faces


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a <= b else (b, a)


@dataclass
class DCEL:
    """Vertices, faces and half-edges of a polygon mesh."""

    vertices: list[Vertex] = field(default_factory=list)
    faces: list[Face] = field(default_factory=list)
    half_edges: list[HalfEdge] = field(default_factory=list)
    face_vertex_indices: list[list[int]] = field(default_factory=list)

    @classmethod
    def build(cls, points: Iterable, faces: Iterable[Sequence[int]]) -> DCEL:
        """Build from (x, y) points and faces given as 1-based vertex indices."""
        mesh = cls()
        mesh.vertices = [
            Vertex(Point(int(x), int(y)), i) for i, (x, y) in enumerate(points)
        ]
        mesh.face_vertex_indices = [[v - 1 for v in face] for face in faces]
        mesh.faces = [Face(i) for i in range(len(mesh.face_vertex_indices))]
        mesh._create_half_edges()
        mesh._link_chains()
        return mesh

    @classmethod
    def from_text(cls, text: str) -> DCEL:
        points, faces = parse_mesh(text)
        return cls.build(points, faces)

    def _create_half_edges(self) -> None:
        edge_map: dict[tuple[int, int], list[Optional[HalfEdge]]] = {}
        n_vertices = len(self.vertices)

        for face, indices in zip(self.faces, self.face_vertex_indices):
            if len(indices) < 3:
                continue
            for start, end in zip(indices, indices[1:] + indices[:1]):
                if not (0 <= start < n_vertices and 0 <= end < n_vertices):
                    continue
                origin = self.vertices[start]
                half_edge = HalfEdge(
                    index=len(self.half_edges), origin=origin, incident_face=face
                )
                if origin.incident_edge is None:
                    origin.incident_edge = half_edge
                if face.outer_component is None:
                    face.outer_component = half_edge
                self.half_edges.append(half_edge)

                key = _edge_key(start, end)
                pair = edge_map.get(key)
                if pair is None:
                    edge_map[key] = [half_edge, None]
                elif pair[0].origin.index == start:
                    pair[1] = half_edge
                else:
                    pair[1] = pair[0]
                    pair[0] = half_edge

        for first, second in edge_map.values():
            if first is not None and second is not None:
                first.twin = second
                second.twin = first

    def _link_chains(self) -> None:
        by_face: dict[Face, dict[Vertex, HalfEdge]] = {}
        for half_edge in self.half_edges:
            by_face.setdefault(half_edge.incident_face, {}).setdefault(
                half_edge.origin, half_edge
            )

        total = len(self.half_edges)
        for face in self.faces:
            start = face.outer_component
            if start is None:
                continue
            starts_at = by_face.get(face, {})
            current = start
            visited = 0
            while True:
                visited += 1
                target = current.destination()
                following = starts_at.get(target) if target is not None else None
                current.next = following
                if following is not None:
                    following.prev = current
                current = following
                if current is None or current is start or visited >= total:
                    break

    def has_open_edges(self) -> bool:
        """True if some half-edge lacks a proper twin on another face."""
        for half_edge in self.half_edges:
            twin = half_edge.twin
            if twin is None or twin.twin is not half_edge:
                return True
            if half_edge.incident_face is twin.incident_face:
                return True
        return False

    def is_non_planar_subdivision(self) -> bool:
        """True if some edge does not border exactly two faces."""
        counts: dict[tuple[int, int], int] = {}
        for half_edge in self.half_edges:
            end = half_edge.destination()
            if half_edge.origin is None or end is None:
                continue
            key = _edge_key(half_edge.origin.index, end.index)
            counts[key] = counts.get(key, 0) + 1
        return any(count != 2 for count in counts.values())

    def has_intersecting_faces(self) -> bool:
        """True if two edges without a common vertex cross."""
        for first, second in combinations(self.half_edges, 2):
            if first.twin is second or second.twin is first:
                continue
            first_end = first.destination()
            second_end = second.destination()
            if (
                first.origin is second.origin
                or first.origin is second_end
                or first_end is second.origin
                or first_end is second_end
            ):
                continue
            if segments_intersect(
                first.segment_start(),
                first.segment_end(),
                second.segment_start(),
                second.segment_end(),
            ):
                return True
        return False

    def validate(self) -> None:
        """Raise InvalidMeshError naming the first defect found."""
        if self.has_open_edges():
            raise InvalidMeshError(InvalidMeshError.OPEN)
        if self.is_non_planar_subdivision():
            raise InvalidMeshError(InvalidMeshError.NON_PLANAR)
        if self.has_intersecting_faces():
            raise InvalidMeshError(InvalidMeshError.OVERLAPPING)

    def edge_count(self) -> int:
        return len(self.half_edges) // 2

    def format(self) -> str:
        """Render the structure as text with 1-based indices."""

        def ref(item) -> int:
            return item.index + 1 if item is not None else 1

        lines = [f"{len(self.vertices)} {self.edge_count()} {len(self.faces)}"]
        lines.extend(
            f"{v.position.x} {v.position.y} {ref(v.incident_edge)}"
            for v in self.vertices
        )
        lines.extend(str(ref(face.outer_component)) for face in self.faces)
        lines.extend(
            f"{ref(he.origin)} {ref(he.twin)} {ref(he.incident_face)} "
            f"{ref(he.next)} {ref(he.prev)}"
            for he in self.half_edges
        )
        return "\n".join(lines) + "\n"