"""Planar points and segment predicates on integer coordinates."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Point:
    """A point with integer coordinates."""

    x: int = 0
    y: int = 0

    def __iter__(self) -> Iterator[int]:
        yield self.x
        yield self.y


class Orientation(enum.Enum):
    """Turn direction of an ordered triple of points."""

    COLLINEAR = enum.auto()
    CLOCKWISE = enum.auto()
    COUNTERCLOCKWISE = enum.auto()


def orientation(a: Point, b: Point, c: Point) -> Orientation:
    """Classify the turn a -> b -> c."""
    value = (b.y - a.y) * (c.x - b.x) - (b.x - a.x) * (c.y - b.y)
    if value == 0:
        return Orientation.COLLINEAR
    return Orientation.COUNTERCLOCKWISE if value > 0 else Orientation.CLOCKWISE


def on_segment(p: Point, q: Point, r: Point) -> bool:
    """Return True if q lies in the bounding box of segment p-r."""
    return (
        min(p.x, r.x) <= q.x <= max(p.x, r.x)
        and min(p.y, r.y) <= q.y <= max(p.y, r.y)
    )


def segments_intersect(p1: Point, q1: Point, p2: Point, q2: Point) -> bool:
    """Return True if segments p1-q1 and p2-q2 meet, ignoring shared endpoints."""
    if p1 == p2 or p1 == q2 or q1 == p2 or q1 == q2:
        return False

    o1 = orientation(p1, q1, p2)
    o2 = orientation(p1, q1, q2)
    o3 = orientation(p2, q2, p1)
    o4 = orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True

    collinear = Orientation.COLLINEAR
    return (
        (o1 is collinear and on_segment(p1, p2, q1))
        or (o2 is collinear and on_segment(p1, q2, q1))
        or (o3 is collinear and on_segment(p2, p1, q2))
        or (o4 is collinear and on_segment(p2, q1, q2))
    )