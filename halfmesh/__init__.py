"""Doubly connected edge lists for polygon meshes: construction, validation and SVG drawing."""

__version__ = "0.1.0"
__all__ = ["cli", "dcel", "draw", "geometry"]