"""Command line entry point: read a mesh, validate it and print its DCEL."""

from __future__ import annotations

import argparse
import sys

from .dcel import DCEL, InvalidMeshError, MeshError


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="halfmesh",
        description="Read a polygon mesh from standard input and print its DCEL.",
    )
    parser.parse_args(argv)

    try:
        mesh = DCEL.from_text(sys.stdin.read())
    except MeshError:
        print("erro: falha ao carregar entrada", file=sys.stderr)
        return 1

    try:
        mesh.validate()
    except InvalidMeshError as exc:
        print(exc.reason)
        return 0

    sys.stdout.write(mesh.format())
    return 0


if __name__ == "__main__":
    sys.exit(main())