import io
import sys
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

import halfmesh
from halfmesh.dcel import DCEL, InvalidMeshError, MeshError
from halfmesh.draw import (
    InputMesh,
    SVGDrawer,
    format_input,
    parse_dcel_output,
    read_input,
    run_mesher,
    main,
)
from halfmesh.geometry import Point

SVG_NS = "{http://www.w3.org/2000/svg}"
TRIANGLE = "3 2\n0 0\n10 0\n0 10\n1 2 3\n1 3 2\n"
OPEN_TRIANGLE = "3 1\n0 0\n10 0\n0 10\n1 2 3\n"


def _fake_command(output: str, code: int = 0) -> list[str]:
    script = (
        f"import sys; sys.stdin.read(); sys.stdout.write({output!r}); sys.exit({code})"
    )
    return [sys.executable, "-c", script]


def test_read_input_parses_vertices_and_faces():
    mesh = read_input(TRIANGLE)
    assert mesh.vertices == [Point(0, 0), Point(10, 0), Point(0, 10)]
    assert mesh.faces == [[1, 2, 3], [1, 3, 2]]
    assert mesh.n_vertices == 3
    assert mesh.n_faces == 2


def test_read_input_stops_at_junk_and_pads_missing_lines():
    mesh = read_input("2 2\n0 0\n1 1\n1 2 x 3\n")
    assert mesh.faces == [[1, 2], []]


def test_read_input_missing_counts_raises():
    with pytest.raises(MeshError):
        read_input("3")


def test_read_input_missing_coordinates_raises():
    with pytest.raises(MeshError):
        read_input("2 1\n0 0\n5\n")


def test_format_input_round_trip():
    mesh = read_input(TRIANGLE)
    assert format_input(mesh) == TRIANGLE
    assert read_input(format_input(mesh)) == mesh


def test_parse_dcel_output_round_trip_with_dcel_format():
    built = DCEL.from_text(TRIANGLE)
    parsed = parse_dcel_output(built.format())
    assert parsed.n_vertices == len(built.vertices)
    assert parsed.n_faces == len(built.faces)
    assert parsed.n_edges == built.edge_count()
    assert [v.point for v in parsed.vertices] == [v.position for v in built.vertices]
    assert len(parsed.half_edges) == 2 * parsed.n_edges
    for number, half_edge in enumerate(parsed.half_edges, start=1):
        assert parsed.half_edges[half_edge.twin - 1].twin == number
        assert parsed.half_edges[half_edge.next - 1].prev == number


@pytest.mark.parametrize(
    "reason",
    [InvalidMeshError.OPEN, InvalidMeshError.NON_PLANAR, InvalidMeshError.OVERLAPPING],
)
def test_parse_dcel_output_rejection_lines(reason):
    with pytest.raises(InvalidMeshError) as info:
        parse_dcel_output(reason + "\n")
    assert info.value.reason == reason


def test_parse_dcel_output_truncated_raises():
    with pytest.raises(MeshError):
        parse_dcel_output("3 3 2\n0 0 1\n")


def test_bounds_place_points_inside_margins():
    drawer = SVGDrawer()
    points = [Point(0, 0), Point(10, 0), Point(0, 10), Point(10, 10)]
    drawer.calculate_bounds(points)
    mapped = [drawer.transform(p) for p in points]
    assert min(p.x for p in mapped) == 50
    assert max(p.y for p in mapped) == 550
    assert all(0 <= p.x <= 800 and 0 <= p.y <= 600 for p in mapped)
    # y is flipped: higher mesh y is lower on the canvas
    assert drawer.transform(Point(0, 10)).y < drawer.transform(Point(0, 0)).y


def test_bounds_with_single_point_do_not_divide_by_zero():
    drawer = SVGDrawer()
    drawer.calculate_bounds([Point(5, 5)])
    assert drawer.transform(Point(5, 5)) == Point(50, 550)


def test_bounds_with_no_points_keep_previous_mapping():
    drawer = SVGDrawer()
    drawer.calculate_bounds([Point(0, 0), Point(10, 10)])
    before = drawer.transform(Point(3, 4))
    drawer.calculate_bounds([])
    assert drawer.transform(Point(3, 4)) == before


def test_render_input_mesh_structure():
    mesh = read_input(TRIANGLE)
    svg = SVGDrawer().render_input_mesh(mesh)
    assert svg.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
    assert svg.endswith("</svg>\n")
    assert "rgba(50,100,150,0.3)" in svg
    root = ET.fromstring(svg.encode("utf-8"))
    assert root.get("width") == "800"
    assert root.get("height") == "600"
    assert len(root.findall(f"{SVG_NS}polygon")) == mesh.n_faces
    assert len(root.findall(f"{SVG_NS}circle")) == mesh.n_vertices
    texts = [t.text for t in root.findall(f"{SVG_NS}text")]
    assert f"Vertices: {mesh.n_vertices}" in texts
    assert f"Faces: {mesh.n_faces}" in texts


def test_render_dcel_structure():
    dcel = parse_dcel_output(DCEL.from_text(TRIANGLE).format())
    svg = SVGDrawer().render_dcel(dcel)
    root = ET.fromstring(svg.encode("utf-8"))
    assert root.find(f"{SVG_NS}title").text == "DCEL Structure"
    assert len(root.findall(f"{SVG_NS}line")) == len(dcel.half_edges)
    assert len(root.findall(f"{SVG_NS}polygon")) == len(dcel.half_edges)
    assert len(root.findall(f"{SVG_NS}circle")) == dcel.n_vertices
    texts = [t.text for t in root.findall(f"{SVG_NS}text")]
    for number in range(1, dcel.n_faces + 1):
        assert f"F{number}" in texts
    assert f"Edges: {dcel.n_edges}" in texts
    assert "Blue arrows: Half-edges" in texts


def test_draw_input_mesh_writes_file(tmp_path, capsys):
    mesh = read_input(TRIANGLE)
    drawer = SVGDrawer()
    target = tmp_path / "mesh.svg"
    drawer.draw_input_mesh(mesh, target)
    assert target.read_text(encoding="utf-8") == SVGDrawer().render_input_mesh(mesh)
    assert f"Input mesh drawn to: {target}" in capsys.readouterr().out


def test_draw_dcel_writes_file(tmp_path, capsys):
    dcel = parse_dcel_output(DCEL.from_text(TRIANGLE).format())
    target = tmp_path / "dcel.svg"
    SVGDrawer().draw_dcel(dcel, target)
    assert target.read_text(encoding="utf-8") == SVGDrawer().render_dcel(dcel)
    assert f"DCEL drawn to: {target}" in capsys.readouterr().out


def test_run_mesher_parses_command_output():
    expected = DCEL.from_text(TRIANGLE).format()
    dcel = run_mesher(read_input(TRIANGLE), _fake_command(expected))
    assert dcel == parse_dcel_output(expected)


def test_run_mesher_failing_command_returns_none():
    assert run_mesher(read_input(TRIANGLE), _fake_command("", code=1)) is None


def test_run_mesher_reports_rejection(capsys):
    result = run_mesher(read_input(TRIANGLE), _fake_command("aberta\n"))
    assert result is None
    assert "Mesh validation failed: aberta" in capsys.readouterr().out


def test_run_mesher_missing_program_returns_none(tmp_path):
    missing = str(tmp_path / "no-such-program")
    assert run_mesher(InputMesh(), [missing]) is None


@pytest.fixture
def in_workdir(tmp_path, monkeypatch):
    root = Path(halfmesh.__file__).resolve().parent.parent
    monkeypatch.setenv("PYTHONPATH", str(root))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_main_draws_both_files(in_workdir, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(TRIANGLE))
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "DCEL is valid! Drawing DCEL structure..." in out
    assert (in_workdir / "input_mesh.svg").exists()
    assert "DCEL Structure" in (in_workdir / "dcel_structure.svg").read_text(encoding="utf-8")


def test_main_open_mesh_draws_input_only(in_workdir, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(OPEN_TRIANGLE))
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Mesh validation failed: aberta" in out
    assert "DCEL is not valid. Only input mesh was drawn." in out
    assert (in_workdir / "input_mesh.svg").exists()
    assert not (in_workdir / "dcel_structure.svg").exists()


def test_main_bad_input_fails(in_workdir, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))
    assert main([]) == 1
    assert not (in_workdir / "input_mesh.svg").exists()