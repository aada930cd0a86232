"""
Unit tests for the graph model: vertices, edges, removal, renaming and layout requests.
"""
from __future__ import annotations

import pytest

from drawiograph.errors import CellReferenceError, InvalidArgumentError, NotFoundError
from drawiograph.logger import DiagramLogger
from drawiograph.model.graph import EDGE_BASE_STYLE, Graph, edge_ids, effective_edge_style


# ---- Construction ----
def test_new_graph_has_reserved_cells(graph: Graph) -> None:
    assert list(graph.cells) == ["0", "1"]
    assert graph.get_cell("1").parent == "0"
    assert graph.vertex_count == 0
    assert graph.edge_count == 0


def test_create_id_skips_used_ids(graph: Graph) -> None:
    graph.add_vertex(id="2")
    assert graph.create_id() == "3"


# ---- add_vertex ----
def test_add_vertex_defaults(graph: Graph) -> None:
    cell = graph.add_vertex(label="Box")
    info = graph.get_info(cell.id)
    assert info.kind == "Rectangle"
    assert (info.x, info.y, info.width, info.height) == (10, 10, 120, 60)
    assert info.parent == "root"
    assert info.title == "Box"
    assert cell.parent == "1"


def test_add_vertex_kind_size_and_position(graph: Graph) -> None:
    graph.add_vertex(id="e", kind="Ellipse", x=100, y=50)
    info = graph.get_info("e")
    assert info.kind == "Ellipse"
    assert (info.x, info.y, info.width, info.height) == (100, 50, 120, 80)


def test_add_vertex_misspelled_kind(graph: Graph) -> None:
    graph.add_vertex(id="e", kind="Elipse")
    assert graph.get_info("e").kind == "Ellipse"


def test_cloud_and_circle_vertices_report_ellipse(graph: Graph) -> None:
    graph.add_vertex(id="c", kind="Cloud")
    graph.add_vertex(id="o", kind="Circle")
    assert graph.get_cell("c").style["shape"] == "cloud"
    assert graph.get_info("c").kind == "Ellipse"
    assert graph.get_info("o").kind == "Ellipse"
    assert [v.id for v in graph.find_vertices({"kind": "Ellipse"})] == ["c", "o"]
    assert graph.find_vertices({"kind": "Cloud"}) == []


def test_add_vertex_unknown_kind_raises(graph: Graph) -> None:
    with pytest.raises(InvalidArgumentError):
        graph.add_vertex(kind="Hexagon")


def test_add_vertex_duplicate_id_raises(graph: Graph) -> None:
    graph.add_vertex(id="a")
    with pytest.raises(InvalidArgumentError):
        graph.add_vertex(id="a")


def test_add_vertex_missing_parent_raises(graph: Graph) -> None:
    with pytest.raises(CellReferenceError):
        graph.add_vertex(id="child", parent="nope")


def test_add_vertex_nested_parent(graph: Graph) -> None:
    graph.add_vertex(id="group")
    graph.add_vertex(id="child", parent="group")
    assert graph.get_info("child").parent == "group"


def test_add_vertex_rounded_rectangle_radius(graph: Graph) -> None:
    graph.add_vertex(id="r", kind="RoundedRectangle", corner_radius=5)
    style = graph.get_cell("r").style
    assert style["absoluteArcSize"] == "1"
    assert style["arcSize"] == "10"
    assert graph.get_info("r").kind == "RoundedRectangle"


def test_add_vertex_rounded_rectangle_invalid_radius_uses_default(graph: Graph) -> None:
    graph.add_vertex(id="r", kind="RoundedRectangle", corner_radius=-3)
    assert graph.get_cell("r").style["arcSize"] == "24"


def test_add_vertex_style_overrides(graph: Graph) -> None:
    graph.add_vertex(id="a", style="fillColor=#ff0000;")
    style = graph.get_cell("a").style
    assert style["fillColor"] == "#ff0000"
    assert style["rounded"] == "1"


def test_add_vertex_custom_data(graph: Graph) -> None:
    graph.add_vertex(id="a", data={"owner": "ops", "tier": 1})
    assert graph.get_info("a").data == {"owner": "ops", "tier": 1}


# ---- edit_vertex ----
def test_edit_vertex_label_and_geometry(graph: Graph) -> None:
    graph.add_vertex(id="a", label="Old", x=1, y=2)
    graph.edit_vertex("a", label="New", x=50)
    info = graph.get_info("a")
    assert info.title == "New"
    assert (info.x, info.y) == (50, 2)


def test_edit_vertex_empty_label_is_applied(graph: Graph) -> None:
    graph.add_vertex(id="a", label="Old")
    graph.edit_vertex("a", label="")
    assert graph.get_info("a").title == ""


def test_edit_vertex_kind_replaces_style(graph: Graph) -> None:
    graph.add_vertex(id="a", style={"fillColor": "#000"})
    graph.edit_vertex("a", kind="Cloud")
    cell = graph.get_cell("a")
    assert "fillColor" not in cell.style
    assert graph.get_info("a").kind == "Ellipse"


def test_edit_vertex_kind_to_rounded_rectangle_gets_default_radius(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.edit_vertex("a", kind="RoundedRectangle")
    assert graph.get_cell("a").style["arcSize"] == "24"


def test_edit_vertex_radius_only(graph: Graph) -> None:
    graph.add_vertex(id="a", kind="RoundedRectangle")
    graph.edit_vertex("a", corner_radius=20)
    assert graph.get_cell("a").style["arcSize"] == "40"


def test_edit_vertex_radius_ignored_for_other_kinds(graph: Graph) -> None:
    graph.add_vertex(id="a", kind="Ellipse")
    graph.edit_vertex("a", corner_radius=20)
    assert "arcSize" not in graph.get_cell("a").style


def test_edit_vertex_data_merge_and_remove(graph: Graph) -> None:
    graph.add_vertex(id="a", data={"x": 1})
    graph.edit_vertex("a", data={"y": 2})
    assert graph.get_info("a").data == {"x": 1, "y": 2}
    graph.edit_vertex("a", label="keep data")
    assert graph.get_info("a").data == {"x": 1, "y": 2}
    graph.edit_vertex("a", data=None)
    assert graph.get_info("a").data is None


def test_edit_vertex_missing_raises(graph: Graph) -> None:
    with pytest.raises(NotFoundError):
        graph.edit_vertex("ghost", label="x")


# ---- remove_cells ----
def test_remove_cells_removes_descendants(graph: Graph) -> None:
    graph.add_vertex(id="group")
    graph.add_vertex(id="child", parent="group")
    graph.add_vertex(id="other")
    removed = graph.remove_cells(["group"])
    assert removed == ["group", "child"]
    assert "other" in graph


def test_remove_cells_skips_reserved_and_unknown(graph: Graph) -> None:
    assert graph.remove_cells(["0", "1", "ghost"]) == []
    assert list(graph.cells) == ["0", "1"]


def test_remove_cells_leaves_dangling_edges_and_warns(graph: Graph, logger: DiagramLogger) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    edge_id = graph.link_vertices("a", "b")
    graph.remove_cells(["a"])
    assert edge_id in graph
    warnings = [w for w in logger.get_warnings() if w.warning_type == "dangling_edge"]
    assert [w.element_id for w in warnings] == [edge_id]
    assert warnings[0].details["missing"] == ["a"]


def test_remove_cells_include_edges(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    edge_id = graph.link_vertices("a", "b")
    removed = graph.remove_cells(["a"], include_edges=True)
    assert set(removed) == {"a", edge_id}
    assert graph.edge_count == 0


# ---- rename_cells ----
def test_rename_cells_shift_chain(graph: Graph) -> None:
    graph.add_vertex(id="c0", label="zero")
    graph.add_vertex(id="c1", label="one")
    graph.rename_cells({"c0": "c1", "c1": "c2"})
    assert graph.get_cell("c1").value == "zero"
    assert graph.get_cell("c2").value == "one"
    assert "c0" not in graph


def test_rename_cells_rewrites_references(graph: Graph) -> None:
    graph.add_vertex(id="p")
    graph.add_vertex(id="child", parent="p")
    graph.add_vertex(id="b")
    edge_id = graph.link_vertices("p", "b")
    graph.rename_cells({"p": "q"})
    assert graph.get_cell("child").parent == "q"
    assert graph.get_cell(edge_id).source == "q"


def test_rename_cells_collision_raises(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    with pytest.raises(InvalidArgumentError):
        graph.rename_cells({"a": "b"})
    with pytest.raises(NotFoundError):
        graph.rename_cells({"ghost": "x"})


# ---- Queries ----
def test_get_info_absent_or_edge_is_none(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    edge_id = graph.link_vertices("a", "b")
    assert graph.get_info("ghost") is None
    assert graph.get_info(edge_id) is None


def test_list_vertices_excludes_reserved_and_edges(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    graph.link_vertices("a", "b")
    assert [v.id for v in graph.list_vertices()] == ["a", "b"]


def test_find_vertices_with_dict_filters(graph: Graph) -> None:
    graph.add_vertex(id="svc-api", label="Public API", kind="Ellipse", x=0, y=0)
    graph.add_vertex(id="svc-db", label="Database", kind="Cylinder", x=300, y=0)
    graph.add_vertex(id="user", label="User", kind="Actor", x=0, y=200)
    assert [v.id for v in graph.find_vertices({"id_contains": "svc"})] == ["svc-api", "svc-db"]
    assert [v.id for v in graph.find_vertices({"title_contains": "api"})] == ["svc-api"]
    assert [v.id for v in graph.find_vertices({"kind": "Actor"})] == ["user"]
    assert [v.id for v in graph.find_vertices({"x_min": 100})] == ["svc-db"]
    assert len(graph.find_vertices(None)) == 3


# ---- Edges ----
def test_edge_ids() -> None:
    assert edge_ids("b", "a") == ("b-2-a", "a-2-b", "a-2-b")


def test_effective_edge_style_undirected() -> None:
    style = effective_edge_style({"reverse": 1, "strokeColor": "#f00"}, undirected=True)
    assert style["reverse"] is None
    assert style["startArrow"] == "none"
    assert style["endArrow"] == "none"
    assert style["strokeColor"] == "#f00"
    for key, value in EDGE_BASE_STYLE.items():
        assert style[key] == value


def test_link_vertices_creates_directed_edge(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    edge_id = graph.link_vertices("a", "b", label="calls")
    assert edge_id == "a-2-b"
    edge = graph.get_cell(edge_id)
    assert edge.edge and edge.source == "a" and edge.target == "b"
    assert edge.value == "calls"
    assert edge.parent == "1"
    assert edge.geometry.relative


def test_link_vertices_without_label_has_no_value(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    assert graph.get_cell(graph.link_vertices("a", "b")).value is None


def test_link_vertices_undirected_uses_canonical_id(graph: Graph) -> None:
    graph.add_vertex(id="z")
    graph.add_vertex(id="a")
    edge_id = graph.link_vertices("z", "a", undirected=True)
    assert edge_id == "a-2-z"
    edge = graph.get_cell(edge_id)
    assert edge.source == "z" and edge.target == "a"
    assert edge.style["endArrow"] == "none"


def test_link_vertices_reverse_updates_existing_edge(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    first = graph.link_vertices("a", "b", label="one")
    second = graph.link_vertices("b", "a", label="two")
    assert first == second == "a-2-b"
    assert graph.edge_count == 1
    edge = graph.get_cell(first)
    assert edge.value == "two"
    assert (edge.source, edge.target) == ("a", "b")


def test_link_vertices_update_keeps_label_when_not_given(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="b")
    graph.link_vertices("a", "b", label="keep", style={"strokeColor": "#f00"})
    graph.link_vertices("a", "b")
    edge = graph.get_cell("a-2-b")
    assert edge.value == "keep"
    assert "strokeColor" not in edge.style


def test_link_vertices_directed_after_undirected_reuses_edge(graph: Graph) -> None:
    graph.add_vertex(id="a")
    graph.add_vertex(id="m")
    graph.add_vertex(id="z")
    graph.link_vertices("z", "a", undirected=True)
    assert graph.link_vertices("a", "z") == "a-2-z"
    assert graph.edge_count == 1


def test_link_vertices_missing_endpoint_raises(graph: Graph) -> None:
    graph.add_vertex(id="a")
    with pytest.raises(NotFoundError):
        graph.link_vertices("a", "ghost")


# ---- Layout ----
def test_apply_layout_delegates_to_engine(graph: Graph) -> None:
    calls = []
    graph.apply_layout("hierarchical", {"direction": "left-right"},
                       engine=lambda g, algorithm, options: calls.append((g, algorithm, options)))
    assert calls == [(graph, "hierarchical", {"direction": "left-right", "mx_direction": "west"})]


def test_apply_layout_rejects_bad_requests(graph: Graph) -> None:
    noop = lambda g, algorithm, options: None  # noqa: E731
    with pytest.raises(InvalidArgumentError):
        graph.apply_layout("spiral", engine=noop)
    with pytest.raises(InvalidArgumentError):
        graph.apply_layout("hierarchical", {"direction": "diagonal"}, engine=noop)
    with pytest.raises(InvalidArgumentError):
        graph.apply_layout("circle")


# ---- Snapshot ----
def test_clone_is_independent(graph: Graph) -> None:
    graph.add_vertex(id="a", label="A")
    other = graph.clone()
    other.edit_vertex("a", label="changed")
    other.add_vertex(id="b")
    assert graph.get_info("a").title == "A"
    assert "b" not in graph
