"""
Unit tests for the kind catalog, kind inference and corner radius handling.
"""
from __future__ import annotations

import pytest

from drawiograph.errors import InvalidArgumentError
from drawiograph.mapping.shape_map import (
    KIND_CATALOG,
    apply_corner_radius,
    coerce_corner_radius,
    corner_radius_of,
    infer_kind,
    normalize_kind,
    resolve_kind,
)


# ---- Catalog ----
def test_catalog_has_all_kinds() -> None:
    assert set(KIND_CATALOG) == {
        "Rectangle", "Ellipse", "Cylinder", "Cloud", "Square",
        "Circle", "Step", "Actor", "Text", "RoundedRectangle",
    }


@pytest.mark.parametrize(
    "kind, size",
    [
        ("Rectangle", (120, 60)),
        ("Ellipse", (120, 80)),
        ("Cylinder", (60, 80)),
        ("Square", (80, 80)),
        ("Actor", (30, 60)),
        ("Text", (60, 30)),
    ],
)
def test_catalog_default_sizes(kind: str, size: tuple) -> None:
    template = KIND_CATALOG[kind]
    assert (template.width, template.height) == size


def test_catalog_templates_are_immutable() -> None:
    template = KIND_CATALOG["Rectangle"]
    style = template.new_style()
    style["fillColor"] = "#f00"
    assert "fillColor" not in template.style
    with pytest.raises(TypeError):
        template.style["fillColor"] = "#f00"


def test_rounded_rectangle_template_default_radius() -> None:
    style = KIND_CATALOG["RoundedRectangle"].style
    assert style["absoluteArcSize"] == "1"
    assert style["arcSize"] == "24"


# ---- Names ----
def test_normalize_kind_fixes_known_misspelling() -> None:
    assert normalize_kind("Elipse") == "Ellipse"
    assert normalize_kind("Cloud") == "Cloud"
    assert normalize_kind(None) is None


def test_resolve_kind_accepts_alias() -> None:
    assert resolve_kind("Elipse").name == "Ellipse"


def test_resolve_kind_unknown_raises() -> None:
    with pytest.raises(InvalidArgumentError, match="Unknown kind"):
        resolve_kind("Hexagon")


# ---- Inference ----
@pytest.mark.parametrize(
    "kind, expected",
    [
        ("Rectangle", "Rectangle"),
        ("Ellipse", "Ellipse"),
        ("Cylinder", "Cylinder"),
        ("Cloud", "Ellipse"),
        ("Square", "Square"),
        ("Circle", "Ellipse"),
        ("Step", "Step"),
        ("Actor", "Actor"),
        ("Text", "Text"),
        ("RoundedRectangle", "RoundedRectangle"),
    ],
)
def test_infer_kind_from_every_template(kind: str, expected: str) -> None:
    assert infer_kind(KIND_CATALOG[kind].new_style()) == expected


def test_infer_kind_ellipse_flag_wins() -> None:
    assert infer_kind("ellipse;shape=cloud;") == "Ellipse"
    assert infer_kind("ellipse;aspect=fixed;") == "Ellipse"
    assert infer_kind("ellipse;shape=cylinder3;") == "Ellipse"
    assert infer_kind("ellipse;") == "Ellipse"


def test_infer_kind_shape_signatures_without_ellipse_flag() -> None:
    assert infer_kind("shape=cloud;") == "Cloud"
    assert infer_kind("shape=step;") == "Step"
    assert infer_kind("shape=umlActor;") == "Actor"
    assert infer_kind("aspect=fixed;") == "Square"


def test_infer_kind_plain_style_is_rectangle() -> None:
    assert infer_kind("fillColor=#fff;") == "Rectangle"
    assert infer_kind({}) == "Rectangle"


def test_infer_kind_rounded_without_absolute_arc_is_rectangle() -> None:
    assert infer_kind("rounded=1;arcSize=24;") == "Rectangle"


# ---- Corner radius ----
@pytest.mark.parametrize(
    "value, expected",
    [(None, 12), (5, 5), ("7", 7), (3.9, 3), (0, 12), (-4, 12), ("abc", 12), (True, 12)],
)
def test_coerce_corner_radius(value, expected: int) -> None:
    assert coerce_corner_radius(value) == expected


def test_apply_corner_radius_stores_diameter() -> None:
    style = {"rounded": "1"}
    apply_corner_radius(style, 8)
    assert style == {"rounded": "1", "absoluteArcSize": "1", "arcSize": "16"}


def test_corner_radius_of() -> None:
    assert corner_radius_of("rounded=1;absoluteArcSize=1;arcSize=20;") == 10
    assert corner_radius_of("rounded=1;arcSize=20;") is None
    assert corner_radius_of("absoluteArcSize=1;arcSize=x;") is None
