"""
mxGraphModel codec module

Serializes a Graph to an <mxGraphModel> fragment and rebuilds a Graph from one.
Styles are converted between dict and string form only here.
"""
import copy
from typing import Dict, List, Optional

from lxml import etree as ET

from ..config import LAYER_CELL_ID, ROOT_CELL_ID, DiagramConfig
from ..errors import InvalidArgumentError
from ..logger import DiagramLogger
from ..mapping.style_map import parse_style, stringify_style
from ..model.cells import Cell, Geometry
from ..model.graph import Graph

# Attributes mapped onto Cell fields; everything else is kept in Cell.attributes
_CELL_FIELDS = ("id", "value", "style", "vertex", "edge", "parent", "source", "target", "data")

# draw.io wraps cells carrying custom properties in one of these
_WRAPPER_TAGS = ("object", "UserObject")


def _format_number(value: float) -> str:
    """Format a coordinate the way draw.io writes it (no trailing .0)"""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _parse_number(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        return float(value)
    except ValueError:
        return 0.0


def _encode_geometry(parent: ET._Element, geometry: Geometry):
    geom = ET.SubElement(parent, "mxGeometry")
    for name in ("x", "y", "width", "height"):
        value = getattr(geometry, name)
        if value:
            geom.set(name, _format_number(value))
    if geometry.relative:
        geom.set("relative", "1")
    geom.set("as", "geometry")
    for child in geometry.children:
        geom.append(copy.deepcopy(child))


def encode_graph(graph: Graph, pretty_print: bool = True) -> str:
    """
    Serialize a graph to an <mxGraphModel> XML fragment

    Args:
        graph: Graph to serialize
        pretty_print: Indent the output

    Returns:
        XML text without declaration
    """
    model = ET.Element("mxGraphModel")
    for key, value in graph.model_attributes.items():
        model.set(key, value)
    root = ET.SubElement(model, "root")

    for cell in graph.cells.values():
        if cell.wrapper:
            # draw.io keeps id and label on the wrapper, the inner mxCell has neither
            holder = ET.SubElement(root, cell.wrapper)
            holder.set("id", cell.id)
            if cell.value is not None:
                holder.set("label", str(cell.value))
            for key, value in cell.wrapper_attributes.items():
                holder.set(key, value)
            el = ET.SubElement(holder, "mxCell")
        else:
            el = ET.SubElement(root, "mxCell")
            el.set("id", cell.id)
            if cell.value is not None:
                el.set("value", str(cell.value))
        if cell.style:
            el.set("style", stringify_style(cell.style))
        if cell.vertex:
            el.set("vertex", "1")
        if cell.edge:
            el.set("edge", "1")
        if cell.parent is not None:
            el.set("parent", cell.parent)
        if cell.source is not None:
            el.set("source", cell.source)
        if cell.target is not None:
            el.set("target", cell.target)
        if cell.data is not None:
            el.set("data", cell.data)
        for key, value in cell.attributes.items():
            el.set(key, value)
        if cell.geometry is not None:
            _encode_geometry(el, cell.geometry)

    return ET.tostring(model, pretty_print=pretty_print, encoding="unicode").strip()


def _decode_geometry(cell_el: ET._Element) -> Optional[Geometry]:
    for geom in cell_el.findall("mxGeometry"):
        if geom.attrib.get("as", "geometry") != "geometry":
            continue
        return Geometry(
            x=_parse_number(geom.attrib.get("x")),
            y=_parse_number(geom.attrib.get("y")),
            width=_parse_number(geom.attrib.get("width")),
            height=_parse_number(geom.attrib.get("height")),
            relative=geom.attrib.get("relative") == "1",
            children=[copy.deepcopy(child) for child in geom if isinstance(child.tag, str)],
        )
    return None


def _decode_cell(cell_el: ET._Element) -> Cell:
    attrib = cell_el.attrib
    style = attrib.get("style")
    return Cell(
        id=attrib.get("id"),
        value=attrib.get("value"),
        style=parse_style(style) if style else {},
        vertex=attrib.get("vertex") == "1",
        edge=attrib.get("edge") == "1",
        parent=attrib.get("parent"),
        source=attrib.get("source"),
        target=attrib.get("target"),
        geometry=_decode_geometry(cell_el),
        data=attrib.get("data"),
        attributes={k: v for k, v in attrib.items() if k not in _CELL_FIELDS},
    )


def _decode_wrapped_cell(wrapper: ET._Element, logger: Optional[DiagramLogger]) -> Optional[Cell]:
    """Unwrap <object>/<UserObject>: wrapper id/label win, the wrapper itself is kept for re-encoding"""
    inner = wrapper.find("mxCell")
    if inner is None:
        if logger:
            logger.debug(f"Skipping <{wrapper.tag}> without mxCell")
        return None
    cell = _decode_cell(inner)
    cell.id = wrapper.attrib.get("id", cell.id)
    cell.value = wrapper.attrib.get("label", cell.value)
    cell.wrapper = wrapper.tag
    cell.wrapper_attributes = {k: v for k, v in wrapper.attrib.items() if k not in ("id", "label")}
    return cell


def _find_model(element: ET._Element) -> Optional[ET._Element]:
    if element.tag == "mxGraphModel":
        return element
    return element.find(".//mxGraphModel")


def decode_graph(
    xml: str,
    logger: Optional[DiagramLogger] = None,
    config: Optional[DiagramConfig] = None,
) -> Graph:
    """
    Rebuild a graph from an <mxGraphModel> fragment

    Raises:
        InvalidArgumentError: Malformed XML or no mxGraphModel element
    """
    try:
        element = ET.fromstring(xml.encode("utf-8") if isinstance(xml, str) else xml)
    except ET.XMLSyntaxError as e:
        raise InvalidArgumentError(f"Malformed mxGraphModel: {e}") from e

    model = _find_model(element)
    if model is None:
        raise InvalidArgumentError("No mxGraphModel element found")

    graph = Graph(logger=logger, config=config)
    graph.model_attributes = dict(model.attrib)

    decoded: List[Cell] = []
    root = model.find("root")
    children = list(root) if root is not None else []
    for child in children:
        if not isinstance(child.tag, str):
            continue  # comments, processing instructions
        if child.tag == "mxCell":
            cell = _decode_cell(child)
        elif child.tag in _WRAPPER_TAGS:
            cell = _decode_wrapped_cell(child, logger)
        else:
            if logger:
                logger.debug(f"Skipping unsupported element <{child.tag}>")
            continue
        if cell is not None:
            decoded.append(cell)

    # Generated IDs must not collide with IDs that appear later in the model
    taken = {cell.id for cell in decoded if cell.id is not None}
    cells: Dict[str, Cell] = {}
    for cell in decoded:
        if cell.id is None:
            cell.id = graph.create_id()
            while cell.id in taken:
                cell.id = graph.create_id()
            taken.add(cell.id)
            if logger:
                logger.debug(f"Assigned ID {cell.id} to cell without id")
        if cell.id in cells:
            if logger:
                logger.debug(f"Duplicate cell ID {cell.id}; keeping the first")
            continue
        cells[cell.id] = cell

    # Every model needs the root and default layer cells
    reserved: Dict[str, Cell] = {}
    reserved[ROOT_CELL_ID] = cells.pop(ROOT_CELL_ID, None) or Cell(id=ROOT_CELL_ID)
    reserved[LAYER_CELL_ID] = cells.pop(LAYER_CELL_ID, None) or Cell(id=LAYER_CELL_ID, parent=ROOT_CELL_ID)
    reserved.update(cells)
    graph.cells = reserved

    if logger:
        logger.debug(f"Decoded {graph.vertex_count} vertices and {graph.edge_count} edges")
    return graph
