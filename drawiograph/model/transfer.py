"""
Cross-document copy module

Copies vertices (optionally with the edges between them) and tables from one
Graph into another, remapping IDs and offsetting positions
"""
from typing import Dict, List, Mapping, Optional, Sequence

from ..errors import NotFoundError
from ..mapping.shape_map import KIND_ROUNDED_RECTANGLE, corner_radius_of
from .cells import VertexInfo
from .graph import Graph
from .tables import TABLE_KEY, TableEditor, TableInfo


def build_id_mapping(
    ids: Sequence[str],
    id_prefix: Optional[str] = None,
    id_mapping: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Final target ID per source ID

    An explicit mapping entry wins, then the prefix, otherwise the ID is kept.
    """
    id_mapping = id_mapping or {}
    result: Dict[str, str] = {}
    for source_id in ids:
        if id_mapping.get(source_id):
            result[source_id] = id_mapping[source_id]
        elif id_prefix:
            result[source_id] = id_prefix + source_id
        else:
            result[source_id] = source_id
    return result


def copy_vertices(
    source: Graph,
    ids: Sequence[str],
    target: Graph,
    offset_x: float = 0,
    offset_y: float = 0,
    id_prefix: Optional[str] = None,
    id_mapping: Optional[Mapping[str, str]] = None,
    copy_edges: bool = False,
) -> Dict[str, str]:
    """
    Copy vertices from source into target

    Each vertex keeps its kind, label, size and custom data; its position is
    shifted by (offset_x, offset_y). With copy_edges, every source edge whose
    endpoints are both copied is recreated between the copies (directed,
    default style, same label).

    Returns:
        Mapping of source ID → target ID

    Raises:
        NotFoundError: A source ID is not a vertex
    """
    infos: List[VertexInfo] = []
    for vertex_id in ids:
        info = source.get_info(vertex_id)
        if info is None:
            raise NotFoundError(f"Node '{vertex_id}' not found in source diagram")
        infos.append(info)

    final_mapping = build_id_mapping([info.id for info in infos], id_prefix, id_mapping)

    for info in infos:
        corner_radius = None
        if info.kind == KIND_ROUNDED_RECTANGLE:
            corner_radius = corner_radius_of(source.get_cell(info.id).style)
        target.add_vertex(
            id=final_mapping[info.id],
            label=info.title,
            kind=info.kind,
            x=info.x + offset_x,
            y=info.y + offset_y,
            width=info.width,
            height=info.height,
            corner_radius=corner_radius,
            data=info.data if isinstance(info.data, Mapping) else None,
        )

    if copy_edges:
        for edge in source.list_edges():
            if edge.source in final_mapping and edge.target in final_mapping:
                target.link_vertices(
                    final_mapping[edge.source],
                    final_mapping[edge.target],
                    label=edge.value or None,
                )

    if target.logger:
        target.logger.debug(f"Copied {len(infos)} vertices: {final_mapping}")
    return final_mapping


def copy_table(
    source: Graph,
    table_id: str,
    target: Graph,
    new_id: str,
    x: float,
    y: float,
    new_title: Optional[str] = None,
) -> TableInfo:
    """
    Recreate a table from source in target under a new ID and position

    Columns, rows, cell size and the container's custom data (without the
    table descriptor) are preserved. new_title replaces the container label.

    Raises:
        NotFoundError: No such table in source
    """
    info = TableEditor(source).read_table(table_id)
    data = {k: v for k, v in info.data.items() if k != TABLE_KEY}
    title = new_title if new_title is not None else info.title
    return TableEditor(target).create_table(
        id=new_id,
        x=x,
        y=y,
        headers=info.columns,
        rows=info.rows,
        cell_width=info.cell_width,
        cell_height=info.cell_height,
        data=data,
        title=title or None,
    )
