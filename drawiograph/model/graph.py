"""
Graph model module

In-memory counterpart of an mxGraphModel: vertex creation/editing/removal,
best-effort kind reporting, vertex search and the edge upsert protocol
"""
import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..config import (
    LAYER_CELL_ID, ROOT_CELL_ID, ROOT_PARENT, DiagramConfig, default_config,
)
from ..errors import CellReferenceError, InvalidArgumentError, NotFoundError
from ..logger import DiagramLogger
from ..mapping.shape_map import (
    KIND_RECTANGLE, KIND_ROUNDED_RECTANGLE, PROP_ARC_SIZE,
    apply_corner_radius, infer_kind, resolve_kind,
)
from ..mapping.style_map import StyleInput, merge_styles, parse_style
from .cells import Cell, Geometry, VertexInfo
from .layout import LayoutEngine, validate_layout
from .query import VertexFilter

RESERVED_IDS = (ROOT_CELL_ID, LAYER_CELL_ID)

# Base style for every connection created through link_vertices
EDGE_BASE_STYLE: Dict[str, Any] = {
    'edgeStyle': 'none',
    'noEdgeStyle': 1,
    'orthogonal': 1,
    'html': 1,
}


class _Unset:
    """Marker for "argument not given" where None has a meaning of its own"""

    def __repr__(self) -> str:
        return 'UNSET'


UNSET: Any = _Unset()


def edge_ids(from_id: str, to_id: str) -> Tuple[str, str, str]:
    """
    Candidate IDs for a connection between two vertices

    Returns:
        (direct, reverse, canonical) where canonical orders the endpoints lexicographically
    """
    first, second = sorted((from_id, to_id))
    return f"{from_id}-2-{to_id}", f"{to_id}-2-{from_id}", f"{first}-2-{second}"


def effective_edge_style(style: StyleInput = None, undirected: bool = False) -> Dict[str, Any]:
    """
    Merge caller overrides over the base edge style

    Undirected edges lose both arrowheads; 'reverse' is dropped since
    undirected takes precedence over it.
    """
    effective = merge_styles(EDGE_BASE_STYLE, style)
    if undirected:
        effective['reverse'] = None
        effective['startArrow'] = 'none'
        effective['endArrow'] = 'none'
    return effective


class Graph:
    """Cell store for one diagram page"""

    def __init__(self, logger: Optional[DiagramLogger] = None, config: Optional[DiagramConfig] = None):
        """
        Args:
            logger: DiagramLogger instance (optional)
            config: DiagramConfig instance (uses default_config if None)
        """
        self.config = config or default_config
        self.logger = logger
        self.cells: Dict[str, Cell] = {}
        # Attributes of the <mxGraphModel> element (grid, page size, ...)
        self.model_attributes: Dict[str, str] = {}
        self._next_id = 2
        self.cells[ROOT_CELL_ID] = Cell(id=ROOT_CELL_ID)
        self.cells[LAYER_CELL_ID] = Cell(id=LAYER_CELL_ID, parent=ROOT_CELL_ID)

    # ---- Lookup ----
    def get_cell(self, cell_id: Optional[str]) -> Optional[Cell]:
        if cell_id is None:
            return None
        return self.cells.get(cell_id)

    def __contains__(self, cell_id: str) -> bool:
        return cell_id in self.cells

    def is_layer(self, cell: Cell) -> bool:
        return cell.parent == ROOT_CELL_ID and not cell.vertex and not cell.edge

    @property
    def vertex_count(self) -> int:
        return sum(1 for c in self.cells.values() if c.vertex)

    @property
    def edge_count(self) -> int:
        return sum(1 for c in self.cells.values() if c.edge)

    def create_id(self) -> str:
        """Generate an unused numeric cell ID"""
        while str(self._next_id) in self.cells:
            self._next_id += 1
        new_id = str(self._next_id)
        self._next_id += 1
        return new_id

    def add_cell(self, cell: Cell) -> Cell:
        """Insert a prepared cell (IDs must be unique)"""
        if cell.id in self.cells:
            raise InvalidArgumentError(f"Cell ID already exists: {cell.id}")
        self.cells[cell.id] = cell
        return cell

    def _resolve_parent(self, parent: Optional[str]) -> str:
        if parent is None or parent == ROOT_PARENT:
            return LAYER_CELL_ID
        cell = self.cells.get(parent)
        if cell is None or not (cell.vertex or self.is_layer(cell)):
            raise CellReferenceError(f"Parent not found: {parent}")
        return parent

    # ---- Vertices ----
    def add_vertex(
        self,
        id: Optional[str] = None,
        label: Optional[str] = None,
        parent: Optional[str] = ROOT_PARENT,
        kind: str = KIND_RECTANGLE,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        corner_radius: Any = None,
        data: Optional[Mapping[str, Any]] = None,
        style: StyleInput = None,
    ) -> Cell:
        """
        Add a vertex

        Args:
            id: Cell ID (generated when None)
            label: Display label
            parent: Parent vertex ID, or "root" for the default layer
            kind: Kind name (see KIND_CATALOG); known misspellings are accepted
            x, y: Position relative to the parent (config defaults when None)
            width, height: Size overrides (kind defaults when None)
            corner_radius: RoundedRectangle corner radius in px
            data: Custom data mapping stored with the cell
            style: Style overrides merged over the kind template

        Returns:
            The created cell

        Raises:
            CellReferenceError: Parent does not exist
            InvalidArgumentError: Unknown kind or duplicate ID
        """
        template = resolve_kind(kind)
        parent_id = self._resolve_parent(parent)
        if id is None:
            id = self.create_id()
        elif id in self.cells:
            raise InvalidArgumentError(f"Cell ID already exists: {id}")

        overrides = parse_style(style)
        cell_style = merge_styles(template.style, overrides)
        if template.name == KIND_ROUNDED_RECTANGLE and (corner_radius is not None or PROP_ARC_SIZE not in overrides):
            apply_corner_radius(cell_style, corner_radius, self.config.default_corner_radius)

        cell = Cell(
            id=id,
            value=label,
            style=cell_style,
            vertex=True,
            parent=parent_id,
            geometry=Geometry(
                x=float(self.config.default_x if x is None else x),
                y=float(self.config.default_y if y is None else y),
                width=float(template.width if width is None else width),
                height=float(template.height if height is None else height),
            ),
        )
        if isinstance(data, Mapping):
            cell.set_custom_data(dict(data))
        self.cells[id] = cell
        if self.logger:
            self.logger.debug(f"Added vertex {id} ({template.name}) under {parent_id}")
        return cell

    def edit_vertex(
        self,
        id: str,
        label: Optional[str] = None,
        kind: Optional[str] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        corner_radius: Any = None,
        data: Any = UNSET,
    ) -> Cell:
        """
        Edit a vertex in place

        A new kind replaces the whole style with the kind template. The corner
        radius is rewritten when given (or reset to the default when the kind
        changes to RoundedRectangle). Geometry fields left as None keep their
        values. data=None removes custom data, a mapping is shallow-merged and
        UNSET leaves it untouched.

        Raises:
            NotFoundError: No vertex with this ID
        """
        cell = self.cells.get(id)
        if cell is None or not cell.vertex:
            raise NotFoundError(f"Node not found: {id}")

        if label is not None:
            cell.value = label

        if kind is not None:
            template = resolve_kind(kind)
            cell.style = template.new_style()
            effective_kind = template.name
        else:
            effective_kind = infer_kind(cell.style)

        if effective_kind == KIND_ROUNDED_RECTANGLE and (corner_radius is not None or kind is not None):
            apply_corner_radius(cell.style, corner_radius, self.config.default_corner_radius)

        if x is not None or y is not None or width is not None or height is not None:
            geometry = cell.geometry or Geometry()
            geometry.x = float(geometry.x if x is None else x)
            geometry.y = float(geometry.y if y is None else y)
            geometry.width = float(geometry.width if width is None else width)
            geometry.height = float(geometry.height if height is None else height)
            cell.geometry = geometry

        if data is None:
            cell.set_custom_data(None)
        elif isinstance(data, Mapping):
            cell.merge_custom_data(dict(data))
        elif data is not UNSET:
            raise InvalidArgumentError(f"Custom data must be a mapping or None, got {type(data).__name__}")
        return cell

    def _collect_subtree(self, root_id: str, children: Dict[str, List[str]], out: set):
        stack = [root_id]
        while stack:
            current = stack.pop()
            if current in out:
                continue
            out.add(current)
            stack.extend(children.get(current, []))

    def remove_cells(self, ids: Iterable[str], include_edges: bool = False) -> List[str]:
        """
        Remove cells and their descendants

        Edges attached to removed vertices are kept (and reported as dangling)
        unless include_edges is True.

        Returns:
            IDs of removed cells, in model order
        """
        children: Dict[str, List[str]] = {}
        for cell in self.cells.values():
            if cell.parent is not None:
                children.setdefault(cell.parent, []).append(cell.id)

        doomed: set = set()
        for cell_id in ids:
            if cell_id in RESERVED_IDS:
                if self.logger:
                    self.logger.debug(f"Refusing to remove reserved cell {cell_id}")
                continue
            if cell_id not in self.cells:
                if self.logger:
                    self.logger.debug(f"Remove skipped unknown cell {cell_id}")
                continue
            self._collect_subtree(cell_id, children, doomed)

        if include_edges:
            for cell in self.cells.values():
                if cell.edge and (cell.source in doomed or cell.target in doomed):
                    self._collect_subtree(cell.id, children, doomed)

        removed = [cid for cid in self.cells if cid in doomed]
        for cid in removed:
            del self.cells[cid]

        if self.logger and not include_edges:
            for cell in self.cells.values():
                if not cell.edge:
                    continue
                missing = [t for t in (cell.source, cell.target) if t is not None and t in doomed]
                if missing:
                    self.logger.warn_dangling_edge(cell.id, missing)
        return removed

    def rename_cells(self, mapping: Mapping[str, str]):
        """
        Rename several cells at once

        All new IDs are computed before any is applied, so shifting a range of
        IDs (r1→r2, r2→r3) never collides. Parent, source and target references
        follow the renamed cells.

        Raises:
            NotFoundError: A source ID does not exist
            InvalidArgumentError: Two cells would end up with the same ID
        """
        pending = {old: new for old, new in mapping.items() if old != new}
        if not pending:
            return
        for old in pending:
            if old not in self.cells:
                raise NotFoundError(f"Cell not found: {old}")
            if old in RESERVED_IDS:
                raise InvalidArgumentError(f"Reserved cell cannot be renamed: {old}")
        targets = list(pending.values())
        if len(set(targets)) != len(targets):
            raise InvalidArgumentError("Rename would create duplicate IDs")
        for new in targets:
            if new in self.cells and new not in pending:
                raise InvalidArgumentError(f"Cell ID already exists: {new}")

        renamed: Dict[str, Cell] = {}
        for cell_id, cell in self.cells.items():
            cell.id = pending.get(cell_id, cell_id)
            if cell.parent is not None:
                cell.parent = pending.get(cell.parent, cell.parent)
            if cell.source is not None:
                cell.source = pending.get(cell.source, cell.source)
            if cell.target is not None:
                cell.target = pending.get(cell.target, cell.target)
            renamed[cell.id] = cell
        self.cells = renamed

    def get_info(self, id: str) -> Optional[VertexInfo]:
        """
        Describe a vertex, or return None when the ID is absent or not a vertex

        The kind is inferred from the style and is best-effort only.
        """
        cell = self.cells.get(id)
        if cell is None or not cell.vertex:
            return None
        geometry = cell.geometry
        parent = cell.parent
        if parent is None or parent == LAYER_CELL_ID:
            parent = ROOT_PARENT
        return VertexInfo(
            id=cell.id,
            title=cell.value or '',
            kind=infer_kind(cell.style) if cell.style else KIND_RECTANGLE,
            x=geometry.x if geometry else 0,
            y=geometry.y if geometry else 0,
            width=geometry.width if geometry else 0,
            height=geometry.height if geometry else 0,
            parent=parent,
            data=cell.custom_data,
        )

    def list_vertices(self) -> List[VertexInfo]:
        """All vertices except the reserved root and layer cells"""
        return [
            self.get_info(cell_id)
            for cell_id, cell in self.cells.items()
            if cell.vertex and cell_id not in RESERVED_IDS
        ]

    def list_edges(self) -> List[Cell]:
        return [cell for cell in self.cells.values() if cell.edge]

    def find_vertices(self, filters: Union[VertexFilter, Mapping[str, Any], None] = None) -> List[VertexInfo]:
        """Vertices matching every given criterion"""
        if not isinstance(filters, VertexFilter):
            filters = VertexFilter.from_dict(filters)
        return [info for info in self.list_vertices() if filters.matches(info)]

    # ---- Edges ----
    def link_vertices(
        self,
        from_id: str,
        to_id: str,
        label: Optional[str] = None,
        style: StyleInput = None,
        undirected: bool = False,
    ) -> str:
        """
        Create or update the connection between two vertices

        An existing edge stored under the direct, reverse or canonical ID (in
        that order) is updated in place: its label (when given) and style are
        rewritten and its ID is kept. Otherwise a new edge is created with the
        canonical ID for undirected links and the direct ID for directed ones.

        Returns:
            ID of the created or updated edge

        Raises:
            NotFoundError: An endpoint does not exist
        """
        for endpoint in (from_id, to_id):
            cell = self.cells.get(endpoint)
            if cell is None or not cell.vertex:
                raise NotFoundError(f"Node not found: {endpoint}")

        id_direct, id_reverse, id_canonical = edge_ids(from_id, to_id)
        effective = effective_edge_style(style, undirected)

        link = None
        for candidate in (id_direct, id_reverse, id_canonical):
            existing = self.cells.get(candidate)
            if existing is not None and existing.edge:
                link = existing
                break

        if link is not None:
            if label is not None:
                link.value = label
            if self.logger:
                self.logger.debug(f"Updated edge {link.id}")
        else:
            link = self.add_cell(Cell(
                id=id_canonical if undirected else id_direct,
                value=label if label else None,
                edge=True,
                parent=LAYER_CELL_ID,
                source=from_id,
                target=to_id,
                geometry=Geometry(relative=True),
            ))
            if self.logger:
                self.logger.debug(f"Created edge {link.id}")
        link.style = effective
        return link.id

    # ---- Layout ----
    def apply_layout(
        self,
        algorithm: str,
        options: Optional[Mapping[str, Any]] = None,
        engine: Optional[LayoutEngine] = None,
    ) -> "Graph":
        """
        Validate a layout request and hand it to an external layout engine

        Raises:
            InvalidArgumentError: Unsupported algorithm/direction, or no engine given
        """
        normalized = validate_layout(algorithm, options)
        if engine is None:
            raise InvalidArgumentError(f"No layout engine available for '{algorithm}'")
        engine(self, algorithm, normalized)
        return self

    # ---- Snapshot / serialization ----
    def clone(self) -> "Graph":
        """Independent deep copy, e.g. for snapshot-and-restore around a batch"""
        other = Graph(logger=self.logger, config=self.config)
        other.cells = {cid: cell.clone() for cid, cell in self.cells.items()}
        other.model_attributes = copy.deepcopy(self.model_attributes)
        other._next_id = self._next_id
        return other

    def to_xml(self) -> str:
        """Serialize to an <mxGraphModel> fragment"""
        from ..io.mxgraph_codec import encode_graph
        return encode_graph(self, pretty_print=self.config.pretty_print)

    @classmethod
    def from_xml(cls, xml: str, logger: Optional[DiagramLogger] = None,
                 config: Optional[DiagramConfig] = None) -> "Graph":
        """Rebuild a graph from an <mxGraphModel> fragment"""
        from ..io.mxgraph_codec import decode_graph
        return decode_graph(xml, logger=logger, config=config)
