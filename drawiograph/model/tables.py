"""
Table module

Tables built from primitive cells: a container vertex carrying a table descriptor
in its custom data, plus header and data child vertices addressed by ID
("{table}_header_c{col}", "{table}_r{row}_c{col}"). Structural edits keep IDs,
child geometry and the container size consistent.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..config import ROOT_PARENT, DiagramConfig
from ..errors import InvalidArgumentError, NotFoundError
from ..logger import DiagramLogger
from ..mapping.shape_map import KIND_RECTANGLE
from ..mapping.style_map import StyleInput
from .cells import Cell, Geometry
from .graph import Graph, edge_ids
from .query import TableFilter

# Key of the table descriptor inside the container's custom data
TABLE_KEY = 'table'

CONTAINER_STYLE: Dict[str, Any] = {
    'rounded': '0',
    'fillColor': 'none',
    'container': '1',
    'collapsible': '0',
    'recursiveResize': '0',
}
HEADER_STYLE: Dict[str, Any] = {
    'rounded': '0',
    'fillColor': '#dae8fc',
    'strokeColor': '#6c8ebf',
    'fontStyle': '1',
}
DATA_CELL_STYLE: Dict[str, Any] = {
    'rounded': '0',
}

ColumnRef = Union[str, int]


def header_cell_id(table_id: str, col: int) -> str:
    return f"{table_id}_header_c{col}"


def data_cell_id(table_id: str, row: int, col: int) -> str:
    return f"{table_id}_r{row}_c{col}"


def _cell_patterns(table_id: str) -> Tuple["re.Pattern[str]", "re.Pattern[str]"]:
    escaped = re.escape(table_id)
    return (
        re.compile(rf"^{escaped}_header_c(\d+)$"),
        re.compile(rf"^{escaped}_r(\d+)_c(\d+)$"),
    )


@dataclass
class TableInfo:
    """Snapshot of a table's structure and content"""
    id: str
    title: str
    columns: List[str]
    rows: List[List[str]]
    cell_width: float
    cell_height: float
    x: float = 0.0
    y: float = 0.0
    # Container custom data without the table descriptor
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'columns': list(self.columns),
            'rows': [list(r) for r in self.rows],
            'cellWidth': self.cell_width,
            'cellHeight': self.cell_height,
            'x': self.x,
            'y': self.y,
            'data': dict(self.data),
        }


def table_descriptor(cell: Optional[Cell]) -> Optional[Dict[str, Any]]:
    """Return the table descriptor of a container cell, or None if it is not a table"""
    if cell is None or not cell.vertex:
        return None
    data = cell.custom_data
    if not isinstance(data, dict):
        return None
    descriptor = data.get(TABLE_KEY)
    if not isinstance(descriptor, dict):
        return None
    columns = descriptor.get('columns')
    if not isinstance(columns, list) or not columns:
        return None
    try:
        float(descriptor.get('cellWidth'))
        float(descriptor.get('cellHeight'))
    except (TypeError, ValueError):
        return None
    return descriptor


class TableEditor:
    """Table operations on a Graph"""

    def __init__(self, graph: Graph, logger: Optional[DiagramLogger] = None, config: Optional[DiagramConfig] = None):
        """
        Args:
            graph: Graph holding the tables
            logger: DiagramLogger instance (defaults to the graph's logger)
            config: DiagramConfig instance (defaults to the graph's config)
        """
        self.graph = graph
        self.logger = logger or graph.logger
        self.config = config or graph.config

    # ---- Internal helpers ----
    def _container(self, table_id: str) -> Tuple[Cell, Dict[str, Any]]:
        cell = self.graph.get_cell(table_id)
        if cell is None or not cell.vertex:
            raise NotFoundError(f"Table not found: {table_id}")
        descriptor = table_descriptor(cell)
        if descriptor is None:
            raise NotFoundError(f"Cell '{table_id}' is not a table")
        return cell, descriptor

    def _write_descriptor(self, container: Cell, columns: List[str], cell_width: float, cell_height: float):
        container.merge_custom_data({
            TABLE_KEY: {'columns': list(columns), 'cellWidth': cell_width, 'cellHeight': cell_height},
        })

    def _fit_container(self, container: Cell, n_cols: int, n_rows: int, cell_width: float, cell_height: float):
        """Container size = columns * cellWidth by (rows + 1) * cellHeight"""
        geometry = container.geometry or Geometry()
        geometry.width = float(n_cols * cell_width)
        geometry.height = float((n_rows + 1) * cell_height)
        container.geometry = geometry

    def _add_child(self, table_id: str, cell_id: str, value: str, col: int, row: Optional[int],
                   cell_width: float, cell_height: float):
        y = 0 if row is None else (row + 1) * cell_height
        self.graph.add_vertex(
            id=cell_id,
            label=value,
            parent=table_id,
            kind=KIND_RECTANGLE,
            x=col * cell_width,
            y=y,
            width=cell_width,
            height=cell_height,
            style=HEADER_STYLE if row is None else DATA_CELL_STYLE,
        )

    def _shift(self, table_id: str, mapping: Dict[str, str], cell_width: float, cell_height: float):
        """
        Rename cells, then move each renamed cell to the slot its new ID names

        Attached edges follow their cells but keep their IDs, so an edge ID may
        afterwards name the slot its endpoint left. Linking to that slot again
        updates the old edge; each such edge is reported as a stale_edge_id warning.
        """
        if not mapping:
            return
        self.graph.rename_cells(mapping)
        header_re, data_re = _cell_patterns(table_id)
        for new_id in mapping.values():
            cell = self.graph.get_cell(new_id)
            geometry = cell.geometry or Geometry()
            header_match = header_re.match(new_id)
            if header_match:
                geometry.x = float(int(header_match.group(1)) * cell_width)
                geometry.y = 0.0
            else:
                data_match = data_re.match(new_id)
                geometry.x = float(int(data_match.group(2)) * cell_width)
                geometry.y = float((int(data_match.group(1)) + 1) * cell_height)
            cell.geometry = geometry

        if self.logger:
            moved = set(mapping.values())
            for edge in self.graph.list_edges():
                if edge.source not in moved and edge.target not in moved:
                    continue
                if edge.id not in edge_ids(edge.source or '', edge.target or ''):
                    self.logger.warn_stale_edge_id(edge.id, edge.source, edge.target)

    def _existing(self, mapping: Dict[str, str]) -> Dict[str, str]:
        """Drop entries whose source cell is missing (tables edited by other means)"""
        return {old: new for old, new in mapping.items() if old in self.graph}

    @staticmethod
    def _insert_position(position: Optional[int], size: int, what: str) -> int:
        if position is None or position == -1:
            return size
        if not isinstance(position, int) or isinstance(position, bool) or not 0 <= position <= size:
            raise InvalidArgumentError(f"{what} position {position} out of range (0-{size})")
        return position

    @staticmethod
    def resolve_column(columns: Sequence[str], column: ColumnRef) -> int:
        """
        Resolve a column header or index to an index

        Raises:
            NotFoundError: Unknown header
            InvalidArgumentError: Index out of range
        """
        if isinstance(column, int) and not isinstance(column, bool):
            if not 0 <= column < len(columns):
                raise InvalidArgumentError(f"Column index {column} out of range (0-{len(columns) - 1})")
            return column
        try:
            return list(columns).index(column)
        except ValueError:
            raise NotFoundError(f"Column '{column}' not found. Available columns: {', '.join(columns)}") from None

    @staticmethod
    def _check_row(row: int, n_rows: int):
        if not isinstance(row, int) or isinstance(row, bool) or not 0 <= row < n_rows:
            raise InvalidArgumentError(f"Row index {row} out of range (0-{n_rows - 1})")

    # ---- Create / read ----
    def create_table(
        self,
        id: str,
        x: float,
        y: float,
        headers: Sequence[str],
        rows: Optional[Sequence[Sequence[Any]]] = None,
        cell_width: Optional[float] = None,
        cell_height: Optional[float] = None,
        data: Optional[Mapping[str, Any]] = None,
        title: Optional[str] = None,
        parent: Optional[str] = ROOT_PARENT,
    ) -> TableInfo:
        """
        Create a table

        Rows shorter than the header list are padded with empty strings.

        Raises:
            InvalidArgumentError: Empty header list or duplicate ID
        """
        if not headers:
            raise InvalidArgumentError("Table requires at least one header")
        rows = list(rows or [])
        cell_width = float(cell_width or self.config.default_cell_width)
        cell_height = float(cell_height or self.config.default_cell_height)

        container_data = dict(data or {})
        container_data[TABLE_KEY] = {
            'columns': [str(h) for h in headers],
            'cellWidth': cell_width,
            'cellHeight': cell_height,
        }
        self.graph.add_vertex(
            id=id,
            label=title,
            parent=parent,
            kind=KIND_RECTANGLE,
            x=x,
            y=y,
            width=len(headers) * cell_width,
            height=(len(rows) + 1) * cell_height,
            data=container_data,
            style=CONTAINER_STYLE,
        )
        for col, header in enumerate(headers):
            self._add_child(id, header_cell_id(id, col), str(header), col, None, cell_width, cell_height)
        for row_index, row in enumerate(rows):
            for col in range(len(headers)):
                value = row[col] if col < len(row) else ''
                self._add_child(id, data_cell_id(id, row_index, col), '' if value is None else str(value),
                                col, row_index, cell_width, cell_height)
        if self.logger:
            self.logger.debug(f"Created table {id} ({len(headers)} columns, {len(rows)} rows)")
        return self.read_table(id)

    def read_table(self, table_id: str) -> TableInfo:
        """
        Read a table's structure and content

        Rows are rebuilt from the cells whose IDs follow the table's naming
        scheme; missing cells read as empty strings.

        Raises:
            NotFoundError: No such table
        """
        container, descriptor = self._container(table_id)
        columns = [str(c) for c in descriptor['columns']]
        _, data_re = _cell_patterns(table_id)

        values: Dict[Tuple[int, int], str] = {}
        max_row = -1
        for cell_id, cell in self.graph.cells.items():
            if not cell.vertex:
                continue
            match = data_re.match(cell_id)
            if not match:
                continue
            row, col = int(match.group(1)), int(match.group(2))
            if col >= len(columns):
                if self.logger:
                    self.logger.warn_orphaned_cell(table_id, cell_id)
                continue
            values[(row, col)] = cell.value or ''
            max_row = max(max_row, row)

        rows = [[values.get((r, c), '') for c in range(len(columns))] for r in range(max_row + 1)]
        custom = container.custom_data
        geometry = container.geometry
        return TableInfo(
            id=table_id,
            title=container.value or '',
            columns=columns,
            rows=rows,
            cell_width=float(descriptor['cellWidth']),
            cell_height=float(descriptor['cellHeight']),
            x=geometry.x if geometry else 0.0,
            y=geometry.y if geometry else 0.0,
            data={k: v for k, v in custom.items() if k != TABLE_KEY},
        )

    # ---- Columns ----
    def insert_column(self, table_id: str, header: str, position: Optional[int] = None,
                      default_value: str = '') -> TableInfo:
        """Insert a column at position (append when None or -1)"""
        info = self.read_table(table_id)
        container, _ = self._container(table_id)
        n_cols, n_rows = len(info.columns), len(info.rows)
        p = self._insert_position(position, n_cols, 'Column')
        w, h = info.cell_width, info.cell_height

        mapping: Dict[str, str] = {}
        for col in range(p, n_cols):
            mapping[header_cell_id(table_id, col)] = header_cell_id(table_id, col + 1)
            for row in range(n_rows):
                mapping[data_cell_id(table_id, row, col)] = data_cell_id(table_id, row, col + 1)
        self._shift(table_id, self._existing(mapping), w, h)

        self._add_child(table_id, header_cell_id(table_id, p), header, p, None, w, h)
        for row in range(n_rows):
            self._add_child(table_id, data_cell_id(table_id, row, p), default_value, p, row, w, h)

        columns = list(info.columns)
        columns.insert(p, header)
        self._write_descriptor(container, columns, w, h)
        self._fit_container(container, len(columns), n_rows, w, h)
        return self.read_table(table_id)

    def rename_column(self, table_id: str, old_header: str, new_header: str) -> TableInfo:
        """Rename a column by its current header text; cell IDs are unchanged"""
        info = self.read_table(table_id)
        container, _ = self._container(table_id)
        if old_header not in info.columns:
            raise NotFoundError(f"Column '{old_header}' not found. Available columns: {', '.join(info.columns)}")
        index = info.columns.index(old_header)
        columns = list(info.columns)
        columns[index] = new_header
        self._write_descriptor(container, columns, info.cell_width, info.cell_height)
        header = self.graph.get_cell(header_cell_id(table_id, index))
        if header is not None:
            header.value = new_header
        return self.read_table(table_id)

    def remove_column(self, table_id: str, column: ColumnRef) -> TableInfo:
        """
        Remove a column by header text or index

        Raises:
            InvalidArgumentError: It is the only column
        """
        info = self.read_table(table_id)
        container, _ = self._container(table_id)
        index = self.resolve_column(info.columns, column)
        n_cols, n_rows = len(info.columns), len(info.rows)
        if n_cols == 1:
            raise InvalidArgumentError(f"Cannot remove the only column of table '{table_id}'")
        w, h = info.cell_width, info.cell_height

        doomed = [header_cell_id(table_id, index)] + [data_cell_id(table_id, r, index) for r in range(n_rows)]
        self.graph.remove_cells(doomed)

        mapping: Dict[str, str] = {}
        for col in range(index + 1, n_cols):
            mapping[header_cell_id(table_id, col)] = header_cell_id(table_id, col - 1)
            for row in range(n_rows):
                mapping[data_cell_id(table_id, row, col)] = data_cell_id(table_id, row, col - 1)
        self._shift(table_id, self._existing(mapping), w, h)

        columns = list(info.columns)
        columns.pop(index)
        self._write_descriptor(container, columns, w, h)
        self._fit_container(container, len(columns), n_rows, w, h)
        return self.read_table(table_id)

    # ---- Rows ----
    def insert_row(self, table_id: str, values: Sequence[Any], position: Optional[int] = None) -> TableInfo:
        """
        Insert a row at position (append when None or -1)

        Raises:
            InvalidArgumentError: Value count differs from the column count
        """
        info = self.read_table(table_id)
        container, _ = self._container(table_id)
        n_cols, n_rows = len(info.columns), len(info.rows)
        if len(values) != n_cols:
            raise InvalidArgumentError(
                f"Row has {len(values)} values but table '{table_id}' has {n_cols} columns"
            )
        p = self._insert_position(position, n_rows, 'Row')
        w, h = info.cell_width, info.cell_height

        mapping: Dict[str, str] = {}
        for row in range(n_rows - 1, p - 1, -1):
            for col in range(n_cols):
                mapping[data_cell_id(table_id, row, col)] = data_cell_id(table_id, row + 1, col)
        self._shift(table_id, self._existing(mapping), w, h)

        for col, value in enumerate(values):
            self._add_child(table_id, data_cell_id(table_id, p, col), '' if value is None else str(value),
                            col, p, w, h)
        self._fit_container(container, n_cols, n_rows + 1, w, h)
        return self.read_table(table_id)

    def remove_row(self, table_id: str, row: int) -> TableInfo:
        """Remove a row by index"""
        info = self.read_table(table_id)
        container, _ = self._container(table_id)
        n_cols, n_rows = len(info.columns), len(info.rows)
        self._check_row(row, n_rows)
        w, h = info.cell_width, info.cell_height

        self.graph.remove_cells([data_cell_id(table_id, row, c) for c in range(n_cols)])

        mapping: Dict[str, str] = {}
        for r in range(row + 1, n_rows):
            for col in range(n_cols):
                mapping[data_cell_id(table_id, r, col)] = data_cell_id(table_id, r - 1, col)
        self._shift(table_id, self._existing(mapping), w, h)

        self._fit_container(container, n_cols, n_rows - 1, w, h)
        return self.read_table(table_id)

    # ---- Cells ----
    def _data_cell(self, table_id: str, row: int, column: ColumnRef) -> str:
        """Resolve (row, column) to a data cell ID, recreating the cell if it went missing"""
        info = self.read_table(table_id)
        col = self.resolve_column(info.columns, column)
        self._check_row(row, len(info.rows))
        cell_id = data_cell_id(table_id, row, col)
        if cell_id not in self.graph:
            self._add_child(table_id, cell_id, '', col, row, info.cell_width, info.cell_height)
        return cell_id

    def update_cell(self, table_id: str, row: int, column: ColumnRef, value: Any) -> TableInfo:
        """Set the text of one data cell"""
        cell_id = self._data_cell(table_id, row, column)
        self.graph.get_cell(cell_id).value = '' if value is None else str(value)
        return self.read_table(table_id)

    def link_to_cell(
        self,
        from_id: str,
        table_id: str,
        row: int,
        column: ColumnRef,
        label: Optional[str] = None,
        style: StyleInput = None,
        undirected: bool = False,
    ) -> str:
        """Connect a vertex to a table data cell; returns the edge ID"""
        cell_id = self._data_cell(table_id, row, column)
        return self.graph.link_vertices(from_id, cell_id, label=label, style=style, undirected=undirected)

    # ---- Search ----
    def list_tables(self) -> List[TableInfo]:
        return [
            self.read_table(cell_id)
            for cell_id, cell in list(self.graph.cells.items())
            if table_descriptor(cell) is not None
        ]

    def find_tables(self, filters: Union[TableFilter, Mapping[str, Any], None] = None) -> List[TableInfo]:
        """Tables matching every given criterion"""
        if not isinstance(filters, TableFilter):
            filters = TableFilter.from_dict(filters)
        return [table for table in self.list_tables() if filters.matches(table)]

    # ---- Batch ----
    def apply(self, table_id: str, operations: Sequence[Mapping[str, Any]]) -> TableInfo:
        """
        Apply a list of operations in order

        Operation types: add_column, rename_column, remove_column, add_row,
        remove_row, update_cell. Operations already applied stay applied when a
        later one fails.
        """
        for op in operations:
            op_type = op.get('type')
            if op_type == 'add_column':
                if not op.get('header'):
                    raise InvalidArgumentError("add_column requires header field")
                self.insert_column(table_id, op['header'], op.get('position'), op.get('defaultValue') or '')
            elif op_type == 'rename_column':
                if not op.get('oldHeader') or not op.get('newHeader'):
                    raise InvalidArgumentError("rename_column requires oldHeader and newHeader fields")
                self.rename_column(table_id, op['oldHeader'], op['newHeader'])
            elif op_type == 'remove_column':
                if op.get('column') is None:
                    raise InvalidArgumentError("remove_column requires column field")
                self.remove_column(table_id, op['column'])
            elif op_type == 'add_row':
                if op.get('values') is None:
                    raise InvalidArgumentError("add_row requires values field")
                self.insert_row(table_id, op['values'], op.get('position'))
            elif op_type == 'remove_row':
                if op.get('row') is None:
                    raise InvalidArgumentError("remove_row requires row field")
                self.remove_row(table_id, op['row'])
            elif op_type == 'update_cell':
                if op.get('row') is None or op.get('column') is None or 'value' not in op:
                    raise InvalidArgumentError("update_cell requires row, column, and value fields")
                self.update_cell(table_id, op['row'], op['column'], op['value'])
            else:
                raise InvalidArgumentError(f"Unknown operation type: {op_type}")
        return self.read_table(table_id)
