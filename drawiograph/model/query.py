"""
Query/filter module

Predicate-based matching for vertices and tables: exact and substring ID/title,
kind, inclusive position ranges, custom data subset and table structure
"""
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from .cells import VertexInfo


def data_matches(expected: Optional[Mapping[str, Any]], actual: Any) -> bool:
    """
    Return True when every key in expected is present in actual with an equal value

    A filter that asks for data never matches a candidate without data.
    """
    if expected is None:
        return True
    if not isinstance(actual, Mapping):
        return False
    for key, value in expected.items():
        if key not in actual or actual[key] != value:
            return False
    return True


def _in_range(value: float, lower: Optional[float], upper: Optional[float]) -> bool:
    if lower is not None and value < lower:
        return False
    if upper is not None and value > upper:
        return False
    return True


@dataclass
class VertexFilter:
    """Filter criteria for vertices; unset fields match everything"""
    id: Optional[str] = None
    id_contains: Optional[str] = None
    title: Optional[str] = None
    title_contains: Optional[str] = None
    kind: Optional[str] = None
    x_min: Optional[float] = None
    x_max: Optional[float] = None
    y_min: Optional[float] = None
    y_max: Optional[float] = None
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, filters: Optional[Mapping[str, Any]]) -> "VertexFilter":
        """Build a filter from snake_case keys, ignoring unknown keys"""
        if not filters:
            return cls()
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in filters.items() if k in names})

    def _match_common(self, node_id: str, title: str, data: Any) -> bool:
        if self.id and node_id != self.id:
            return False
        # ID substring match is case-sensitive, title substring match is not
        if self.id_contains and self.id_contains not in node_id:
            return False
        if self.title and title != self.title:
            return False
        if self.title_contains and self.title_contains.lower() not in title.lower():
            return False
        return data_matches(self.data, data)

    def matches(self, info: VertexInfo) -> bool:
        if not self._match_common(info.id, info.title, info.data):
            return False
        if self.kind and info.kind != self.kind:
            return False
        return _in_range(info.x, self.x_min, self.x_max) and _in_range(info.y, self.y_min, self.y_max)


@dataclass
class TableFilter(VertexFilter):
    """Filter criteria for tables"""
    has_column: Optional[str] = None
    row_count_min: Optional[int] = None
    row_count_max: Optional[int] = None

    def matches(self, table) -> bool:
        """
        Args:
            table: TableInfo (custom data excludes the table descriptor)
        """
        if not self._match_common(table.id, table.title, table.data):
            return False
        if not _in_range(table.x, self.x_min, self.x_max) or not _in_range(table.y, self.y_min, self.y_max):
            return False
        if self.has_column is not None and self.has_column not in table.columns:
            return False
        return _in_range(len(table.rows), self.row_count_min, self.row_count_max)
