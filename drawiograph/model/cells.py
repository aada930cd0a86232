"""
Cell data model

mxCell counterparts held by a Graph: vertices and edges with geometry,
style, label, parent link and an optional custom data payload
"""
import copy
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lxml import etree as ET

# Wrapper attributes that belong to draw.io rather than to custom data
WRAPPER_RESERVED = ("placeholders",)


@dataclass
class Geometry:
    """mxGeometry of a cell (position relative to the parent cell)"""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    relative: bool = False
    # Child elements kept verbatim (edge waypoints, source/target points)
    children: List[ET._Element] = field(default_factory=list)


@dataclass
class Cell:
    """Vertex or edge stored in a Graph"""
    id: str
    value: Optional[str] = None
    style: Dict[str, Any] = field(default_factory=dict)
    vertex: bool = False
    edge: bool = False
    parent: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    geometry: Optional[Geometry] = None
    # Serialized JSON object, as persisted in the mxCell "data" attribute
    data: Optional[str] = None
    # Other mxCell attributes (connectable, collapsed, ...) kept for round-trip
    attributes: Dict[str, str] = field(default_factory=dict)
    # Enclosing <object>/<UserObject> tag and its attributes (id and label excluded)
    wrapper: Optional[str] = None
    wrapper_attributes: Dict[str, str] = field(default_factory=dict)

    def _wrapper_data(self) -> Dict[str, str]:
        return {k: v for k, v in self.wrapper_attributes.items() if k not in WRAPPER_RESERVED}

    @property
    def custom_data(self) -> Optional[Any]:
        """
        Parsed custom data, or the raw text when it is not valid JSON

        A wrapped cell without a data attribute reports its wrapper
        properties instead.
        """
        if self.data is None:
            return self._wrapper_data() or None
        try:
            return json.loads(self.data)
        except ValueError:
            return self.data

    def set_custom_data(self, data: Optional[Dict[str, Any]]):
        """Replace custom data; None removes it, wrapper properties included"""
        if data is None:
            self.data = None
            self.wrapper_attributes = {
                k: v for k, v in self.wrapper_attributes.items() if k in WRAPPER_RESERVED
            }
        else:
            self.data = json.dumps(data, ensure_ascii=False)

    def merge_custom_data(self, data: Dict[str, Any]):
        """Shallow-merge data into existing custom data"""
        existing = self.custom_data
        merged = dict(existing) if isinstance(existing, dict) else {}
        merged.update(data)
        self.set_custom_data(merged)

    def clone(self) -> "Cell":
        """Deep copy (geometry children included)"""
        return copy.deepcopy(self)


@dataclass
class VertexInfo:
    """Read-only view of a vertex as reported to callers"""
    id: str
    title: str
    kind: str
    x: float
    y: float
    width: float
    height: float
    parent: str
    data: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'id': self.id,
            'title': self.title,
            'kind': self.kind,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'parent': self.parent,
        }
        if self.data is not None:
            result['data'] = self.data
        return result
