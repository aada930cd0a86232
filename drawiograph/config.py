"""
Configuration module

Defaults shared by the graph model, the table layer and the document store
"""
from dataclasses import dataclass

VERSION = "0.1.0"

# Reserved cell IDs written by draw.io for every diagram
ROOT_CELL_ID = "0"
LAYER_CELL_ID = "1"

# Sentinel accepted wherever a parent ID is expected; resolves to the default layer
ROOT_PARENT = "root"

DEFAULT_CORNER_RADIUS = 12
DEFAULT_TAB_NAME = "Page-1"
DEFAULT_CELL_WIDTH = 120
DEFAULT_CELL_HEIGHT = 30


@dataclass
class DiagramConfig:
    """Diagram editing configuration"""

    # Vertex placement when no position is given
    default_x: float = 10
    default_y: float = 10

    # Rounded rectangle radius in px (stored as arcSize = 2 * radius)
    default_corner_radius: int = DEFAULT_CORNER_RADIUS

    # Table cell size
    default_cell_width: float = DEFAULT_CELL_WIDTH
    default_cell_height: float = DEFAULT_CELL_HEIGHT

    # Document store
    default_tab_name: str = DEFAULT_TAB_NAME
    host: str = "drawiograph"
    agent: str = "drawiograph"
    pretty_print: bool = True

    # QA
    warn_dangling_edges: bool = True
    log_level: str = "INFO"


default_config = DiagramConfig()
