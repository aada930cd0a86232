"""
drawiograph

Edit draw.io documents: typed shapes, deduplicated connections, cell-built
tables and multi-tab persistence
"""
from .config import VERSION as __version__

from .model.graph import Graph
from .model.tables import TableEditor
from .io.drawio_loader import DrawIOLoader
from .io.drawio_writer import DrawIOWriter

__all__ = ["Graph", "TableEditor", "DrawIOLoader", "DrawIOWriter", "__version__"]
