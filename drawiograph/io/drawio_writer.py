"""
draw.io file writing module

Renders pages into an <mxfile> document and saves a Graph into one page of a
file, leaving every other page as it was
"""
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from ..config import VERSION, DiagramConfig, default_config
from ..logger import DiagramLogger
from ..model.graph import Graph
from .drawio_loader import DrawIOLoader
from .pages import Page, escape_name, new_page_id


class DrawIOWriter:
    """.drawio document writer"""

    def __init__(self, logger: Optional[DiagramLogger] = None, config: Optional[DiagramConfig] = None):
        """
        Args:
            logger: DiagramLogger instance
            config: DiagramConfig instance (uses default_config if None)
        """
        self.config = config or default_config
        self.logger = logger
        self.loader = DrawIOLoader(logger=logger, config=self.config)

    def render_document(self, pages: List[Page], timestamp: Optional[datetime] = None) -> str:
        """
        Render a complete .drawio document

        Args:
            pages: Pages in document order
            timestamp: Modification time (current UTC time when None)

        Returns:
            Document text ending with a newline
        """
        modified = (timestamp or datetime.now(timezone.utc)).isoformat()
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            f'<mxfile host="{escape_name(self.config.host)}" modified="{modified}" '
            f'agent="{escape_name(self.config.agent)}" version="{VERSION}">',
        ]
        for page in pages:
            body = page.raw if page.raw is not None else page.model_xml
            lines.append(f'  <diagram id="{escape_name(page.id)}" name="{escape_name(page.name)}">')
            lines.append(body)
            lines.append('  </diagram>')
        lines.append('</mxfile>')
        return '\n'.join(lines) + '\n'

    def _write_atomic(self, path: Path, content: str):
        """Write through a temporary file in the target directory, then replace"""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def save_graph(self, graph: Graph, path: Union[str, Path], tab: Optional[str] = None) -> Page:
        """
        Save a graph into one page of a file

        A missing file becomes a new single-page document. Otherwise the page
        named tab (the first page when tab is None) is replaced in place, or a
        new page is appended when no page has that name. Other pages are
        written back unchanged.

        Args:
            graph: Graph to save
            path: Output file path
            tab: Page name

        Returns:
            The written page
        """
        path = Path(path)
        model_xml = graph.to_xml()

        pages: List[Page] = []
        if path.exists():
            pages = self.loader.parse_pages(self.loader.read_file(path))

        if not pages:
            page = Page(id=new_page_id(), name=tab or self.config.default_tab_name, model_xml=model_xml)
            pages = [page]
        else:
            name = tab if tab is not None else pages[0].name
            page = next((p for p in pages if p.name == name), None)
            if page is None:
                page = Page(id=new_page_id(), name=name, model_xml=model_xml)
                pages.append(page)
                if self.logger:
                    self.logger.debug(f"Appending tab '{name}' to {path}")
            else:
                page.replace_model(model_xml)

        self._write_atomic(path, self.render_document(pages))
        if self.logger:
            self.logger.info(f"Saved tab '{page.name}' to {path}")
        return page

    def new_document(self, path: Union[str, Path], tab: Optional[str] = None) -> Page:
        """Create (or overwrite) a file holding a single empty page"""
        path = Path(path)
        page = Page(
            id=new_page_id(),
            name=tab or self.config.default_tab_name,
            model_xml=Graph(logger=self.logger, config=self.config).to_xml(),
        )
        self._write_atomic(path, self.render_document([page]))
        if self.logger:
            self.logger.info(f"Created {path}")
        return page
