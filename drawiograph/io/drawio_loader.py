"""
draw.io file loading module

Splits a .drawio document into pages, selects one page by index or name and
rebuilds its Graph. Pages are located textually so that untouched pages can be
written back byte for byte.
"""
import re
from pathlib import Path
from typing import List, Optional, Union

from lxml import html as lxml_html

from ..config import DiagramConfig, default_config
from ..errors import InvalidArgumentError, NotFoundError
from ..logger import DiagramLogger
from ..model.graph import Graph
from .pages import ENCODING_COMPRESSED, ENCODING_ESCAPED, Page, TabInfo, decompress_diagram, unescape_name

TabSelector = Union[None, int, str]

_DIAGRAM_RE = re.compile(r'<diagram\b([^>]*)>([\s\S]*?)</diagram>')
_ID_RE = re.compile(r'\bid="([^"]*)"')
_NAME_RE = re.compile(r'\bname="([^"]*)"')
_MODEL_RE = re.compile(r'<mxGraphModel\b[^>]*>[\s\S]*</mxGraphModel>')


class DrawIOLoader:
    """.drawio document loading and page selection"""

    def __init__(self, logger: Optional[DiagramLogger] = None, config: Optional[DiagramConfig] = None):
        """
        Args:
            logger: DiagramLogger instance
            config: DiagramConfig instance (uses default_config if None)
        """
        self.config = config or default_config
        self.logger = logger

    def _extract_model(self, content: str) -> Optional[Page]:
        """Return a Page with only model_xml/raw filled, or None"""
        match = _MODEL_RE.search(content)
        if match:
            return Page(id='', name='', model_xml=match.group(0))

        inner = content.strip()
        if not inner:
            return None

        # Entity-escaped model (e.g. "&lt;mxGraphModel&gt;...")
        if "&lt;" in inner:
            try:
                unescaped = lxml_html.fromstring(f"<div>{inner}</div>").text_content()
            except Exception as e:
                if self.logger:
                    self.logger.debug(f"Failed to unescape HTML entities: {e}")
            else:
                match = _MODEL_RE.search(unescaped)
                if match:
                    return Page(id='', name='', model_xml=match.group(0), raw=content, encoding=ENCODING_ESCAPED)

        # Compressed model
        if "<" not in inner:
            decoded = decompress_diagram(inner)
            if decoded:
                match = _MODEL_RE.search(decoded)
                if match:
                    return Page(id='', name='', model_xml=match.group(0), raw=content, encoding=ENCODING_COMPRESSED)
        return None

    def parse_pages(self, drawio_xml: str) -> List[Page]:
        """
        Extract every page of a document in order

        Pages without a usable mxGraphModel are skipped (and reported as warnings).

        Args:
            drawio_xml: Raw .drawio file content

        Returns:
            List of Page records
        """
        pages: List[Page] = []
        for match in _DIAGRAM_RE.finditer(drawio_xml):
            attributes, content = match.group(1), match.group(2)
            id_match = _ID_RE.search(attributes)
            name_match = _NAME_RE.search(attributes)
            page_id = unescape_name(id_match.group(1)) if id_match else ''
            name = unescape_name(name_match.group(1)) if name_match else 'Untitled'

            page = self._extract_model(content)
            if page is None:
                if self.logger:
                    self.logger.warn_skipped_page(name, "no mxGraphModel found")
                continue
            page.id = page_id
            page.name = name
            pages.append(page)
        return pages

    def select_page(self, pages: List[Page], tab: TabSelector = None) -> Page:
        """
        Select a page by index or name (first page when tab is None)

        Raises:
            InvalidArgumentError: No pages, or index out of range
            NotFoundError: No page with that name
        """
        if not pages:
            raise InvalidArgumentError("Invalid .drawio file format: no diagrams found")
        if tab is None:
            return pages[0]
        if isinstance(tab, int) and not isinstance(tab, bool):
            if tab < 0 or tab >= len(pages):
                raise InvalidArgumentError(f"Tab index {tab} out of range (0-{len(pages) - 1})")
            return pages[tab]
        for page in pages:
            if page.name == tab:
                return page
        available = ', '.join(p.name for p in pages)
        raise NotFoundError(f'Tab "{tab}" not found. Available tabs: {available}')

    def load_page(self, drawio_xml: str, tab: TabSelector = None) -> Graph:
        """Rebuild the Graph of one page of a document"""
        page = self.select_page(self.parse_pages(drawio_xml), tab)
        if self.logger:
            self.logger.debug(f"Loading tab '{page.name}' ({page.id})")
        return Graph.from_xml(page.model_xml, logger=self.logger, config=self.config)

    def read_file(self, path: Union[str, Path]) -> str:
        """Read document text (FileNotFoundError propagates)"""
        return Path(path).read_text(encoding='utf-8')

    def load_file(self, path: Union[str, Path], tab: TabSelector = None) -> Graph:
        """
        Load one page of a .drawio file

        Args:
            path: File path
            tab: Page index or name (defaults to the first page)

        Returns:
            Independent Graph for that page
        """
        return self.load_page(self.read_file(path), tab)

    def list_tabs(self, path: Union[str, Path]) -> List[TabInfo]:
        """List the pages of a file with vertex and edge counts"""
        tabs: List[TabInfo] = []
        for index, page in enumerate(self.parse_pages(self.read_file(path))):
            try:
                graph = Graph.from_xml(page.model_xml, logger=self.logger, config=self.config)
            except InvalidArgumentError as e:
                if self.logger:
                    self.logger.debug(f"Failed to parse tab '{page.name}': {e}")
                tabs.append(TabInfo(page.name, index, page.id, error='Failed to parse diagram'))
                continue
            tabs.append(TabInfo(page.name, index, page.id, graph.vertex_count, graph.edge_count))
        return tabs
