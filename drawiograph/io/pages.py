"""
Diagram page module

Page records of a multi-page .drawio document, page name escaping and the
compressed page encoding used by draw.io
"""
import base64
import binascii
import uuid
import zlib
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, unquote


ENCODING_PLAIN = 'plain'
ENCODING_ESCAPED = 'escaped'
ENCODING_COMPRESSED = 'compressed'


@dataclass
class Page:
    """One <diagram> element of a .drawio document"""
    id: str
    name: str
    model_xml: str
    # Body text as found in the file when the model is not stored verbatim;
    # written back unchanged while the page is not edited
    raw: Optional[str] = None
    # How the body is stored: plain, entity-escaped or compressed
    encoding: str = ENCODING_PLAIN

    @property
    def has_raw_body(self) -> bool:
        return self.raw is not None

    def replace_model(self, model_xml: str):
        """Swap in a new model; compressed pages stay compressed, others become plain"""
        self.model_xml = model_xml
        if self.encoding == ENCODING_COMPRESSED:
            self.raw = compress_diagram(model_xml)
        else:
            self.raw = None
            self.encoding = ENCODING_PLAIN


@dataclass
class TabInfo:
    """Summary of a page for tab listings"""
    name: str
    index: int
    id: str
    node_count: int = 0
    edge_count: int = 0
    error: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            'name': self.name,
            'index': self.index,
            'id': self.id,
            'nodeCount': self.node_count,
            'edgeCount': self.edge_count,
        }
        if self.error:
            result['error'] = self.error
        return result


def new_page_id() -> str:
    """Unique page ID, assigned once when a page is created"""
    return f"page-{uuid.uuid4().hex[:20]}"


def escape_name(text: str) -> str:
    """Escape XML special characters for an attribute value"""
    return (
        text.replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
        .replace("'", '&apos;')
    )


def unescape_name(text: str) -> str:
    """Inverse of escape_name (&amp; last so "&amp;lt;" stays "&lt;")"""
    return (
        text.replace('&lt;', '<')
        .replace('&gt;', '>')
        .replace('&quot;', '"')
        .replace('&apos;', "'")
        .replace('&amp;', '&')
    )


def decompress_diagram(text: str) -> Optional[str]:
    """
    Decode a compressed draw.io page body (base64 → raw deflate → URL-encoded XML)

    Returns:
        XML text, or None when text is not a compressed body
    """
    try:
        raw = base64.b64decode(text.strip(), validate=True)
        inflated = zlib.decompress(raw, -15).decode('utf-8')
    except (binascii.Error, zlib.error, UnicodeDecodeError, ValueError):
        return None
    return unquote(inflated)


def compress_diagram(xml: str) -> str:
    """Encode XML the way draw.io compresses page bodies"""
    compressor = zlib.compressobj(9, zlib.DEFLATED, -15)
    quoted = quote(xml, safe="~()*!.'").encode('utf-8')
    deflated = compressor.compress(quoted) + compressor.flush()
    return base64.b64encode(deflated).decode('ascii')
