"""
Logging and QA module

Records structural warnings (dangling edges, skipped pages, orphaned table cells,
stale edge IDs after table shifts) alongside regular log output so callers and
tests can inspect them
"""
import logging
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from .config import DiagramConfig, default_config


@dataclass
class DiagramWarning:
    """Warning raised while editing or loading a diagram"""
    element_id: Optional[str]
    warning_type: str  # 'dangling_edge', 'skipped_page', 'orphaned_cell', 'stale_edge_id'
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


class DiagramLogger:
    """Logger for diagram operations"""

    def __init__(self, config: Optional[DiagramConfig] = None):
        """
        Args:
            config: DiagramConfig instance (uses default_config if None)
        """
        self.config = config or default_config
        self.warnings: List[DiagramWarning] = []
        self.logger = logging.getLogger('drawiograph')

        # Logger configuration (default)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)
            self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))

    def _record(self, warning: DiagramWarning):
        self.warnings.append(warning)
        self.logger.warning(f"[{warning.element_id}] {warning.message}")

    def warn_dangling_edge(self, edge_id: str, missing_ids: List[str]):
        """Record warning for an edge whose endpoint was removed"""
        if not self.config.warn_dangling_edges:
            return
        message = f"Edge references removed cell(s): {', '.join(missing_ids)}"
        self._record(DiagramWarning(
            element_id=edge_id,
            warning_type='dangling_edge',
            message=message,
            details={'missing': list(missing_ids)}
        ))

    def warn_skipped_page(self, page_name: Optional[str], reason: str):
        """Record warning for a diagram page that could not be parsed"""
        self._record(DiagramWarning(
            element_id=page_name,
            warning_type='skipped_page',
            message=f"Skipped page: {reason}",
            details={'reason': reason}
        ))

    def warn_orphaned_cell(self, table_id: str, cell_id: str):
        """Record warning for a table cell outside the table's column range"""
        self._record(DiagramWarning(
            element_id=cell_id,
            warning_type='orphaned_cell',
            message=f"Cell outside the columns of table '{table_id}'",
            details={'table_id': table_id}
        ))

    def warn_stale_edge_id(self, edge_id: str, source: Optional[str], target: Optional[str]):
        """Record warning for an edge whose ID no longer names its endpoints"""
        self._record(DiagramWarning(
            element_id=edge_id,
            warning_type='stale_edge_id',
            message=f"Edge ID no longer matches its endpoints ({source} -> {target})",
            details={'source': source, 'target': target}
        ))

    def info(self, message: str):
        """Info log"""
        self.logger.info(message)

    def debug(self, message: str):
        """Debug log"""
        self.logger.debug(message)

    def get_warnings(self) -> List[DiagramWarning]:
        """Get warning list"""
        return self.warnings

    def clear_warnings(self):
        """Clear warning list"""
        self.warnings.clear()
