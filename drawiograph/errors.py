"""
Error types

All errors are raised synchronously to the immediate caller; nothing is rolled back
"""


class DiagramError(Exception):
    """Base class for diagram editing errors"""


class NotFoundError(DiagramError, KeyError):
    """A referenced vertex, edge, table, column, row or tab does not exist"""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep plain messages
        return str(self.args[0]) if self.args else ""


class InvalidArgumentError(DiagramError, ValueError):
    """An argument is out of range, empty, mismatched or unsupported"""


class CellReferenceError(DiagramError, LookupError):
    """The parent of a new vertex does not exist"""
