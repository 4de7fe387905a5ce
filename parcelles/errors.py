"""
Exceptions raised by the reconciliation core.

File-level failures are fatal for the pass that raised them. Row-level
anomalies never raise; they only show up in the run summary.
"""

from pathlib import Path
from typing import Optional, Union


class ParcelError(Exception):
    """Base class for all reconciliation errors."""


class NotFound(ParcelError, FileNotFoundError):
    """An input file does not exist."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"File not found: {self.path}")


class FileAccessError(ParcelError, OSError):
    """A file exists but cannot be opened, written or copied."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class MissingColumn(ParcelError, ValueError):
    """A column required by an operation is absent from a header."""

    def __init__(self, column: str, path: Optional[Union[str, Path]] = None):
        self.column = column
        self.path = Path(path) if path is not None else None
        where = f" in {self.path}" if self.path is not None else ''
        super().__init__(f"Required column '{column}' not found{where}")
