"""
Streaming access to semicolon-separated parcel files.

Both registries are exported as `;` separated, `"` quoted, `\\` escaped
CSV. Headers come out of spreadsheet tools with a UTF-8 BOM and stray
quotes/spaces, so they are cleaned before any column lookup.
"""

import csv
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .constants import (
    BACKUP_SUFFIX,
    BACKUP_TIMESTAMP_FORMAT,
    CSV_DELIMITER,
    CSV_ENCODING,
    CSV_ESCAPECHAR,
    CSV_LINETERMINATOR,
    CSV_QUOTECHAR,
    TRIM_CHARS,
    UTF8_BOM,
)
from .errors import FileAccessError, MissingColumn, NotFound, ParcelError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Header = Tuple[str, ...]
Row = List[str]


class ParcelDialect(csv.Dialect):
    """Dialect shared by every file the pipeline reads or writes."""
    delimiter = CSV_DELIMITER
    quotechar = CSV_QUOTECHAR
    escapechar = CSV_ESCAPECHAR
    doublequote = True
    skipinitialspace = False
    lineterminator = CSV_LINETERMINATOR
    quoting = csv.QUOTE_ALL


def trim(value: Optional[str]) -> str:
    """Strip surrounding spaces and double quotes."""
    if value is None:
        return ''
    return value.strip(TRIM_CHARS)


def clean_header(cells: Sequence[str]) -> Header:
    """
    Clean raw header cells.

    Removes the UTF-8 BOM from the first cell only, then strips surrounding
    quotes and spaces from every cell.

    Examples:
        >>> clean_header(['\\ufeff"Column1" ', '"Column2"'])
        ('Column1', 'Column2')
    """
    cells = list(cells)
    if cells and cells[0].startswith(UTF8_BOM):
        cells[0] = cells[0][len(UTF8_BOM):]
    return tuple(trim(cell) for cell in cells)


def column_index(header: Sequence[str], column: str) -> Optional[int]:
    """Position of a column in a header, or None if absent."""
    try:
        return list(header).index(column)
    except ValueError:
        return None


def require_column(header: Sequence[str], column: str,
                   path: Optional[PathLike] = None) -> int:
    """Position of a column that must exist, raises MissingColumn otherwise."""
    index = column_index(header, column)
    if index is None:
        raise MissingColumn(column, path)
    return index


def cell(row: Sequence[str], index: Optional[int]) -> Optional[str]:
    """Cell at index, or None when the column or the cell is absent."""
    if index is None or index >= len(row):
        return None
    return row[index]


def _existing(path: PathLike) -> Path:
    path = Path(path)
    if not path.exists():
        raise NotFound(path)
    return path


def _open_for_read(path: Path):
    try:
        return open(path, 'r', encoding=CSV_ENCODING, newline='')
    except OSError as e:
        raise FileAccessError(f"Cannot open file: {path} ({e})", path) from e


def read_header(path: PathLike) -> Header:
    """Read and clean the first line of a file."""
    path = _existing(path)
    with _open_for_read(path) as fh:
        reader = csv.reader(fh, dialect=ParcelDialect)
        return clean_header(next(reader, []))


def check_columns(path: PathLike, required: Iterable[str]) -> Header:
    """
    Read a header and verify that every required column is present.

    Returns:
        The cleaned header

    Raises:
        MissingColumn: for the first required column that is absent
    """
    header = read_header(path)
    for column in required:
        require_column(header, column, path)
    return header


def _iter_rows(path: Path) -> Iterator[Tuple[Header, Row]]:
    with _open_for_read(path) as fh:
        reader = csv.reader(fh, dialect=ParcelDialect)
        header = clean_header(next(reader, []))
        for row in reader:
            yield header, row


def read_rows(path: PathLike) -> Iterator[Tuple[Header, Row]]:
    """
    Stream the data rows of a file.

    Each call opens the file again and yields (header, row) pairs from the
    top; two calls give two independent streams. The header object is the
    same for every row of one pass. The file handle is closed when the
    stream is exhausted or abandoned.

    Raises:
        NotFound: immediately, if the path does not exist
    """
    return _iter_rows(_existing(path))


def count_data_rows(path: PathLike) -> int:
    """Number of data rows (header excluded), 0 if the file is absent."""
    path = Path(path)
    if not path.exists():
        return 0
    return sum(1 for _ in _iter_rows(path))


def write_rows(path: PathLike, rows: Iterable[Sequence[str]]) -> int:
    """
    Write rows to a file, replacing any previous content.

    The header, if wanted, must be the first element of `rows`. Every cell
    is quoted. `rows` may be a lazy stream; the handle stays open for the
    whole pass and is closed once at the end.

    Returns:
        Number of rows written (header included)
    """
    path = Path(path)
    written = 0
    try:
        with open(path, 'w', encoding=CSV_ENCODING, newline='') as fh:
            writer = csv.writer(fh, dialect=ParcelDialect)
            for row in rows:
                writer.writerow(row)
                written += 1
    except ParcelError:
        raise
    except OSError as e:
        raise FileAccessError(f"Cannot write file: {path} ({e})", path) from e
    logger.debug(f"Wrote {written} rows to {path}")
    return written


def create_backup(path: PathLike) -> Path:
    """
    Copy a file to `<path>.backup.<timestamp>`.

    Returns:
        Path of the backup file
    """
    path = _existing(path)
    timestamp = datetime.now().strftime(BACKUP_TIMESTAMP_FORMAT)
    backup_path = path.with_name(f"{path.name}{BACKUP_SUFFIX}{timestamp}")
    try:
        shutil.copy2(path, backup_path)
    except OSError as e:
        raise FileAccessError(f"Cannot create backup file: {backup_path} ({e})", backup_path) from e
    logger.info(f"Backup created: {backup_path}")
    return backup_path
