"""
Add the CNIG id column to the social housing file.

Converts every MAJIC code once and stores the result in place, so later
joins can match on the id column directly.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .codes import normalize_code
from .csv_io import (
    PathLike,
    Row,
    cell,
    column_index,
    create_backup,
    read_header,
    read_rows,
    require_column,
    write_rows,
)
from .errors import FileAccessError, ParcelError

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 3


@dataclass
class IdColumnResult:
    total: int = 0
    converted: int = 0
    errors: int = 0
    column_existed: bool = False
    backup_path: Optional[Path] = None
    samples: List[Tuple[str, str]] = field(default_factory=list)


def id_column_exists(path: PathLike, id_column: str) -> bool:
    return column_index(read_header(path), id_column) is not None


def _converted_rows(path: Path, code_index: int, id_index: int,
                    header: List[str], result: IdColumnResult) -> Iterator[Row]:
    yield header
    for _, row in read_rows(path):
        result.total += 1
        cnig = normalize_code((cell(row, code_index) or '').strip('"'))
        if cnig:
            result.converted += 1
        else:
            result.errors += 1

        row = list(row)
        if len(row) > id_index:
            row[id_index] = cnig
        else:
            row.extend([''] * (id_index - len(row)))
            row.append(cnig)
        yield row


def read_samples(path: PathLike, code_column: str, id_column: str,
                 limit: int = SAMPLE_SIZE) -> List[Tuple[str, str]]:
    """First (MAJIC, CNIG) pairs of a file."""
    samples = []
    for header, row in read_rows(path):
        if len(samples) >= limit:
            break
        code_index = column_index(header, code_column)
        id_index = column_index(header, id_column)
        if code_index is None or id_index is None:
            break
        samples.append(((cell(row, code_index) or '').strip('"'),
                        (cell(row, id_index) or '').strip('"')))
    return samples


def add_id_column(path: PathLike, code_column: str, id_column: str,
                  backup: bool = True) -> IdColumnResult:
    """
    Write the CNIG id of every row into `id_column`.

    The column is appended when absent, overwritten otherwise. The file is
    rewritten through `<path>.tmp` and then replaced.

    Raises:
        NotFound: if the file does not exist
        MissingColumn: if `code_column` is absent
    """
    path = Path(path)
    header = read_header(path)
    code_index = require_column(header, code_column, path)
    id_index = column_index(header, id_column)

    result = IdColumnResult(column_existed=id_index is not None)
    if result.column_existed:
        logger.warning(f"Column '{id_column}' already exists at index {id_index}, it will be updated")

    if backup:
        result.backup_path = create_backup(path)

    output_header = list(header)
    if id_index is None:
        output_header.append(id_column)
        id_index = len(output_header) - 1

    tmp_path = path.with_name(path.name + '.tmp')
    try:
        write_rows(tmp_path, _converted_rows(path, code_index, id_index, output_header, result))
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path.is_file():
            tmp_path.unlink()
        if isinstance(e, ParcelError):
            raise
        raise FileAccessError(f"Cannot replace original file: {path} ({e})", path) from e

    logger.info(f"Converted {result.converted}/{result.total} codes ({result.errors} errors)")
    result.samples = read_samples(path, code_column, id_column)
    return result
