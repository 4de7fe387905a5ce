"""
Geometry index over the cadastral registry.

The whole reference file is loaded once into a read-only mapping
CNIG code -> GeometryRecord before the social file is streamed.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .csv_io import PathLike, cell, column_index, read_header, read_rows, require_column, trim

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeometryRecord:
    """Reference geometry of one parcel."""
    geometry: str
    lat: Optional[str] = None
    lon: Optional[str] = None


GeometryIndex = Mapping[str, GeometryRecord]


def build_geometry_index(
    path: PathLike,
    id_column: str,
    geo_column: str,
    lat_column: Optional[str] = None,
    lon_column: Optional[str] = None
) -> GeometryIndex:
    """
    Load cadastral geometries indexed by CNIG parcel id.

    Args:
        path: Cadastral CSV file
        id_column: Column holding the CNIG id (required)
        geo_column: Column holding the geometry JSON text (required)
        lat_column: Latitude column, optional
        lon_column: Longitude column, optional

    Returns:
        Read-only mapping of CNIG id to GeometryRecord. Rows with an empty
        id or geometry are skipped; on duplicate ids the last row wins.

    Raises:
        NotFound: if the file does not exist
        MissingColumn: if the id or geometry column is absent
    """
    header = read_header(path)
    id_index = require_column(header, id_column, path)
    geo_index = require_column(header, geo_column, path)
    lat_index = column_index(header, lat_column) if lat_column else None
    lon_index = column_index(header, lon_column) if lon_column else None

    if lat_index is None or lon_index is None:
        logger.debug(f"No lat/lon columns in {path}, records will carry geometry only")

    data: Dict[str, GeometryRecord] = {}
    skipped = 0
    duplicates = 0

    for _, row in read_rows(path):
        parcel_id = trim(cell(row, id_index))
        geometry = trim(cell(row, geo_index))

        if not parcel_id or not geometry:
            skipped += 1
            continue

        if parcel_id in data:
            duplicates += 1

        data[parcel_id] = GeometryRecord(
            geometry=geometry,
            lat=cell(row, lat_index),
            lon=cell(row, lon_index),
        )

    logger.info(f"Cadastral data loaded: {len(data)} entries")
    if skipped:
        logger.debug(f"  Skipped {skipped} rows without id or geometry")
    if duplicates:
        logger.debug(f"  {duplicates} duplicate ids replaced by later rows")

    return MappingProxyType(data)
