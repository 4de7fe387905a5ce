"""
Join social housing parcels with cadastral geometries.

Streams the social file once. For every row:
1. Resolve the CNIG key (id column if present, else converted MAJIC code)
2. Look the key up in the geometry index
3. Fall back to a GPS Point when there is no polygon
4. Append the location name and geometry text to the row
5. Collect a GeoJSON feature when a geometry was produced

Every input row gives exactly one output row, in input order.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Sequence

import geojson

from .cadastral import GeometryIndex
from .codes import normalize_code, resolve_parcel_id
from .config import SocialColumns
from .constants import (
    COL_CADASTRAL_GEO,
    COL_LOCATION_NAME,
    PROP_ADDRESS,
    PROP_CODE_PARCELLE,
    PROP_GROUP_PERSON,
    PROP_NAME,
)
from .csv_io import Header, PathLike, Row, cell, column_index, read_header, read_rows, require_column, trim
from .geometry import geometry_text, make_feature, make_feature_collection, parse_geometry, point_geometry

logger = logging.getLogger(__name__)


@dataclass
class JoinSummary:
    """Row counters of one join pass."""
    total: int = 0
    polygons: int = 0
    points: int = 0
    without_geometry: int = 0
    invalid_geometry: int = 0

    @property
    def geometries_exported(self) -> int:
        return self.polygons + self.points

    def as_rows(self) -> List[tuple]:
        return [
            ('Total lines processed', self.total),
            ('Geometries exported', self.geometries_exported),
            ('- Cadastral polygons', self.polygons),
            ('- GPS points', self.points),
            ('Lines without geometry', self.without_geometry),
            ('Unreadable cadastral geometries', self.invalid_geometry),
        ]


@dataclass
class JoinResult:
    """Output rows, features and counters of an in-memory pass."""
    rows: List[Row]
    collection: geojson.FeatureCollection
    summary: JoinSummary


@dataclass(frozen=True)
class ColumnLayout:
    """Resolved column positions in the social file."""
    width: int
    gps: int
    code: int
    parcel_id: Optional[int] = None
    address: Optional[int] = None
    group: Optional[int] = None

    @classmethod
    def from_header(cls, header: Header, columns: SocialColumns,
                    path: Optional[PathLike] = None) -> 'ColumnLayout':
        return cls(
            width=len(header),
            gps=require_column(header, columns.gps_coords, path),
            code=require_column(header, columns.code_parcelle, path),
            parcel_id=column_index(header, columns.id_parcellaire),
            address=column_index(header, columns.address),
            group=column_index(header, columns.group_person),
        )


class ParcelJoiner:
    """
    Enrich social housing rows with cadastral geometry.

    The geometry index is only read. Features and counters accumulate on the
    instance across one pass; use a new joiner per run.
    """

    def __init__(
        self,
        index: GeometryIndex,
        columns: SocialColumns,
        location_name: str,
        geometry_column: str = COL_CADASTRAL_GEO
    ):
        self.index = index
        self.columns = columns
        self.location_name = location_name
        self.geometry_column = geometry_column
        self.features: List[geojson.Feature] = []
        self.summary = JoinSummary()

    def output_header(self, header: Header) -> Row:
        return list(header) + [COL_LOCATION_NAME, self.geometry_column]

    def parcel_key(self, row: Sequence[str], layout: ColumnLayout) -> str:
        """CNIG key of a row, '' when it cannot be derived."""
        if layout.parcel_id is not None:
            return resolve_parcel_id((cell(row, layout.parcel_id) or '').strip('"'))
        return normalize_code((cell(row, layout.code) or '').strip('"'))

    def feature_properties(self, row: Sequence[str], layout: ColumnLayout) -> Dict[str, str]:
        props = {
            PROP_NAME: self.location_name,
            PROP_CODE_PARCELLE: trim(cell(row, layout.code)),
        }
        address = cell(row, layout.address)
        if address is not None:
            props[PROP_ADDRESS] = trim(address)
        group = cell(row, layout.group)
        if group is not None:
            props[PROP_GROUP_PERSON] = trim(group)
        return props

    def enrich_row(self, row: Sequence[str], layout: ColumnLayout) -> Row:
        """
        Join one row.

        Returns:
            The row padded to the header width, with the location name and
            geometry text appended
        """
        self.summary.total += 1
        out = list(row)
        props = self.feature_properties(row, layout)

        geometry = None
        text = ''
        record = self.index.get(self.parcel_key(row, layout))

        if record is not None:
            self.summary.polygons += 1
            text = record.geometry
            geometry = parse_geometry(text)
            if geometry is None:
                self.summary.invalid_geometry += 1
                logger.warning(f"Unreadable geometry for parcel {props[PROP_CODE_PARCELLE]!r}, no feature exported")
            # Polygon supersedes the raw GPS position
            if layout.gps < len(out):
                out[layout.gps] = ''
        else:
            gps = (cell(row, layout.gps) or '').strip('"')
            point = point_geometry(gps) if gps else None
            if point is not None:
                self.summary.points += 1
                geometry = point
                text = geometry_text(point)
            else:
                self.summary.without_geometry += 1

        if len(out) < layout.width:
            out.extend([''] * (layout.width - len(out)))
        out.append(self.location_name)
        out.append(text)

        if geometry is not None:
            self.features.append(make_feature(geometry, props))

        return out

    def iter_rows(self, social_path: PathLike,
                  progress: Optional[Callable[[], None]] = None) -> Iterator[Row]:
        """
        Stream enriched rows, output header first.

        The header is read and checked on the call, before any row is
        consumed, so a bad input fails before an output file is opened.

        Raises:
            NotFound: if the social file does not exist
            MissingColumn: if the GPS or parcel code column is absent
        """
        header = read_header(social_path)
        layout = ColumnLayout.from_header(header, self.columns, social_path)

        if layout.parcel_id is not None:
            logger.info(f"Column {self.columns.id_parcellaire} detected - using direct matching")
        else:
            logger.warning(f"Column {self.columns.id_parcellaire} not found - converting MAJIC to CNIG")

        return self._stream(social_path, header, layout, progress)

    def _stream(self, social_path: PathLike, header: Header, layout: ColumnLayout,
                progress: Optional[Callable[[], None]]) -> Iterator[Row]:
        yield self.output_header(header)

        for _, row in read_rows(social_path):
            yield self.enrich_row(row, layout)
            if progress is not None:
                progress()

    def feature_collection(self) -> geojson.FeatureCollection:
        return make_feature_collection(self.features)

    def process(self, social_path: PathLike) -> JoinResult:
        """Run a full pass in memory."""
        rows = list(self.iter_rows(social_path))
        return JoinResult(rows=rows, collection=self.feature_collection(), summary=self.summary)


def process(
    social_path: PathLike,
    index: GeometryIndex,
    columns: SocialColumns,
    location_name: str,
    geometry_column: str = COL_CADASTRAL_GEO
) -> JoinResult:
    """Join a social housing file against a geometry index."""
    joiner = ParcelJoiner(index, columns, location_name, geometry_column)
    return joiner.process(social_path)
