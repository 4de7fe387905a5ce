"""
GeoJSON helpers for parcel exports.

Cadastral geometries are carried as opaque JSON text; only GPS fallbacks
are built here.
"""

import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Union

import geojson

from .constants import POINT_PRECISION
from .errors import FileAccessError

logger = logging.getLogger(__name__)


def parse_gps(gps_text: str) -> Optional[tuple]:
    """
    Parse a `"<lat>,<lon>"` string.

    Returns:
        (lat, lon) floats, or None unless there are exactly two numeric tokens
    """
    parts = gps_text.split(',')
    if len(parts) != 2:
        return None
    try:
        lat = float(parts[0].strip())
        lon = float(parts[1].strip())
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return lat, lon


def point_geometry(gps_text: str) -> Optional[geojson.Point]:
    """
    Build a Point from GPS text. GeoJSON axis order is [lon, lat].

    Examples:
        >>> geometry_text(point_geometry('48.5842,7.7458'))
        '{"type":"Point","coordinates":[7.7458,48.5842]}'
    """
    coords = parse_gps(gps_text)
    if coords is None:
        return None
    lat, lon = coords
    return geojson.Point((lon, lat), precision=POINT_PRECISION)


def geometry_text(geometry: Dict) -> str:
    """Serialize a geometry to compact JSON, as stored in the CSV output."""
    return geojson.dumps(geometry, separators=(',', ':'), ensure_ascii=False)


def _reject_constant(name: str):
    raise ValueError(f"Non-finite number in geometry: {name}")


def parse_geometry(text: str) -> Optional[Dict]:
    """Decode geometry JSON text, None if it is not a well-formed JSON object."""
    try:
        value = json.loads(text, parse_constant=_reject_constant)
    except ValueError:
        return None
    if not isinstance(value, dict):
        return None
    return value


def make_feature(geometry: Dict, properties: Dict) -> geojson.Feature:
    """
    Create a GeoJSON Feature.

    The geometry is attached as-is: reference polygons are passed through
    without coordinate rounding or type checks.
    """
    feature = geojson.Feature(properties=properties)
    feature['geometry'] = geometry
    return feature


def make_feature_collection(features: List[geojson.Feature]) -> geojson.FeatureCollection:
    """Create a FeatureCollection keeping feature order."""
    return geojson.FeatureCollection(features)


def write_geojson(path: Union[str, Path], collection: Dict) -> None:
    """Write a FeatureCollection as pretty-printed UTF-8 JSON."""
    path = Path(path)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            geojson.dump(collection, f, ensure_ascii=False, indent=2)
    except OSError as e:
        raise FileAccessError(f"Cannot write GeoJSON file: {path} ({e})", path) from e
    logger.info(f"Saved {len(collection['features'])} features to {path}")
