"""
Run configuration.

Values come from defaults, an optional YAML file, then command line
overrides. The configuration is passed explicitly to every entry point.

Example config.yaml:

    files:
      social: parcelles-des-personnes-morales.csv
      cadastral: parcelles_cadastrales.csv
      output_csv: parcelles_geo.csv
      output_geojson: parcelles_geo.geojson
    columns:
      gps_coords: _parcelle_coords.coord
      code_parcelle: code_parcelle
    cadastral_columns:
      geometry: Geo Shape
    location_name: Strasbourg
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .constants import (
    COL_ADDRESS,
    COL_CADASTRAL_GEO,
    COL_CADASTRAL_ID,
    COL_CADASTRAL_LAT,
    COL_CADASTRAL_LON,
    COL_CODE_PARCELLE,
    COL_GPS_COORDS,
    COL_GROUP_PERSON,
    COL_ID_PARCELLAIRE,
    DEFAULT_LOCATION_NAME,
)
from .errors import NotFound


@dataclass(frozen=True)
class SocialColumns:
    """Column names in the social housing file."""
    gps_coords: str = COL_GPS_COORDS
    code_parcelle: str = COL_CODE_PARCELLE
    id_parcellaire: str = COL_ID_PARCELLAIRE
    address: str = COL_ADDRESS
    group_person: str = COL_GROUP_PERSON


@dataclass(frozen=True)
class CadastralColumns:
    """Column names in the cadastral file."""
    id_parcellaire: str = COL_CADASTRAL_ID
    geometry: str = COL_CADASTRAL_GEO
    lat: str = COL_CADASTRAL_LAT
    lon: str = COL_CADASTRAL_LON


@dataclass(frozen=True)
class Config:
    social_file: Path = Path('parcelles-des-personnes-morales.csv')
    cadastral_file: Path = Path('parcelles_cadastrales.csv')
    output_csv: Path = Path('parcelles_geo.csv')
    output_geojson: Path = Path('parcelles_geo.geojson')
    columns: SocialColumns = field(default_factory=SocialColumns)
    cadastral_columns: CadastralColumns = field(default_factory=CadastralColumns)
    location_name: str = DEFAULT_LOCATION_NAME

    def resolved(self, base_dir: Optional[Path] = None) -> 'Config':
        """Return a copy with every file path made absolute."""
        base_dir = Path(base_dir) if base_dir else Path.cwd()

        def absolute(path: Path) -> Path:
            path = Path(path).expanduser()
            return path if path.is_absolute() else (base_dir / path).resolve()

        return replace(
            self,
            social_file=absolute(self.social_file),
            cadastral_file=absolute(self.cadastral_file),
            output_csv=absolute(self.output_csv),
            output_geojson=absolute(self.output_geojson),
        )

    def with_overrides(self, **overrides: Any) -> 'Config':
        """Return a copy with the non-None overrides applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


FILE_KEYS = {
    'social': 'social_file',
    'cadastral': 'cadastral_file',
    'output_csv': 'output_csv',
    'output_geojson': 'output_geojson',
}


def _section(raw: Dict, name: str, allowed: set) -> Dict:
    """Fetch a mapping section and reject unknown keys."""
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in config section '{name}': {sorted(unknown)}")
    return section


def load_config(config_path: Union[str, Path]) -> Config:
    """
    Load a YAML configuration file.

    Relative file paths are resolved against the config file's directory.

    Raises:
        NotFound: if the config file does not exist
        ValueError: on unknown sections or keys
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise NotFound(config_path)

    with open(config_path, encoding='utf-8') as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    known = {'files', 'columns', 'cadastral_columns', 'location_name'}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown config sections: {sorted(unknown)}")

    files = _section(raw, 'files', set(FILE_KEYS))
    columns = _section(raw, 'columns', {f.name for f in fields(SocialColumns)})
    cadastral = _section(raw, 'cadastral_columns', {f.name for f in fields(CadastralColumns)})

    config = Config(
        columns=SocialColumns(**{k: str(v) for k, v in columns.items()}),
        cadastral_columns=CadastralColumns(**{k: str(v) for k, v in cadastral.items()}),
    )
    config = config.with_overrides(**{FILE_KEYS[k]: Path(v) for k, v in files.items()})
    if raw.get('location_name') is not None:
        config = config.with_overrides(location_name=str(raw['location_name']))

    return config.resolved(config_path.parent)
