"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from parcelles.config import CadastralColumns, Config, SocialColumns, load_config
from parcelles.errors import NotFound


def test_defaults():
    config = Config()
    assert config.columns == SocialColumns()
    assert config.columns.gps_coords == '_parcelle_coords.coord'
    assert config.cadastral_columns.geometry == 'Geo Shape'


def test_load_config_resolves_relative_paths(tmpdir_path):
    config_path = tmpdir_path / 'config.yaml'
    config_path.write_text(
        "files:\n"
        "  social: data/social.csv\n"
        "  output_geojson: /tmp/out.geojson\n"
        "columns:\n"
        "  gps_coords: coords\n"
        "cadastral_columns:\n"
        "  geometry: geo_shape\n"
        "location_name: Colmar\n",
        encoding='utf-8'
    )

    config = load_config(config_path)

    assert config.social_file == (tmpdir_path / 'data' / 'social.csv').resolve()
    assert config.output_geojson == Path('/tmp/out.geojson')
    assert config.cadastral_file.is_absolute()
    assert config.columns.gps_coords == 'coords'
    assert config.columns.code_parcelle == 'code_parcelle'
    assert config.cadastral_columns == CadastralColumns(geometry='geo_shape')
    assert config.location_name == 'Colmar'


def test_load_empty_config(tmpdir_path):
    config_path = tmpdir_path / 'config.yaml'
    config_path.write_text('', encoding='utf-8')

    config = load_config(config_path)

    assert config.columns == SocialColumns()
    assert config.social_file == (tmpdir_path / 'parcelles-des-personnes-morales.csv').resolve()


def test_unknown_keys_rejected(tmpdir_path):
    config_path = tmpdir_path / 'config.yaml'

    config_path.write_text('colums:\n  gps_coords: x\n', encoding='utf-8')
    with pytest.raises(ValueError):
        load_config(config_path)

    config_path.write_text('columns:\n  gps: x\n', encoding='utf-8')
    with pytest.raises(ValueError):
        load_config(config_path)


def test_missing_config_file(tmpdir_path):
    with pytest.raises(NotFound):
        load_config(tmpdir_path / 'missing.yaml')


def test_overrides_skip_none():
    config = Config().with_overrides(location_name=None, social_file=Path('x.csv'))
    assert config.location_name == Config().location_name
    assert config.social_file == Path('x.csv')
