"""
Tests for the social housing / cadastral join.
"""

import json

import pytest

from parcelles.cadastral import GeometryRecord, build_geometry_index
from parcelles.config import SocialColumns
from parcelles.csv_io import write_rows
from parcelles.errors import MissingColumn, NotFound
from parcelles.join import ParcelJoiner, process
from parcelles.sample_data import POLYGON_0001, POLYGON_0014, POLYGON_0017, SOCIAL_ROWS

LOCATION = 'Test Location'


@pytest.fixture
def index(cadastral_file):
    return build_geometry_index(cadastral_file, 'id_parcellaire', 'Geo Shape', 'N_PARC_Y', 'N_PARC_X')


def test_one_output_row_per_input_row(social_file, index):
    result = process(social_file, index, SocialColumns(), LOCATION)

    header, data = result.rows[0], result.rows[1:]
    assert header == SOCIAL_ROWS[0] + ['name', 'Geo Shape']
    assert len(data) == len(SOCIAL_ROWS) - 1

    for out, original in zip(data, SOCIAL_ROWS[1:]):
        # Every original cell kept in place, except the cleared GPS cell
        assert out[1:5] == original[1:5]
        assert out[5] == LOCATION


def test_matched_rows_get_polygon_and_empty_gps(social_file, index):
    result = process(social_file, index, SocialColumns(), LOCATION)

    first = result.rows[1]
    assert first[0] == ''
    assert first[6] == POLYGON_0017

    # Matched even without GPS
    fourth = result.rows[4]
    assert fourth[6] == POLYGON_0001


def test_unmatched_row_falls_back_to_gps_point(social_file, index):
    result = process(social_file, index, SocialColumns(), LOCATION)

    invalid = result.rows[5]
    assert invalid[0] == '48.5842,7.7458'
    assert invalid[6] == '{"type":"Point","coordinates":[7.7458,48.5842]}'


def test_feature_collection(social_file, index):
    result = process(social_file, index, SocialColumns(), LOCATION)

    features = result.collection['features']
    assert result.collection['type'] == 'FeatureCollection'
    assert len(features) == 5
    assert [f['properties']['code_parcelle'] for f in features] == [
        '67482000010017', '67482000010018', '67482000040014', '67482000050001', 'INVALID'
    ]
    assert features[0]['geometry'] == json.loads(POLYGON_0017)
    assert features[4]['geometry'] == {'type': 'Point', 'coordinates': [7.7458, 48.5842]}
    assert features[0]['properties'] == {
        'name': LOCATION,
        'code_parcelle': '67482000010017',
        'adresse': '1 Rue Test',
        'groupe_personne': 'Société A',
    }


def test_summary_counters(social_file, index):
    result = process(social_file, index, SocialColumns(), LOCATION)

    summary = result.summary
    assert summary.total == 5
    assert summary.polygons == 4
    assert summary.points == 1
    assert summary.without_geometry == 0
    assert summary.geometries_exported == 5


def test_legacy_code_used_without_id_column(tmpdir_path):
    """Without an id column the MAJIC code is converted."""
    path = tmpdir_path / 'social.csv'
    write_rows(path, [
        ['gps', 'code'],
        ['1.0,2.0', '67482000010017'],
        ['', '67482000010099'],
    ])
    index = {'674820010017': GeometryRecord(POLYGON_0017)}
    columns = SocialColumns(gps_coords='gps', code_parcelle='code')

    result = process(path, index, columns, LOCATION)

    assert result.rows[1] == ['', '67482000010017', LOCATION, POLYGON_0017]
    assert result.rows[2] == ['', '67482000010099', LOCATION, '']
    # Optional columns absent: properties omitted
    assert result.collection['features'][0]['properties'] == {
        'name': LOCATION,
        'code_parcelle': '67482000010017',
    }
    assert result.summary.without_geometry == 1


def test_id_column_format_detection(tmpdir_path):
    path = tmpdir_path / 'social.csv'
    write_rows(path, [
        ['gps', 'code', 'id'],
        # MAJIC in the id column is converted
        ['', 'x', '67482000040014'],
        # CNIG passes through
        ['', 'x', '674820040014'],
        # Other lengths pass through unchanged
        ['', 'x', '67482LC0017'],
    ])
    index = {
        '674820040014': GeometryRecord(POLYGON_0014),
        '67482LC0017': GeometryRecord(POLYGON_0017),
    }
    columns = SocialColumns(gps_coords='gps', code_parcelle='code', id_parcellaire='id')

    result = process(path, index, columns, LOCATION)

    assert [row[-1] for row in result.rows[1:]] == [POLYGON_0014, POLYGON_0014, POLYGON_0017]


def test_no_match_and_no_gps_gives_no_feature(tmpdir_path):
    path = tmpdir_path / 'social.csv'
    write_rows(path, [
        ['gps', 'code'],
        ['', 'INVALID'],
        ['not a position', 'INVALID'],
        ['48.1,7.1,3', 'INVALID'],
    ])
    columns = SocialColumns(gps_coords='gps', code_parcelle='code')

    result = process(path, {}, columns, LOCATION)

    assert [row[-1] for row in result.rows[1:]] == ['', '', '']
    assert result.rows[2][0] == 'not a position'
    assert result.collection['features'] == []
    assert result.summary.without_geometry == 3
    assert result.summary.points == 0


def test_short_rows_are_padded(tmpdir_path):
    path = tmpdir_path / 'social.csv'
    path.write_text('gps;code;adresse\n"48.5,7.5";"INVALID"\n', encoding='utf-8')
    columns = SocialColumns(gps_coords='gps', code_parcelle='code')

    result = process(path, {}, columns, LOCATION)

    assert result.rows[1] == ['48.5,7.5', 'INVALID', '', LOCATION,
                              '{"type":"Point","coordinates":[7.5,48.5]}']
    # Address column exists but the cell is absent
    assert 'adresse' not in result.collection['features'][0]['properties']


def test_properties_are_trimmed(tmpdir_path):
    path = tmpdir_path / 'social.csv'
    write_rows(path, [
        ['gps', 'code', 'adresse', 'groupe_personne'],
        ['48.5,7.5', ' INVALID ', ' "1 Rue Test" ', '  '],
    ])
    columns = SocialColumns(gps_coords='gps', code_parcelle='code')

    result = process(path, {}, columns, LOCATION)

    assert result.collection['features'][0]['properties'] == {
        'name': LOCATION,
        'code_parcelle': 'INVALID',
        'adresse': '1 Rue Test',
        'groupe_personne': '',
    }


def test_unreadable_cadastral_geometry(tmpdir_path):
    path = tmpdir_path / 'social.csv'
    write_rows(path, [['gps', 'code'], ['48.5,7.5', '67482000010017']])
    index = {'674820010017': GeometryRecord('{broken')}
    columns = SocialColumns(gps_coords='gps', code_parcelle='code')

    result = process(path, index, columns, LOCATION)

    assert result.rows[1] == ['', '67482000010017', LOCATION, '{broken']
    assert result.collection['features'] == []
    assert result.summary.polygons == 1
    assert result.summary.invalid_geometry == 1


def test_missing_required_columns(social_file, index):
    with pytest.raises(MissingColumn):
        process(social_file, index, SocialColumns(gps_coords='coords'), LOCATION)
    with pytest.raises(MissingColumn):
        process(social_file, index, SocialColumns(code_parcelle='majic'), LOCATION)


def test_missing_social_file(tmpdir_path, index):
    with pytest.raises(NotFound):
        process(tmpdir_path / 'missing.csv', index, SocialColumns(), LOCATION)


def test_iter_rows_checks_header_before_streaming(tmpdir_path, social_file, index):
    joiner = ParcelJoiner(index, SocialColumns(gps_coords='coords'), LOCATION)

    # Raised by the call itself, no row requested
    with pytest.raises(MissingColumn):
        joiner.iter_rows(social_file)
    with pytest.raises(NotFound):
        joiner.iter_rows(tmpdir_path / 'missing.csv')
    assert joiner.summary.total == 0


def test_iter_rows_is_lazy_and_reports_progress(social_file, index):
    calls = []
    joiner = ParcelJoiner(index, SocialColumns(), LOCATION)

    rows = joiner.iter_rows(social_file, progress=lambda: calls.append(1))
    next(rows)
    next(rows)
    assert joiner.summary.total == 1

    list(rows)
    assert joiner.summary.total == 5
    assert len(calls) == 5
    assert len(joiner.feature_collection()['features']) == 5
