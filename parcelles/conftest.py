"""
Shared fixtures: small social housing and cadastral files.
"""

import tempfile
from pathlib import Path

import pytest

from parcelles.csv_io import write_rows
from parcelles.sample_data import CADASTRAL_ROWS, SOCIAL_ROWS


@pytest.fixture
def tmpdir_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def social_file(tmpdir_path):
    path = tmpdir_path / 'social.csv'
    write_rows(path, SOCIAL_ROWS)
    return path


@pytest.fixture
def cadastral_file(tmpdir_path):
    path = tmpdir_path / 'cadastral.csv'
    write_rows(path, CADASTRAL_ROWS)
    return path
