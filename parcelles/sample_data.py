"""
Sample social housing and cadastral rows shared by the tests.
"""

POLYGON_0017 = ('{"type":"Polygon","coordinates":[[[7.7455,48.5839],[7.7456,48.5839],'
                '[7.7456,48.584],[7.7455,48.584],[7.7455,48.5839]]]}')
POLYGON_0018 = ('{"type":"Polygon","coordinates":[[[7.7456,48.584],[7.7457,48.584],'
                '[7.7457,48.5841],[7.7456,48.5841],[7.7456,48.584]]]}')
POLYGON_0014 = ('{"type":"Polygon","coordinates":[[[7.7457,48.5841],[7.7458,48.5841],'
                '[7.7458,48.5842],[7.7457,48.5842],[7.7457,48.5841]]]}')
POLYGON_0001 = ('{"type":"Polygon","coordinates":[[[7.7458,48.5842],[7.7459,48.5842],'
                '[7.7459,48.5843],[7.7458,48.5843],[7.7458,48.5842]]]}')

SOCIAL_ROWS = [
    ['_parcelle_coords.coord', 'code_parcelle', 'id_parcellaire', 'adresse', 'groupe_personne'],
    ['48.5839,7.7455', '67482000010017', '674820010017', '1 Rue Test', 'Société A'],
    ['48.5840,7.7456', '67482000010018', '674820010018', '2 Rue Test', 'Société B'],
    ['48.5841,7.7457', '67482000040014', '674820040014', '3 Rue Test', 'Société C'],
    # No GPS but a valid CNIG code
    ['', '67482000050001', '674820050001', '4 Rue Test', 'Société D'],
    # GPS but an invalid parcel code
    ['48.5842,7.7458', 'INVALID', '', '5 Rue Test', 'Société E'],
]

CADASTRAL_ROWS = [
    ['NUM_DEPT', 'NUM_COM', 'N_SECTION', 'N_PARCELLE', 'id_parcellaire', 'Geo Shape', 'N_PARC_Y', 'N_PARC_X'],
    ['67', '482', '001', '0017', '674820010017', POLYGON_0017, '48.5839', '7.7455'],
    ['67', '482', '001', '0018', '674820010018', POLYGON_0018, '48.5840', '7.7456'],
    ['67', '482', '004', '0014', '674820040014', POLYGON_0014, '48.5841', '7.7457'],
    ['67', '482', '005', '0001', '674820050001', POLYGON_0001, '48.5842', '7.7458'],
]
