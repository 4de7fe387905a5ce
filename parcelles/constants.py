"""
Centralized constants for the parcel reconciliation pipeline.

Column defaults mirror the exports of the social housing and cadastral
open data portals. Import from here to ensure consistency.
"""

# CSV dialect (semicolon separated, double-quote quoted, backslash escaped)
CSV_DELIMITER = ';'
CSV_QUOTECHAR = '"'
CSV_ESCAPECHAR = '\\'
CSV_LINETERMINATOR = '\n'
CSV_ENCODING = 'utf-8'

UTF8_BOM = '\ufeff'
TRIM_CHARS = ' "'

# Parcel code lengths
LEGACY_CODE_LENGTH = 14

# Social housing file columns
COL_GPS_COORDS = '_parcelle_coords.coord'
COL_CODE_PARCELLE = 'code_parcelle'
COL_ID_PARCELLAIRE = 'id_parcellaire'
COL_ADDRESS = 'adresse'
COL_GROUP_PERSON = 'groupe_personne'

# Cadastral file columns
COL_CADASTRAL_ID = 'id_parcellaire'
COL_CADASTRAL_GEO = 'Geo Shape'
COL_CADASTRAL_LAT = 'N_PARC_Y'
COL_CADASTRAL_LON = 'N_PARC_X'

# Output
COL_LOCATION_NAME = 'name'
DEFAULT_LOCATION_NAME = 'Strasbourg'

# GeoJSON feature property names
PROP_NAME = 'name'
PROP_CODE_PARCELLE = 'code_parcelle'
PROP_ADDRESS = 'adresse'
PROP_GROUP_PERSON = 'groupe_personne'

# Decimal places kept on synthesized GPS points
POINT_PRECISION = 15

BACKUP_SUFFIX = '.backup.'
BACKUP_TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'
