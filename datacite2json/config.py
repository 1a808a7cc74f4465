"""
datacite2json configuration
"""
import os

DATACITE2JSON_NAME_STRING = 'datacite2json'
DATACITE2JSON_VERSION_STRING = '0.1'

RESOURCE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'resources')

# ROR id -> preferred label table, a JSON array of {"prefLabel", "rorId"}
ROR_AFFILIATIONS_PATH = os.getenv(
    'DATACITE2JSON_ROR_PATH',
    os.path.join(RESOURCE_DIR, 'ror-affiliations.json')
)

# DataCite resourceTypeGeneral vocabulary, a JSON array of {"id", "name"}
RESOURCE_TYPES_PATH = os.getenv(
    'DATACITE2JSON_RESOURCE_TYPES_PATH',
    os.path.join(RESOURCE_DIR, 'resource-types.json')
)

# MSL laboratory vocabulary; a local file takes precedence over the URL
MSL_LABORATORIES_URL = os.getenv(
    'DATACITE2JSON_MSL_URL',
    'https://raw.githubusercontent.com/UtrechtUniversity/msl_vocabularies/main/vocabularies/labs/laboratories.json'
)
MSL_LABORATORIES_PATH = os.getenv('DATACITE2JSON_MSL_PATH')
MSL_REQUEST_TIMEOUT = 30

GCMD_CONCEPT_BASE_URI = 'https://gcmd.earthdata.nasa.gov/kms/concept/'

ALLOWED_EXTENSIONS = {'xml'}

# Zenodo community publishing the ROR data dumps, see process_ror_dump.py
ROR_DUMP_RECORDS_URL = 'https://zenodo.org/api/records/'
ROR_DUMP_COMMUNITY = 'ror-data'
ROR_REQUEST_TIMEOUT = 300
