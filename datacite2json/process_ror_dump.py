"""
Build the ROR affiliation table from the latest ROR data dump on Zenodo.

Writes a JSON array of {"prefLabel", "rorId"} entries, the format read by
`RorAffiliationLookup`:

    python -m datacite2json.process_ror_dump -o datacite2json/resources/ror-affiliations.json
"""
import os
import io
import json
import gzip
import zipfile
import argparse
import logging
import time
from typing import Dict, Iterable, List, Optional

import requests
from tqdm import tqdm

from datacite2json.config import ROR_AFFILIATIONS_PATH, ROR_DUMP_RECORDS_URL, ROR_DUMP_COMMUNITY, \
    ROR_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

DUMP_FILE_SUFFIXES = ('.zip', '.jsonl.gz', '.json.gz')


def fetch_latest_dump_file(records_url: str = ROR_DUMP_RECORDS_URL, timeout: int = ROR_REQUEST_TIMEOUT) -> Dict:
    """
    File entry of the most recent ROR dump record, e.g.
        {"key": "v1.55-2024-10-31-ror-data.zip", "links": {"self": "https://zenodo.org/.../content"}}
    :param records_url: Zenodo records API
    :param timeout:
    :return:
    """
    response = requests.get(
        records_url,
        params={'communities': ROR_DUMP_COMMUNITY, 'sort': 'mostrecent', 'size': 1},
        headers={'Accept': 'application/json'},
        timeout=timeout
    )
    response.raise_for_status()
    hits = response.json().get('hits', {}).get('hits', [])
    if not hits:
        raise ValueError('No ROR data dump records were returned')

    for dump_file in hits[0].get('files') or []:
        key = dump_file.get('key') if isinstance(dump_file, dict) else None
        if isinstance(key, str) and key.endswith(DUMP_FILE_SUFFIXES):
            if not (dump_file.get('links') or {}).get('self'):
                raise ValueError(f'ROR data dump {key} has no download URL')
            return dump_file
    raise ValueError('Unable to locate a data dump within the ROR record')


def download_dump(dump_file: Dict, timeout: int = ROR_REQUEST_TIMEOUT) -> bytes:
    response = requests.get(dump_file['links']['self'], timeout=timeout)
    response.raise_for_status()
    return response.content


def _organizations_from_zip(content: bytes) -> List[Dict]:
    """Schema v1 files are smaller and preferred over the *_schema_v2 ones"""
    with zipfile.ZipFile(io.BytesIO(content)) as archive:
        json_files = [name for name in archive.namelist() if name.endswith('.json')]
        if not json_files:
            raise ValueError('No JSON file found in the ROR data archive')
        v1_files = [name for name in json_files if 'schema_v2' not in name]
        json_file = v1_files[0] if v1_files else json_files[0]
        logger.info("Processing %s from archive", json_file)
        return json.loads(archive.read(json_file))


def _organizations_from_jsonl(lines: Iterable[str]) -> List[Dict]:
    organizations = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            organizations.append(json.loads(line))
        except ValueError as e:
            logger.warning("Skipping malformed JSON line: %s", e)
    return organizations


def read_organizations(content: bytes, key: str) -> List[Dict]:
    """
    Organization records of a dump, whichever of the published formats it uses
    :param content: raw dump file
    :param key: dump file name, used to pick the format
    :return:
    """
    if key.endswith('.zip'):
        organizations = _organizations_from_zip(content)
    elif key.endswith('.jsonl.gz'):
        organizations = _organizations_from_jsonl(gzip.decompress(content).decode('utf-8').splitlines())
    else:
        organizations = json.loads(gzip.decompress(content))
    if not isinstance(organizations, list):
        raise ValueError('Invalid JSON structure in ROR data file')
    return organizations


def _name_with_type(names: List, name_type: str) -> Optional[str]:
    for name in names:
        if isinstance(name, dict) and name_type in (name.get('types') or []):
            return name.get('value')
    return None


def organization_to_entry(organization: Dict) -> Optional[Dict[str, str]]:
    """
    Schema v2 records name themselves in `names` (ror_display, then label);
    schema v1 records have a plain `name`.

    Example:
        {"id": "https://ror.org/04z8jg394",
         "names": [{"value": "GFZ Helmholtz Centre for Geosciences", "types": ["ror_display", "label"]}]}
            -> {"prefLabel": "GFZ Helmholtz Centre for Geosciences", "rorId": "https://ror.org/04z8jg394"}
    """
    if not isinstance(organization, dict):
        return None
    ror_id = organization.get('id')
    if not isinstance(ror_id, str) or not ror_id.strip():
        return None

    names = organization.get('names')
    names = names if isinstance(names, list) else []
    label = _name_with_type(names, 'ror_display') or _name_with_type(names, 'label') or organization.get('name')
    if not isinstance(label, str) or not label.strip():
        return None

    return {'prefLabel': label.strip(), 'rorId': ror_id.strip()}


def write_ror_affiliations(organizations: List[Dict], output_file: str) -> int:
    """
    Write the affiliation table
    :param organizations:
    :param output_file:
    :return: number of entries written
    """
    entries = []
    for organization in tqdm(organizations):
        entry = organization_to_entry(organization)
        if entry is not None:
            entries.append(entry)

    output_dir = os.path.dirname(output_file)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as outf:
        json.dump(entries, outf, ensure_ascii=False)
    return len(entries)


def process_ror_dump(
        output_file: str = ROR_AFFILIATIONS_PATH,
        records_url: str = ROR_DUMP_RECORDS_URL,
        timeout: int = ROR_REQUEST_TIMEOUT
) -> int:
    """
    Download the latest ROR dump and write it as an affiliation table
    :param output_file:
    :param records_url:
    :param timeout:
    :return: number of entries written
    """
    dump_file = fetch_latest_dump_file(records_url, timeout)
    print(f"Downloading {dump_file['key']}")
    content = download_dump(dump_file, timeout)
    organizations = read_organizations(content, dump_file['key'])
    saved = write_ror_affiliations(organizations, output_file)
    if saved == 0:
        logger.warning("No ROR affiliations were written to %s", output_file)
    return saved


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Build the ROR affiliation table for datacite2json")
    parser.add_argument("-o", "--output", default=ROR_AFFILIATIONS_PATH, help="path to the output JSON file")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    start_time = time.time()

    saved = process_ror_dump(args.output)
    print(f'Saved {saved} ROR affiliation entries to {args.output}')

    runtime = round(time.time() - start_time, 3)
    print("runtime: %s seconds " % (runtime))
    print('done.')
