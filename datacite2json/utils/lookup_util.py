"""
Lazily loaded vocabulary lookups used while normalizing DataCite XML.

Each lookup reads its source once, on first access, and is read-only
afterwards.  A source that is missing or broken leaves an empty table.

Usage:
    ror = RorAffiliationLookup()                  # bundled ror-affiliations.json
    ror.label_for('https://ror.org/04z8jg394')    # -> 'GFZ Helmholtz Centre for Geosciences'

    labs = MslLaboratoryLookup.from_entries([{'identifier': 'lab1', 'name': 'Lab 1'}])
    labs.get('lab1')                              # -> {'name': 'Lab 1', 'affiliation_name': '', ...}
"""

import json
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from datacite2json.config import ROR_AFFILIATIONS_PATH, RESOURCE_TYPES_PATH, MSL_LABORATORIES_URL, \
    MSL_LABORATORIES_PATH, MSL_REQUEST_TIMEOUT
from datacite2json.utils.identifier_util import canonicalise_ror_id

logger = logging.getLogger(__name__)


def read_json_file(path: Optional[str]) -> List:
    """Read a JSON array from disk; anything unreadable is an empty list"""
    if not path:
        return []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        logger.warning("Vocabulary file %s could not be read: %s", path, e)
        return []
    except ValueError as e:
        logger.warning("Vocabulary file %s is not valid JSON: %s", path, e)
        return []
    if not isinstance(data, list):
        logger.warning("Vocabulary file %s does not hold a JSON array", path)
        return []
    return data


class VocabularyLookup:
    """
    Key -> value table filled on first access.

    Subclasses implement `read_entries` (raw JSON entries) and `index_entry`
    (entry -> (key, value) or None for unusable entries).
    """

    def __init__(self):
        self.loaded = False
        self.map: Dict[str, Any] = {}
        self._load_lock = threading.Lock()

    @classmethod
    def from_entries(cls, entries: Iterable[Dict], **kwargs):
        """Build an already loaded lookup from in-memory entries"""
        lookup = cls(**kwargs)
        lookup._publish(lookup._build(entries))
        return lookup

    def read_entries(self) -> List:
        raise NotImplementedError

    def index_entry(self, entry: Dict) -> Optional[Tuple[str, Any]]:
        raise NotImplementedError

    def normalise_key(self, key: str) -> Optional[str]:
        return key.strip() or None

    def _build(self, entries: Iterable) -> Dict[str, Any]:
        built = {}
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            indexed = self.index_entry(entry)
            if indexed is not None:
                key, value = indexed
                built[key] = value
        return built

    def _publish(self, built: Dict[str, Any]):
        # the map must be complete before readers see loaded
        self.map = built
        self.loaded = True

    def ensure_loaded(self):
        if self.loaded:
            return
        with self._load_lock:
            if self.loaded:
                return
            self._publish(self._build(self.read_entries()))
            logger.debug("%s loaded %d entries", type(self).__name__, len(self.map))

    def get(self, key: Optional[str]) -> Optional[Any]:
        if not isinstance(key, str):
            return None
        normalised = self.normalise_key(key)
        if normalised is None:
            return None
        self.ensure_loaded()
        return self.map.get(normalised)

    def __len__(self):
        self.ensure_loaded()
        return len(self.map)


class RorAffiliationLookup(VocabularyLookup):
    """
    Canonical ROR id -> preferred label, read from a JSON array of
        {"prefLabel": "GFZ Helmholtz Centre for Geosciences", "rorId": "https://ror.org/04z8jg394"}
    """

    def __init__(self, path: Optional[str] = ROR_AFFILIATIONS_PATH):
        super().__init__()
        self.path = path

    def read_entries(self) -> List:
        return read_json_file(self.path)

    def normalise_key(self, key: str) -> Optional[str]:
        return canonicalise_ror_id(key)

    def index_entry(self, entry: Dict) -> Optional[Tuple[str, str]]:
        label = entry.get('prefLabel')
        label = label.strip() if isinstance(label, str) else ''
        ror_id = canonicalise_ror_id(entry.get('rorId'))
        if not label or ror_id is None:
            return None
        return ror_id, label

    def label_for(self, ror_id: Optional[str]) -> Optional[str]:
        return self.get(ror_id)


class MslLaboratoryLookup(VocabularyLookup):
    """
    MSL laboratory id -> {"name", "affiliation_name", "affiliation_ror"}.

    Read from a local JSON file when `path` is set, otherwise fetched over HTTP.
    """

    def __init__(
            self,
            url: Optional[str] = MSL_LABORATORIES_URL,
            path: Optional[str] = MSL_LABORATORIES_PATH,
            timeout: int = MSL_REQUEST_TIMEOUT
    ):
        super().__init__()
        self.url = url
        self.path = path
        self.timeout = timeout

    def read_entries(self) -> List:
        if self.path:
            return read_json_file(self.path)
        if not self.url:
            return []
        try:
            response = requests.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.warning("MSL laboratory vocabulary unavailable from %s: %s", self.url, e)
            return []
        except ValueError as e:
            logger.warning("MSL laboratory vocabulary from %s is not valid JSON: %s", self.url, e)
            return []
        if not isinstance(data, list):
            logger.warning("MSL laboratory vocabulary from %s does not hold a JSON array", self.url)
            return []
        return data

    def index_entry(self, entry: Dict) -> Optional[Tuple[str, Dict[str, str]]]:
        identifier = entry.get('identifier')
        if not isinstance(identifier, str) or not identifier.strip():
            return None

        def _field(name: str) -> str:
            value = entry.get(name)
            return value.strip() if isinstance(value, str) else ''

        return identifier.strip(), {
            'name': _field('name'),
            'affiliation_name': _field('affiliation_name'),
            'affiliation_ror': _field('affiliation_ror'),
        }


class ResourceTypeLookup(VocabularyLookup):
    """
    Lowercased resourceTypeGeneral name -> internal id (as a string)
    """

    def __init__(self, path: Optional[str] = RESOURCE_TYPES_PATH):
        super().__init__()
        self.path = path

    def read_entries(self) -> List:
        return read_json_file(self.path)

    def normalise_key(self, key: str) -> Optional[str]:
        return key.strip().lower() or None

    def index_entry(self, entry: Dict) -> Optional[Tuple[str, str]]:
        name = entry.get('name')
        type_id = entry.get('id')
        if not isinstance(name, str) or not name.strip() or type_id is None:
            return None
        return name.strip().lower(), str(type_id)
