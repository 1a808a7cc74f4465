"""

Functions for parsing `subjects` tags

"""

import logging
import re
from typing import List, Optional

from datacite2json.config import GCMD_CONCEPT_BASE_URI
from datacite2json.datacite import GcmdKeyword
from datacite2json.utils.soup_utils import ParsedElement, collect_parsed

logger = logging.getLogger(__name__)

GCMD_SCHEMES = ['Science Keywords', 'Platforms', 'Instruments']

UUID_PATTERN = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', re.IGNORECASE)

FREE_KEYWORD_EXCLUDING_ATTRS = ('subjectScheme', 'schemeURI', 'valueURI')


def match_gcmd_scheme(subject_scheme: Optional[str]) -> Optional[str]:
    """
    Canonical GCMD scheme label for a free-form `subjectScheme`, e.g.
    'NASA/GCMD Earth Science Keywords' -> 'Science Keywords'
    """
    if not subject_scheme:
        return None
    lowered = subject_scheme.lower()
    for scheme in GCMD_SCHEMES:
        if scheme.lower() in lowered:
            return scheme
    return None


def parse_gcmd_path(text: Optional[str]) -> List[str]:
    """
    Example:
        'Science Keywords > EARTH SCIENCE > ATMOSPHERE > ATMOSPHERIC PRESSURE'
            -> ['EARTH SCIENCE', 'ATMOSPHERE', 'ATMOSPHERIC PRESSURE']
    """
    if not text:
        return []
    segments = [segment.strip() for segment in text.split('>')]
    segments = [segment for segment in segments if segment]
    if segments:
        head = segments[0].lower()
        if head.startswith('gcmd '):
            head = head[len('gcmd '):].strip()
        if head in {scheme.lower() for scheme in GCMD_SCHEMES}:
            segments = segments[1:]
    return segments


def extract_gcmd_uuid(value_uri: Optional[str]) -> Optional[str]:
    """Last UUID in a KMS concept URI, e.g. .../kms/concept/<uuid> or ...?uuid=<uuid>"""
    if not value_uri:
        return None
    matches = UUID_PATTERN.findall(value_uri)
    return matches[-1] if matches else None


def build_gcmd_concept_uri(uuid: str) -> str:
    return f'{GCMD_CONCEPT_BASE_URI}{uuid}'


def parse_gcmd_subject(subject_tag: ParsedElement) -> Optional[GcmdKeyword]:
    """
    Examples:
        <subject subjectScheme="NASA/GCMD Earth Science Keywords"
                 schemeURI="https://gcmd.earthdata.nasa.gov/kms/concepts/concept_scheme/sciencekeywords"
                 valueURI="https://gcmd.earthdata.nasa.gov/kms/concept/b9c56939-c624-467d-b196-e56a5b660334">
            Science Keywords > EARTH SCIENCE > ATMOSPHERE > ATMOSPHERIC PRESSURE
        </subject>
        <subject subjectScheme="NASA/GCMD Earth Platforms Keywords" valueURI="...">
            Platforms > Space-based Platforms > Earth Observation Satellites
        </subject>
    """
    scheme = match_gcmd_scheme(subject_tag.get('subjectScheme'))
    value_uri = subject_tag.get('valueURI')
    content = subject_tag.string_value()
    if scheme is None or not value_uri or not content:
        return None

    uuid = extract_gcmd_uuid(value_uri)
    if uuid is None:
        logger.debug("Skipping GCMD subject without concept UUID: %s", value_uri)
        return None

    return GcmdKeyword(
        uuid=uuid,
        concept_uri=build_gcmd_concept_uri(uuid),
        path=parse_gcmd_path(content),
        scheme=scheme
    )


def _subject_tags(resource_tag: ParsedElement) -> List[ParsedElement]:
    return [
        subject_tag
        for subjects_tag in resource_tag.iter('subjects')
        for subject_tag in subjects_tag.find_all('subject')
    ]


def extract_gcmd_keywords(resource_tag: ParsedElement) -> List[GcmdKeyword]:
    return collect_parsed(parse_gcmd_subject, _subject_tags(resource_tag))


def extract_free_keywords(resource_tag: ParsedElement) -> List[str]:
    """
    Uncontrolled keywords are subjects without any scheme or value URI:
        <subject>climate change</subject>
    """
    keywords = []
    for subject_tag in _subject_tags(resource_tag):
        if any(attr in subject_tag.attrs for attr in FREE_KEYWORD_EXCLUDING_ATTRS):
            continue
        text = subject_tag.string_value()
        if text:
            keywords.append(text)
    return keywords
