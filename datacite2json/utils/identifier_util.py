"""
Canonical forms for ORCID and ROR identifiers and for matching keys
"""
import re
from typing import Optional
from urllib.parse import urlparse

ORCID_URL_PATTERN = re.compile(r'^(?:https?://)?(?:www\.)?orcid\.org/', re.IGNORECASE)
URL_SCHEME_PATTERN = re.compile(r'^[a-z][a-z0-9+.-]*://', re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r'\s+')


def canonicalise_orcid(raw: Optional[str]) -> Optional[str]:
    """
    Bare, uppercased ORCID identifier.

    Examples:
        'https://orcid.org/0000-0001-5727-242x' -> '0000-0001-5727-242X'
        '/0000-0001-5727-2427/'                 -> '0000-0001-5727-2427'
    """
    if not isinstance(raw, str):
        return None
    trimmed = raw.strip()
    if not trimmed:
        return None
    match = ORCID_URL_PATTERN.match(trimmed)
    if match:
        identifier = re.split(r'[?#]', trimmed[match.end():])[0].strip('/')
    else:
        identifier = trimmed.strip('/')
    if not identifier:
        return None
    return identifier.upper()


def canonicalise_ror_id(raw: Optional[str]) -> Optional[str]:
    """
    Accepts a bare ROR id or a ROR URL on any host and in any case and
    returns https://ror.org/<lowercased id>
    """
    if not isinstance(raw, str):
        return None
    trimmed = raw.strip()
    if not trimmed:
        return None
    if URL_SCHEME_PATTERN.match(trimmed):
        path = urlparse(trimmed).path
    elif trimmed.lower().startswith('ror.org/'):
        path = trimmed[len('ror.org/'):]
    else:
        path = trimmed
    path = path.strip('/').lower()
    if not path:
        return None
    return f'https://ror.org/{path}'


def is_ror_identifier(identifier: Optional[str], scheme: Optional[str] = None) -> bool:
    if isinstance(scheme, str) and scheme.strip().lower() == 'ror':
        return True
    return isinstance(identifier, str) and 'ror.org' in identifier.lower()


def normalise_key_string(value: Optional[str]) -> Optional[str]:
    """Trim, collapse inner whitespace and lowercase; empty is None"""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    return WHITESPACE_PATTERN.sub(' ', trimmed).lower()
