"""

Merge contributor entries that describe the same person or institution

The same contributor often appears once per role in DataCite XML.  Entries are
kept in a list and looked up through an index of identity keys; every key a
merged entry produced stays an alias of that entry.

Matching is best effort: a missed or a false merge is an accepted outcome.

"""

from typing import Dict, List, Optional

from datacite2json.datacite import Affiliation, Contributor, PersonContributor, InstitutionContributor
from datacite2json.utils.identifier_util import normalise_key_string


def _normalise_identifier(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed.lower() if trimmed else None


def build_aggregation_keys(contributor: Contributor) -> List[str]:
    """
    Examples:
        person with ORCID     -> ['person:orcid:0000-0001-5727-2427', 'person:name:smith:jane']
        institution with ROR  -> ['institution:ror:https://ror.org/04z8jg394', 'institution:name:gfz']
    """
    keys = []
    if isinstance(contributor, PersonContributor):
        orcid = _normalise_identifier(contributor.orcid)
        if orcid is not None:
            keys.append(f'person:orcid:{orcid}')
        last_name = normalise_key_string(contributor.last_name)
        first_name = normalise_key_string(contributor.first_name)
        if last_name is not None or first_name is not None:
            keys.append(f"person:name:{last_name or ''}:{first_name or ''}")
    elif isinstance(contributor, InstitutionContributor):
        for affiliation in contributor.affiliations:
            ror_id = _normalise_identifier(affiliation.ror_id)
            if ror_id is not None:
                keys.append(f'institution:ror:{ror_id}')
        institution_name = normalise_key_string(contributor.institution_name)
        if institution_name is not None:
            keys.append(f'institution:name:{institution_name}')
    return keys


def merge_roles(existing: List[str], incoming: List[str]) -> List[str]:
    merged = list(existing)
    for role in incoming:
        if role and role not in merged:
            merged.append(role)
    return merged


def _affiliation_key(affiliation: Affiliation) -> Optional[str]:
    ror_id = _normalise_identifier(affiliation.ror_id)
    if ror_id is not None:
        return f'ror:{ror_id}'
    value = normalise_key_string(affiliation.value)
    if value is not None:
        return f'value:{value}'
    return None


def merge_affiliations(existing: List[Affiliation], incoming: List[Affiliation]) -> List[Affiliation]:
    """
    Union by ROR id, or by lowercased value for affiliations without one.
    A ROR-less duplicate of an already identified affiliation is folded into
    it, and gaps in value or ROR id are filled from whichever side has them.
    """
    merged: List[Affiliation] = []
    seen: Dict[str, int] = {}

    for affiliation in list(existing) + list(incoming):
        value = (affiliation.value or '').strip()
        ror_id = (affiliation.ror_id or '').strip() or None
        candidate = Affiliation(value=value, ror_id=ror_id)
        key = _affiliation_key(candidate)
        if key is None:
            continue

        value_key = f'value:{normalise_key_string(value)}' if value else None
        index = seen.get(key)
        if index is None and value_key is not None:
            # a ROR-less entry matches an identified one by value, and vice versa
            other = seen.get(value_key)
            if other is not None and (ror_id is None or merged[other].ror_id is None):
                index = other

        if index is not None:
            target = merged[index]
            if not target.value and value:
                target.value = value
                if value_key is not None:
                    seen.setdefault(value_key, index)
            if target.ror_id is None and ror_id is not None:
                target.ror_id = ror_id
                seen[key] = index
            continue

        seen[key] = len(merged)
        if value_key is not None:
            seen.setdefault(value_key, len(merged))
        merged.append(candidate)

    return merged


def merge_contributor_entries(primary: Contributor, incoming: Contributor) -> Contributor:
    """
    Fill gaps in `primary` from `incoming`; set fields are never overwritten.
    Entries of different types are never merged.
    """
    if type(primary) is not type(incoming):
        return primary

    primary.roles = merge_roles(primary.roles or [], incoming.roles or [])

    if isinstance(primary, PersonContributor):
        if not primary.orcid and incoming.orcid:
            primary.orcid = incoming.orcid
        if not (primary.first_name or '').strip() and (incoming.first_name or '').strip():
            primary.first_name = incoming.first_name
        if not (primary.last_name or '').strip() and (incoming.last_name or '').strip():
            primary.last_name = incoming.last_name
    else:
        if not (primary.institution_name or '').strip() and (incoming.institution_name or '').strip():
            primary.institution_name = incoming.institution_name

    primary.affiliations = merge_affiliations(primary.affiliations, incoming.affiliations)
    return primary


def store_contributor(
        contributors: List[Contributor],
        index_by_key: Dict[str, int],
        candidate: Contributor
) -> List[Contributor]:
    """
    Append `candidate`, or merge it into the first entry one of its keys points to.
    Keys are type-prefixed, so a hit is always an entry of the same type.
    :param contributors: entries so far, extended in place
    :param index_by_key: aggregation key -> position in `contributors`, updated in place
    :param candidate:
    :return: contributors
    """
    keys = build_aggregation_keys(candidate)

    for key in keys:
        existing_index = index_by_key.get(key)
        if existing_index is None:
            continue
        contributors[existing_index] = merge_contributor_entries(contributors[existing_index], candidate)
        for alias_key in keys:
            index_by_key[alias_key] = existing_index
        return contributors

    contributors.append(candidate)
    for key in keys:
        index_by_key[key] = len(contributors) - 1
    return contributors


def aggregate_contributors(candidates: List[Contributor]) -> List[Contributor]:
    contributors: List[Contributor] = []
    index_by_key: Dict[str, int] = {}
    for candidate in candidates:
        store_contributor(contributors, index_by_key, candidate)
    return contributors
