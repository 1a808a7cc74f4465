"""

Functions for parsing `creators` and `contributors` tags

"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from datacite2json.datacite import Affiliation, Contributor, PersonContributor, InstitutionContributor, \
    MslLaboratory
from datacite2json.utils.identifier_util import canonicalise_orcid, canonicalise_ror_id, is_ror_identifier
from datacite2json.utils.lookup_util import RorAffiliationLookup, MslLaboratoryLookup
from datacite2json.utils.soup_utils import ParsedElement, collect_parsed
from datacite2json.xml2json.datacite_utils.aggregate_utils import aggregate_contributors

logger = logging.getLogger(__name__)

CONTRIBUTOR_ROLE_LABELS = {
    'contactperson': 'Contact Person',
    'datacollector': 'Data Collector',
    'datacurator': 'Data Curator',
    'datamanager': 'Data Manager',
    'distributor': 'Distributor',
    'editor': 'Editor',
    'hostinginstitution': 'Hosting Institution',
    'producer': 'Producer',
    'projectleader': 'Project Leader',
    'projectmanager': 'Project Manager',
    'projectmember': 'Project Member',
    'registrationagency': 'Registration Agency',
    'registrationauthority': 'Registration Authority',
    'relatedperson': 'Related Person',
    'researcher': 'Researcher',
    'researchgroup': 'Research Group',
    'rightsholder': 'Rights Holder',
    'sponsor': 'Sponsor',
    'supervisor': 'Supervisor',
    'translator': 'Translator',
    'workpackageleader': 'Work Package Leader',
    'other': 'Other',
}

INSTITUTION_ONLY_ROLE_KEYS = {
    'distributor',
    'hostinginstitution',
    'registrationagency',
    'registrationauthority',
    'researchgroup',
    'sponsor',
}

MSL_LAB_CONTRIBUTOR_TYPE = 'hostinginstitution'
MSL_LAB_IDENTIFIER_SCHEME = 'labid'


# ----------------------------------------------------------------------
# names and identifiers
# ----------------------------------------------------------------------

def split_creator_name(name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    'Smith, Jane' -> ('Smith', 'Jane'); 'Jane Smith' -> ('Jane Smith', None)
    :return: (family name, given name)
    """
    if not name:
        return None, None
    if ',' in name:
        family, given = [part.strip() for part in name.split(',', 1)]
        return family or None, given or None
    return name, None


def extract_orcid(name_tag: ParsedElement) -> Optional[str]:
    """
    First ORCID among the <nameIdentifier> children:
        <nameIdentifier nameIdentifierScheme="ORCID" schemeURI="https://orcid.org/">
            https://orcid.org/0000-0001-5727-2427
        </nameIdentifier>
    """
    for identifier_tag in name_tag.find_all('nameIdentifier'):
        scheme = identifier_tag.get('nameIdentifierScheme')
        if (scheme or '').strip().lower() != 'orcid':
            continue
        orcid = canonicalise_orcid(identifier_tag.string_value())
        if orcid is not None:
            return orcid
    return None


# ----------------------------------------------------------------------
# affiliations
# ----------------------------------------------------------------------

def resolve_affiliation_by_ror(
        identifier: Optional[str],
        scheme: Optional[str],
        fallback_label: Optional[str],
        ror_lookup: Optional[RorAffiliationLookup] = None
) -> Optional[Affiliation]:
    """
    Affiliation for a ROR identifier, labelled from the ROR table when the id is
    known and with `fallback_label` (or the id itself) otherwise.  Identifiers
    that are not ROR give None.
    """
    if not identifier or not is_ror_identifier(identifier, scheme):
        return None
    canonical = canonicalise_ror_id(identifier)
    if canonical is None:
        return None
    label = ror_lookup.label_for(canonical) if ror_lookup is not None else None
    if label:
        return Affiliation(value=label, ror_id=canonical)
    return Affiliation(value=fallback_label or canonical, ror_id=canonical)


def parse_affiliation(
        affiliation_tag: ParsedElement,
        ror_lookup: Optional[RorAffiliationLookup] = None
) -> Optional[Affiliation]:
    """
    <affiliation affiliationIdentifier="https://ror.org/04z8jg394" affiliationIdentifierScheme="ROR">
        GFZ German Research Centre for Geosciences
    </affiliation>
    """
    raw_value = affiliation_tag.string_value()
    resolved = resolve_affiliation_by_ror(
        affiliation_tag.get('affiliationIdentifier'),
        affiliation_tag.get('affiliationIdentifierScheme'),
        raw_value,
        ror_lookup
    )
    if resolved is not None:
        return resolved
    if raw_value:
        return Affiliation(value=raw_value)
    return None


def extract_affiliations(
        name_tag: ParsedElement,
        ror_lookup: Optional[RorAffiliationLookup] = None
) -> List[Affiliation]:
    return collect_parsed(
        lambda affiliation_tag: parse_affiliation(affiliation_tag, ror_lookup),
        name_tag.find_all('affiliation')
    )


def extract_institution_affiliations(
        contributor_tag: ParsedElement,
        institution_name: str,
        ror_lookup: Optional[RorAffiliationLookup] = None
) -> List[Affiliation]:
    """
    Organizations often carry their own ROR as a <nameIdentifier> instead of an
    <affiliation>; that identifier stands in when there are no affiliations.
    """
    affiliations = extract_affiliations(contributor_tag, ror_lookup)
    if affiliations:
        return affiliations
    for identifier_tag in contributor_tag.find_all('nameIdentifier'):
        resolved = resolve_affiliation_by_ror(
            identifier_tag.string_value(),
            identifier_tag.get('nameIdentifierScheme'),
            institution_name,
            ror_lookup
        )
        if resolved is not None:
            return [resolved]
    return []


# ----------------------------------------------------------------------
# contributor roles
# ----------------------------------------------------------------------

def normalise_role_key(role: str) -> Optional[str]:
    """'Data Collector' / 'data-collector' / 'DataCollector' -> 'datacollector'"""
    key = re.sub(r'[^a-z0-9]', '', role.lower())
    return key or None


def headline(value: str) -> str:
    """'dataCollector' -> 'Data Collector', 'custom_role' -> 'Custom Role'"""
    value = re.sub(r'(?<=[a-z0-9])(?=[A-Z])', ' ', value)
    words = [word for word in re.split(r'[\s_\-]+', value) if word]
    return ' '.join(word[:1].upper() + word[1:].lower() for word in words)


def resolve_role_label(role: str) -> str:
    key = normalise_role_key(role)
    if key is not None and key in CONTRIBUTOR_ROLE_LABELS:
        return CONTRIBUTOR_ROLE_LABELS[key]
    return headline(role) or role.strip()


def parse_contributor_roles(raw_roles: Optional[str]) -> List[str]:
    """
    contributorType="DataCollector; ContactPerson" -> ['Data Collector', 'Contact Person']
    """
    if not raw_roles:
        return []
    roles = []
    for part in re.split(r'[;,]', raw_roles):
        part = part.strip()
        if not part:
            continue
        label = resolve_role_label(part)
        if label and label not in roles:
            roles.append(label)
    return roles


def roles_require_institution(roles: List[str]) -> bool:
    """True when there is at least one role and every role is institution-only"""
    has_roles = False
    for role in roles:
        if not role:
            continue
        has_roles = True
        if normalise_role_key(role) not in INSTITUTION_ONLY_ROLE_KEYS:
            return False
    return has_roles


def is_institution_contributor(name_type: Optional[str], roles: List[str]) -> bool:
    if name_type:
        normalised = name_type.strip().lower()
        if normalised == 'organizational':
            return True
        if normalised == 'personal':
            return False
    return roles_require_institution(roles)


# ----------------------------------------------------------------------
# creators
# ----------------------------------------------------------------------

def _person_names(name_tag: ParsedElement, entry_tag: ParsedElement) -> Tuple[str, str]:
    """(first name, last name) from givenName/familyName, completed from the display name"""
    given_tag = entry_tag.find('givenName')
    family_tag = entry_tag.find('familyName')
    given_name = given_tag.string_value() if given_tag is not None else None
    family_name = family_tag.string_value() if family_tag is not None else None
    display_name = name_tag.string_value() if name_tag is not None else None

    if (not given_name or not family_name) and display_name:
        split_family, split_given = split_creator_name(display_name)
        family_name = family_name or split_family
        given_name = given_name or split_given

    return given_name or '', family_name or display_name or ''


def parse_creator(
        creator_tag: ParsedElement,
        ror_lookup: Optional[RorAffiliationLookup] = None
) -> Optional[Contributor]:
    """
    Examples:
        <creator>
            <creatorName nameType="Personal">Smith, Jane</creatorName>
            <givenName>Jane</givenName>
            <familyName>Smith</familyName>
            <nameIdentifier nameIdentifierScheme="ORCID">0000-0001-5727-2427</nameIdentifier>
            <affiliation>University of Potsdam</affiliation>
        </creator>
        <creator>
            <creatorName nameType="Organizational">GFZ Data Services</creatorName>
        </creator>
    """
    if not creator_tag.children:
        return None
    name_tag = creator_tag.find('creatorName')
    name_type = name_tag.get('nameType') if name_tag is not None else None
    affiliations = extract_affiliations(creator_tag, ror_lookup)

    if name_type and name_type.strip().lower() == 'organizational':
        # kept even when unnamed; authors are positional
        return InstitutionContributor(institution_name=name_tag.string_value() or '', affiliations=affiliations)

    first_name, last_name = _person_names(name_tag, creator_tag)
    if not first_name and not last_name:
        return None
    return PersonContributor(
        first_name=first_name,
        last_name=last_name,
        orcid=extract_orcid(creator_tag),
        affiliations=affiliations
    )


def parse_authors(
        resource_tag: ParsedElement,
        ror_lookup: Optional[RorAffiliationLookup] = None
) -> List[Contributor]:
    """Creators in document order; authors are never merged"""
    return collect_parsed(
        lambda creator_tag: parse_creator(creator_tag, ror_lookup),
        resource_tag.find_path('creators', 'creator')
    )


# ----------------------------------------------------------------------
# contributors and MSL laboratories
# ----------------------------------------------------------------------

def extract_lab_id(contributor_tag: ParsedElement) -> Optional[str]:
    """
    Laboratory id of an MSL hosting institution:
        <contributor contributorType="HostingInstitution">
            <nameIdentifier nameIdentifierScheme="labid">9ba34c109b827b177aab36e0266b1643</nameIdentifier>
    """
    if (contributor_tag.get('contributorType') or '').strip().lower() != MSL_LAB_CONTRIBUTOR_TYPE:
        return None
    for identifier_tag in contributor_tag.find_all('nameIdentifier'):
        if (identifier_tag.get('nameIdentifierScheme') or '').strip().lower() != MSL_LAB_IDENTIFIER_SCHEME:
            continue
        lab_id = identifier_tag.string_value()
        if lab_id:
            return lab_id
    return None


def parse_msl_laboratory(
        contributor_tag: ParsedElement,
        lab_id: str,
        ror_lookup: Optional[RorAffiliationLookup] = None,
        msl_lookup: Optional[MslLaboratoryLookup] = None
) -> Optional[MslLaboratory]:
    """
    The laboratory vocabulary names the lab; the XML affiliation names its host
    institution, with the vocabulary as fallback.
    """
    vocabulary_entry: Dict[str, str] = (msl_lookup.get(lab_id) if msl_lookup is not None else None) or {}
    name_tag = contributor_tag.find('contributorName')
    xml_name = name_tag.string_value() if name_tag is not None else None

    name = vocabulary_entry.get('name') or xml_name or ''
    if not name:
        logger.warning("Dropping MSL laboratory %s: no name in XML or laboratory vocabulary", lab_id)
        return None

    affiliations = extract_affiliations(contributor_tag, ror_lookup)
    if affiliations:
        affiliation_name = affiliations[0].value
        affiliation_ror = affiliations[0].ror_id or ''
    else:
        affiliation_name = vocabulary_entry.get('affiliation_name', '')
        affiliation_ror = canonicalise_ror_id(vocabulary_entry.get('affiliation_ror')) or ''

    return MslLaboratory(
        identifier=lab_id,
        name=name,
        affiliation_name=affiliation_name,
        affiliation_ror=affiliation_ror
    )


def parse_contributor(
        contributor_tag: ParsedElement,
        ror_lookup: Optional[RorAffiliationLookup] = None
) -> Optional[Contributor]:
    """
    Examples:
        <contributor contributorType="ContactPerson">
            <contributorName nameType="Personal">Smith, Jane</contributorName>
            <nameIdentifier nameIdentifierScheme="ORCID">https://orcid.org/0000-0001-5727-2427</nameIdentifier>
        </contributor>
        <contributor contributorType="Distributor">
            <contributorName>GFZ Data Services</contributorName>
            <nameIdentifier nameIdentifierScheme="ROR">https://ror.org/04z8jg394</nameIdentifier>
        </contributor>

    Without nameType, a contributor whose roles are all institution-only is an institution.
    """
    if not contributor_tag.children:
        return None
    roles = parse_contributor_roles(contributor_tag.get('contributorType'))
    name_tag = contributor_tag.find('contributorName')
    name_type = name_tag.get('nameType') if name_tag is not None else None

    if is_institution_contributor(name_type, roles):
        institution_name = (name_tag.string_value() if name_tag is not None else None) or ''
        affiliations = extract_institution_affiliations(contributor_tag, institution_name, ror_lookup)
        if not institution_name and not affiliations:
            return None
        return InstitutionContributor(
            institution_name=institution_name,
            affiliations=affiliations,
            roles=roles
        )

    first_name, last_name = _person_names(name_tag, contributor_tag)
    orcid = extract_orcid(contributor_tag)
    if not first_name and not last_name and orcid is None:
        return None
    return PersonContributor(
        first_name=first_name,
        last_name=last_name,
        orcid=orcid,
        affiliations=extract_affiliations(contributor_tag, ror_lookup),
        roles=roles
    )


def parse_contributors(
        resource_tag: ParsedElement,
        ror_lookup: Optional[RorAffiliationLookup] = None,
        msl_lookup: Optional[MslLaboratoryLookup] = None
) -> Tuple[List[Contributor], List[MslLaboratory]]:
    """
    Split <contributors> into merged contributors and MSL laboratories
    :param resource_tag:
    :param ror_lookup:
    :param msl_lookup:
    :return: (contributors, laboratories)
    """
    candidates = []
    laboratories = []
    for contributor_tag in resource_tag.find_path('contributors', 'contributor'):
        lab_id = extract_lab_id(contributor_tag)
        if lab_id is not None:
            laboratory = parse_msl_laboratory(contributor_tag, lab_id, ror_lookup, msl_lookup)
            if laboratory is not None:
                laboratories.append(laboratory)
            continue
        contributor = parse_contributor(contributor_tag, ror_lookup)
        if contributor is not None:
            candidates.append(contributor)
    return aggregate_contributors(candidates), laboratories
