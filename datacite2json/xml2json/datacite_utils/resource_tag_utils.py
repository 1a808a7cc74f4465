"""

Functions for parsing `resource` level tags: identifiers, titles, descriptions,
dates, geo locations, rights and funding references

"""

import math
import re
from typing import List, Optional, Tuple

from datacite2json.datacite import Title, Description, DateEntry, CoverageEntry, FundingReference
from datacite2json.utils.soup_utils import ParsedElement, collect_parsed

MAIN_TITLE_TYPE = 'main-title'
DEFAULT_DESCRIPTION_TYPE = 'Other'
DEFAULT_DATE_TYPE = 'other'
COVERAGE_DATE_TYPE = 'coverage'
DEFAULT_TIMEZONE = 'UTC'


def kebab_case(value: str) -> str:
    """
    'AlternativeTitle' -> 'alternative-title', 'Coverage' -> 'coverage',
    'main title' -> 'main-title'
    """
    value = value.strip()
    if re.fullmatch(r'[a-z]+', value):
        return value
    value = ''.join(word[:1].upper() + word[1:] for word in value.split())
    value = re.sub(r'(.)(?=[A-Z])', r'\1-', value)
    return value.lower()


def _first_text(resource_tag: ParsedElement, tag: str) -> Optional[str]:
    for el in resource_tag.iter(tag):
        return el.string_value()
    return None


def parse_doi(resource_tag: ParsedElement) -> Optional[str]:
    """
    <identifier identifierType="DOI">10.5880/GFZ.1.2.2024.001</identifier>
    """
    for identifier_tag in resource_tag.iter('identifier'):
        if (identifier_tag.get('identifierType') or '').upper() == 'DOI':
            return identifier_tag.string_value()
    return None


def parse_publication_year(resource_tag: ParsedElement) -> Optional[str]:
    return _first_text(resource_tag, 'publicationYear')


def parse_version(resource_tag: ParsedElement) -> Optional[str]:
    return _first_text(resource_tag, 'version')


def parse_language(resource_tag: ParsedElement) -> Optional[str]:
    return _first_text(resource_tag, 'language')


def parse_resource_type_general(resource_tag: ParsedElement) -> Optional[str]:
    """
    <resourceType resourceTypeGeneral="Dataset">Dataset</resourceType>
    """
    for resource_type_tag in resource_tag.iter('resourceType'):
        return resource_type_tag.get('resourceTypeGeneral')
    return None


def parse_licenses(resource_tag: ParsedElement) -> List[str]:
    """
    <rightsList>
        <rights rightsIdentifier="CC-BY-4.0" rightsURI="https://creativecommons.org/licenses/by/4.0/">
            Creative Commons Attribution 4.0 International
        </rights>
    </rightsList>
    """
    return [
        rights_tag.get('rightsIdentifier')
        for rights_tag in resource_tag.find_path('rightsList', 'rights')
        if rights_tag.get('rightsIdentifier')
    ]


def parse_title(title_tag: ParsedElement) -> Optional[Title]:
    text = title_tag.string_value()
    if text is None:
        return None
    title_type = title_tag.get('titleType')
    return Title(
        title=text,
        title_type=kebab_case(title_type) if title_type and title_type.strip() else MAIN_TITLE_TYPE
    )


def parse_titles(resource_tag: ParsedElement) -> List[Title]:
    """
    Main titles first, every other type after them; document order within each group

    Example:
        <titles>
            <title xml:lang="de" titleType="TranslatedTitle">Beispieltitel</title>
            <title xml:lang="en">Example title</title>
            <title titleType="AlternativeTitle">Example</title>
        </titles>
        -> main-title, translated-title, alternative-title
    """
    titles = collect_parsed(parse_title, resource_tag.find_path('titles', 'title'))
    main_titles = [title for title in titles if title.title_type == MAIN_TITLE_TYPE]
    other_titles = [title for title in titles if title.title_type != MAIN_TITLE_TYPE]
    return main_titles + other_titles


def parse_description(description_tag: ParsedElement) -> Optional[Description]:
    text = description_tag.string_value()
    if text is None:
        return None
    return Description(
        description_type=description_tag.get('descriptionType') or DEFAULT_DESCRIPTION_TYPE,
        description=text
    )


def parse_descriptions(resource_tag: ParsedElement) -> List[Description]:
    return collect_parsed(parse_description, resource_tag.find_path('descriptions', 'description'))


def parse_date(date_tag: ParsedElement) -> Optional[DateEntry]:
    """
    Single dates and RKMS-ISO8601 ranges, open on either side:
        <date dateType="Created">2024-01-01</date>
        <date dateType="Coverage">2020-01-01/2020-12-31</date>
        <date dateType="Collected">/2024-12-31</date>
    """
    value = date_tag.string_value()
    if value is None:
        return None
    if '/' in value:
        start, end = value.split('/', 1)
        start_date, end_date = start.strip(), end.strip()
    else:
        start_date, end_date = value, ''
    date_type = date_tag.get('dateType')
    return DateEntry(
        date_type=kebab_case(date_type) if date_type and date_type.strip() else DEFAULT_DATE_TYPE,
        start_date=start_date,
        end_date=end_date
    )


def parse_dates(resource_tag: ParsedElement) -> List[DateEntry]:
    return collect_parsed(parse_date, resource_tag.find_path('dates', 'date'))


def format_coordinate(value: Optional[str]) -> str:
    """Six decimals, e.g. '52.1' -> '52.100000'; unparseable values are empty"""
    if value is None:
        return ''
    trimmed = value.strip()
    if not trimmed:
        return ''
    try:
        number = float(trimmed)
    except ValueError:
        return ''
    if not math.isfinite(number):
        return ''
    return f'{number:.6f}'


def split_date_time(value: str) -> Tuple[str, str]:
    """'2020-01-01T10:30:00Z' -> ('2020-01-01', '10:30:00')"""
    if 'T' not in value:
        return value, ''
    date_part, time_part = value.split('T', 1)
    return date_part, time_part.rstrip('Zz')


def _child_text(tag: Optional[ParsedElement], *path: str) -> Optional[str]:
    if tag is None:
        return None
    matches = tag.find_path(*path)
    return matches[0].string_value() if matches else None


def parse_geo_location(geo_location_tag: ParsedElement, temporal: Optional[DateEntry]) -> CoverageEntry:
    """
    Example:
        <geoLocation>
            <geoLocationPlace>Potsdam, Germany</geoLocationPlace>
            <geoLocationPoint>
                <pointLongitude>13.4</pointLongitude>
                <pointLatitude>52.1</pointLatitude>
            </geoLocationPoint>
            <geoLocationBox>
                <westBoundLongitude>13.0</westBoundLongitude>
                <eastBoundLongitude>13.5</eastBoundLongitude>
                <southBoundLatitude>52.0</southBoundLatitude>
                <northBoundLatitude>52.5</northBoundLatitude>
            </geoLocationBox>
        </geoLocation>

    A complete box wins over a point.  Points only fill latMin/lonMin.
    """
    coverage = _temporal_coverage(temporal)

    place = _child_text(geo_location_tag, 'geoLocationPlace')
    if place:
        coverage.description = place

    point_tag = geo_location_tag.find('geoLocationPoint')
    lat = format_coordinate(_child_text(point_tag, 'pointLatitude'))
    lon = format_coordinate(_child_text(point_tag, 'pointLongitude'))
    if lat and lon:
        coverage.lat_min = lat
        coverage.lon_min = lon

    box_tag = geo_location_tag.find('geoLocationBox')
    west = format_coordinate(_child_text(box_tag, 'westBoundLongitude'))
    east = format_coordinate(_child_text(box_tag, 'eastBoundLongitude'))
    south = format_coordinate(_child_text(box_tag, 'southBoundLatitude'))
    north = format_coordinate(_child_text(box_tag, 'northBoundLatitude'))
    if west and east and south and north:
        coverage.lon_min = west
        coverage.lon_max = east
        coverage.lat_min = south
        coverage.lat_max = north

    return coverage


def _temporal_coverage(temporal: Optional[DateEntry]) -> CoverageEntry:
    coverage = CoverageEntry(coverage_id='', timezone=DEFAULT_TIMEZONE)
    if temporal is not None:
        coverage.start_date, coverage.start_time = split_date_time(temporal.start_date)
        coverage.end_date, coverage.end_time = split_date_time(temporal.end_date)
    return coverage


def _has_content(coverage: CoverageEntry) -> bool:
    return bool(
        coverage.lat_min or coverage.lon_min or coverage.description
        or coverage.start_date or coverage.end_date
    )


def parse_coverages(resource_tag: ParsedElement, dates: List[DateEntry]) -> List[CoverageEntry]:
    """
    Spatial coverage comes from <geoLocations>, temporal coverage from the first
    <date dateType="Coverage">, which is shared by every geo location.
    :param resource_tag:
    :param dates: already parsed dates
    :return:
    """
    temporal = next((date for date in dates if date.date_type == COVERAGE_DATE_TYPE), None)
    geo_location_tags = resource_tag.find_path('geoLocations', 'geoLocation')

    if not geo_location_tags:
        if temporal is None:
            return []
        coverage = _temporal_coverage(temporal)
        coverage.coverage_id = 'coverage-1'
        return [coverage]

    coverages = []
    for geo_location_tag in geo_location_tags:
        coverage = parse_geo_location(geo_location_tag, temporal)
        if not _has_content(coverage):
            continue
        coverage.coverage_id = f'coverage-{len(coverages) + 1}'
        coverages.append(coverage)
    return coverages


def parse_funding_reference(funding_tag: ParsedElement) -> Optional[FundingReference]:
    """
    Example:
        <fundingReference>
            <funderName>Deutsche Forschungsgemeinschaft</funderName>
            <funderIdentifier funderIdentifierType="Crossref Funder ID">https://doi.org/10.13039/501100001659</funderIdentifier>
            <awardNumber awardURI="https://gepris.dfg.de/gepris/projekt/390685689">EXC 2046</awardNumber>
            <awardTitle>MATH+</awardTitle>
        </fundingReference>

    funderName is mandatory in DataCite; references without it are dropped.
    """
    funder_name = _child_text(funding_tag, 'funderName')
    if not funder_name:
        return None

    funder_identifier_tag = funding_tag.find('funderIdentifier')
    award_number_tag = funding_tag.find('awardNumber')

    funder_identifier = funder_identifier_tag.string_value() if funder_identifier_tag is not None else None
    funder_identifier_type = None
    if funder_identifier is not None:
        funder_identifier_type = (funder_identifier_tag.get('funderIdentifierType') or '').strip() or None

    award_uri = None
    if award_number_tag is not None:
        award_uri = (award_number_tag.get('awardURI') or '').strip() or None

    return FundingReference(
        funder_name=funder_name,
        funder_identifier=funder_identifier,
        funder_identifier_type=funder_identifier_type,
        award_number=award_number_tag.string_value() if award_number_tag is not None else None,
        award_uri=award_uri,
        award_title=_child_text(funding_tag, 'awardTitle')
    )


def parse_funding_references(resource_tag: ParsedElement) -> List[FundingReference]:
    return collect_parsed(
        parse_funding_reference,
        resource_tag.find_path('fundingReferences', 'fundingReference')
    )
