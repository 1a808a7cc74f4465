"""
Normalized DataCite record classes
"""

from datetime import datetime
from typing import Dict, List, Optional, Union
from datacite2json.config import DATACITE2JSON_NAME_STRING, DATACITE2JSON_VERSION_STRING


PERSON_TYPE = 'person'
INSTITUTION_TYPE = 'institution'


class Affiliation:
    """
    Class for representing an affiliation, optionally identified by ROR

    Example:
        {
            "value": "GFZ Helmholtz Centre for Geosciences",
            "rorId": "https://ror.org/04z8jg394"
        }
    """
    def __init__(
            self,
            value: str,
            ror_id: Optional[str] = None
    ):
        self.value = value
        self.ror_id = ror_id

    def as_json(self):
        return {
            "value": self.value,
            "rorId": self.ror_id
        }


class PersonContributor:
    """
    Class for representing a person creator or contributor.  Creators carry no roles.

    Example:
        {
            "type": "person",
            "orcid": "0000-0001-5727-2427",
            "firstName": "Jane",
            "lastName": "Smith",
            "affiliations": [{"value": "University of Potsdam", "rorId": "https://ror.org/03bnmw459"}],
            "roles": ["Data Collector"]
        }
    """
    type_str = PERSON_TYPE

    def __init__(
            self,
            first_name: str,
            last_name: str,
            orcid: Optional[str] = None,
            affiliations: Optional[List[Affiliation]] = None,
            roles: Optional[List[str]] = None
    ):
        self.first_name = first_name
        self.last_name = last_name
        self.orcid = orcid
        self.affiliations = affiliations or []
        self.roles = roles

    def as_json(self):
        out = {
            "type": self.type_str,
            "orcid": self.orcid,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "affiliations": [affiliation.as_json() for affiliation in self.affiliations]
        }
        if self.roles is not None:
            out["roles"] = list(self.roles)
        return out


class InstitutionContributor:
    """
    Class for representing an organizational creator or contributor

    Example:
        {
            "type": "institution",
            "institutionName": "GFZ Data Services",
            "affiliations": [],
            "roles": ["Distributor"]
        }
    """
    type_str = INSTITUTION_TYPE

    def __init__(
            self,
            institution_name: str,
            affiliations: Optional[List[Affiliation]] = None,
            roles: Optional[List[str]] = None
    ):
        self.institution_name = institution_name
        self.affiliations = affiliations or []
        self.roles = roles

    def as_json(self):
        out = {
            "type": self.type_str,
            "institutionName": self.institution_name,
            "affiliations": [affiliation.as_json() for affiliation in self.affiliations]
        }
        if self.roles is not None:
            out["roles"] = list(self.roles)
        return out


Contributor = Union[PersonContributor, InstitutionContributor]


class MslLaboratory:
    """
    Class for representing a hosting laboratory from the MSL laboratory vocabulary

    Example:
        {
            "identifier": "9ba34c109b827b177aab36e0266b1643",
            "name": "HelTec - Helmholtz Laboratory",
            "affiliation_name": "GFZ German Research Centre",
            "affiliation_ror": "https://ror.org/04z8jg394"
        }
    """
    def __init__(
            self,
            identifier: str,
            name: str,
            affiliation_name: str = '',
            affiliation_ror: str = ''
    ):
        self.identifier = identifier
        self.name = name
        self.affiliation_name = affiliation_name
        self.affiliation_ror = affiliation_ror

    def as_json(self):
        return {
            "identifier": self.identifier,
            "name": self.name,
            "affiliation_name": self.affiliation_name,
            "affiliation_ror": self.affiliation_ror
        }


class Title:
    def __init__(self, title: str, title_type: str):
        self.title = title
        self.title_type = title_type

    def as_json(self):
        return {
            "title": self.title,
            "titleType": self.title_type
        }


class Description:
    def __init__(self, description_type: str, description: str):
        self.description_type = description_type
        self.description = description

    def as_json(self):
        return {
            "type": self.description_type,
            "description": self.description
        }


class DateEntry:
    """
    Class for representing a date or date range; open ranges leave one side empty

    Example:
        {
            "dateType": "coverage",
            "startDate": "2020-01-01",
            "endDate": "2020-12-31"
        }
    """
    def __init__(self, date_type: str, start_date: str, end_date: str = ''):
        self.date_type = date_type
        self.start_date = start_date
        self.end_date = end_date

    def as_json(self):
        return {
            "dateType": self.date_type,
            "startDate": self.start_date,
            "endDate": self.end_date
        }


class CoverageEntry:
    """
    Class for representing one spatial and temporal coverage

    Points fill only latMin/lonMin, boxes fill all four bounds.

    Example:
        {
            "id": "coverage-1",
            "latMin": "52.100000",
            "latMax": "",
            "lonMin": "13.400000",
            "lonMax": "",
            "startDate": "2020-01-01",
            "endDate": "2020-12-31",
            "startTime": "",
            "endTime": "",
            "timezone": "UTC",
            "description": "Potsdam, Germany"
        }
    """
    def __init__(
            self,
            coverage_id: str,
            lat_min: str = '',
            lat_max: str = '',
            lon_min: str = '',
            lon_max: str = '',
            start_date: str = '',
            end_date: str = '',
            start_time: str = '',
            end_time: str = '',
            timezone: str = 'UTC',
            description: str = ''
    ):
        self.coverage_id = coverage_id
        self.lat_min = lat_min
        self.lat_max = lat_max
        self.lon_min = lon_min
        self.lon_max = lon_max
        self.start_date = start_date
        self.end_date = end_date
        self.start_time = start_time
        self.end_time = end_time
        self.timezone = timezone
        self.description = description

    def as_json(self):
        return {
            "id": self.coverage_id,
            "latMin": self.lat_min,
            "latMax": self.lat_max,
            "lonMin": self.lon_min,
            "lonMax": self.lon_max,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "timezone": self.timezone,
            "description": self.description
        }


class GcmdKeyword:
    """
    Class for representing a GCMD controlled keyword

    Example:
        {
            "uuid": "b9c56939-c624-467d-b196-e56a5b660334",
            "conceptUri": "https://gcmd.earthdata.nasa.gov/kms/concept/b9c56939-c624-467d-b196-e56a5b660334",
            "path": ["EARTH SCIENCE", "ATMOSPHERE", "ATMOSPHERIC PRESSURE"],
            "scheme": "Science Keywords"
        }
    """
    def __init__(self, uuid: str, concept_uri: str, path: List[str], scheme: str):
        self.uuid = uuid
        self.concept_uri = concept_uri
        self.path = path
        self.scheme = scheme

    def as_json(self):
        return {
            "uuid": self.uuid,
            "conceptUri": self.concept_uri,
            "path": list(self.path),
            "scheme": self.scheme
        }


class FundingReference:
    def __init__(
            self,
            funder_name: str,
            funder_identifier: Optional[str] = None,
            funder_identifier_type: Optional[str] = None,
            award_number: Optional[str] = None,
            award_uri: Optional[str] = None,
            award_title: Optional[str] = None
    ):
        self.funder_name = funder_name
        self.funder_identifier = funder_identifier
        self.funder_identifier_type = funder_identifier_type
        self.award_number = award_number
        self.award_uri = award_uri
        self.award_title = award_title

    def as_json(self):
        return {
            "funderName": self.funder_name,
            "funderIdentifier": self.funder_identifier,
            "funderIdentifierType": self.funder_identifier_type,
            "awardNumber": self.award_number,
            "awardUri": self.award_uri,
            "awardTitle": self.award_title
        }


class NormalizedRecord:
    """
    Class for representing one normalized DataCite document
    """
    def __init__(
            self,
            doi: Optional[str],
            year: Optional[str],
            version: Optional[str],
            language: Optional[str],
            resource_type: Optional[str],
            titles: List[Title],
            licenses: List[str],
            authors: List[Contributor],
            contributors: List[Contributor],
            msl_laboratories: List[MslLaboratory],
            descriptions: List[Description],
            dates: List[DateEntry],
            coverages: List[CoverageEntry],
            gcmd_keywords: List[GcmdKeyword],
            free_keywords: List[str],
            funding_references: List[FundingReference]
    ):
        self.doi = doi
        self.year = year
        self.version = version
        self.language = language
        self.resource_type = resource_type
        self.titles = titles
        self.licenses = licenses
        self.authors = authors
        self.contributors = contributors
        self.msl_laboratories = msl_laboratories
        self.descriptions = descriptions
        self.dates = dates
        self.coverages = coverages
        self.gcmd_keywords = gcmd_keywords
        self.free_keywords = free_keywords
        self.funding_references = funding_references

    @property
    def main_title(self) -> Optional[str]:
        return self.titles[0].title if self.titles else None

    def as_json(self) -> Dict:
        return {
            "doi": self.doi,
            "year": self.year,
            "version": self.version,
            "language": self.language,
            "resourceType": self.resource_type,
            "titles": [title.as_json() for title in self.titles],
            "licenses": list(self.licenses),
            "authors": [author.as_json() for author in self.authors],
            "contributors": [contributor.as_json() for contributor in self.contributors],
            "mslLaboratories": [lab.as_json() for lab in self.msl_laboratories],
            "descriptions": [description.as_json() for description in self.descriptions],
            "dates": [date.as_json() for date in self.dates],
            "coverages": [coverage.as_json() for coverage in self.coverages],
            "gcmdKeywords": [keyword.as_json() for keyword in self.gcmd_keywords],
            "freeKeywords": list(self.free_keywords),
            "fundingReferences": [funding.as_json() for funding in self.funding_references]
        }

    def release_json(self) -> Dict:
        """
        Return in release JSON format
        :return:
        """
        release_dict = {"header": {
            "generated_with": f'{DATACITE2JSON_NAME_STRING} {DATACITE2JSON_VERSION_STRING}',
            "date_generated": datetime.now().strftime('%Y-%m-%dT%H:%M:%S.%fZ')
        }}
        release_dict.update(self.as_json())
        return release_dict
