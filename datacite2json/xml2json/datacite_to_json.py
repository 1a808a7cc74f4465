import logging
from typing import Optional, Union

from datacite2json.datacite import NormalizedRecord
from datacite2json.utils.lookup_util import RorAffiliationLookup, MslLaboratoryLookup, ResourceTypeLookup
from datacite2json.utils.soup_utils import parse_datacite_xml, find_resource_element
from datacite2json.xml2json.datacite_utils.name_tag_utils import parse_authors, parse_contributors
from datacite2json.xml2json.datacite_utils.resource_tag_utils import parse_doi, parse_publication_year, \
    parse_version, parse_language, parse_resource_type_general, parse_licenses, parse_titles, \
    parse_descriptions, parse_dates, parse_coverages, parse_funding_references
from datacite2json.xml2json.datacite_utils.subject_tag_utils import extract_gcmd_keywords, extract_free_keywords

logger = logging.getLogger(__name__)


class DataCiteIngestor:
    """
    Turns DataCite XML into a NormalizedRecord.

    The vocabulary lookups are created once per ingestor and loaded on first
    use, so one ingestor should be reused across documents.
    """
    def __init__(
            self,
            ror_lookup: Optional[RorAffiliationLookup] = None,
            msl_lookup: Optional[MslLaboratoryLookup] = None,
            resource_type_lookup: Optional[ResourceTypeLookup] = None
    ):
        self.ror_lookup = ror_lookup if ror_lookup is not None else RorAffiliationLookup()
        self.msl_lookup = msl_lookup if msl_lookup is not None else MslLaboratoryLookup()
        self.resource_type_lookup = resource_type_lookup if resource_type_lookup is not None \
            else ResourceTypeLookup()

    def resolve_resource_type(self, resource_type_general: Optional[str]) -> Optional[str]:
        return self.resource_type_lookup.get(resource_type_general)

    def ingest(self, xml_bytes: Union[bytes, str]) -> NormalizedRecord:
        """
        Parse and normalize one DataCite document
        :param xml_bytes: raw XML
        :return: NormalizedRecord
        :raises MalformedXmlError: when the input is not well-formed XML
        """
        root = parse_datacite_xml(xml_bytes)
        resource_tag = find_resource_element(root)

        dates = parse_dates(resource_tag)
        contributors, laboratories = parse_contributors(resource_tag, self.ror_lookup, self.msl_lookup)

        record = NormalizedRecord(
            doi=parse_doi(resource_tag),
            year=parse_publication_year(resource_tag),
            version=parse_version(resource_tag),
            language=parse_language(resource_tag),
            resource_type=self.resolve_resource_type(parse_resource_type_general(resource_tag)),
            titles=parse_titles(resource_tag),
            licenses=parse_licenses(resource_tag),
            authors=parse_authors(resource_tag, self.ror_lookup),
            contributors=contributors,
            msl_laboratories=laboratories,
            descriptions=parse_descriptions(resource_tag),
            dates=dates,
            coverages=parse_coverages(resource_tag, dates),
            gcmd_keywords=extract_gcmd_keywords(resource_tag),
            free_keywords=extract_free_keywords(resource_tag),
            funding_references=parse_funding_references(resource_tag)
        )
        logger.debug(
            "Ingested %s: %d authors, %d contributors, %d laboratories",
            record.doi, len(record.authors), len(record.contributors), len(record.msl_laboratories)
        )
        return record


def convert_datacite_xml_to_json(
        stream: Union[bytes, str],
        ingestor: Optional[DataCiteIngestor] = None
) -> NormalizedRecord:
    """
    Convert DataCite XML to a NormalizedRecord
    :param stream: XML content
    :param ingestor: reused across calls to keep vocabularies loaded
    :return:
    """
    if ingestor is None:
        ingestor = DataCiteIngestor()
    return ingestor.ingest(stream)
