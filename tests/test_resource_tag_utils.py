import unittest

from datacite2json.datacite import DateEntry
from datacite2json.utils.soup_utils import parse_datacite_xml
from datacite2json.xml2json.datacite_utils.resource_tag_utils import kebab_case, parse_titles, parse_descriptions, \
    parse_dates, format_coordinate, split_date_time, parse_coverages, parse_funding_references, parse_doi, \
    parse_licenses


def _resource(body: str):
    return parse_datacite_xml(f'<resource xmlns="http://datacite.org/schema/kernel-4">{body}</resource>')


class TestResourceTagUtils(unittest.TestCase):

    def test_kebab_case(self):
        assert kebab_case('AlternativeTitle') == 'alternative-title'
        assert kebab_case('TranslatedTitle') == 'translated-title'
        assert kebab_case('Coverage') == 'coverage'
        assert kebab_case('other') == 'other'
        assert kebab_case('main title') == 'main-title'

    def test_title_ordering(self):
        """
        Main titles move to the front; other types keep their relative order
        :return:
        """
        resource = _resource("""
            <titles>
              <title titleType="TranslatedTitle">T1</title>
              <title>M1</title>
              <title titleType="AlternativeTitle">A1</title>
              <title titleType="TranslatedTitle">T2</title>
              <title>M2</title>
              <title titleType="Subtitle"> </title>
            </titles>""")
        titles = [(t.title, t.title_type) for t in parse_titles(resource)]
        assert titles == [
            ('M1', 'main-title'),
            ('M2', 'main-title'),
            ('T1', 'translated-title'),
            ('A1', 'alternative-title'),
            ('T2', 'translated-title'),
        ]

    def test_descriptions(self):
        resource = _resource("""
            <descriptions>
              <description descriptionType="Abstract">Abstract text</description>
              <description>Untyped</description>
              <description descriptionType="Methods">   </description>
            </descriptions>""")
        descriptions = [d.as_json() for d in parse_descriptions(resource)]
        assert descriptions == [
            {'type': 'Abstract', 'description': 'Abstract text'},
            {'type': 'Other', 'description': 'Untyped'},
        ]

    def test_dates(self):
        resource = _resource("""
            <dates>
              <date dateType="Created">2024-01-15</date>
              <date dateType="Coverage">2020-01-01/2020-12-31</date>
              <date dateType="Collected">/2019-06-30</date>
              <date>2018-01-01/</date>
              <date dateType="Issued"></date>
            </dates>""")
        dates = [(d.date_type, d.start_date, d.end_date) for d in parse_dates(resource)]
        assert dates == [
            ('created', '2024-01-15', ''),
            ('coverage', '2020-01-01', '2020-12-31'),
            ('collected', '', '2019-06-30'),
            ('other', '2018-01-01', ''),
        ]

    def test_format_coordinate(self):
        assert format_coordinate('52.1') == '52.100000'
        assert format_coordinate(' -13.4 ') == '-13.400000'
        assert format_coordinate('7') == '7.000000'
        assert format_coordinate('north') == ''
        assert format_coordinate('nan') == ''
        assert format_coordinate(None) == ''

    def test_split_date_time(self):
        assert split_date_time('2020-01-01T10:30:00Z') == ('2020-01-01', '10:30:00')
        assert split_date_time('2020-01-01') == ('2020-01-01', '')

    def test_coverage_fallback(self):
        """
        No geoLocation but a coverage date gives exactly one temporal entry
        :return:
        """
        dates = [DateEntry('created', '2024-01-01'), DateEntry('coverage', '2020-01-01', '2020-12-31')]
        coverages = parse_coverages(_resource(''), dates)
        assert len(coverages) == 1
        coverage = coverages[0]
        assert coverage.coverage_id == 'coverage-1'
        assert coverage.lat_min == coverage.lat_max == coverage.lon_min == coverage.lon_max == ''
        assert coverage.start_date == '2020-01-01'
        assert coverage.end_date == '2020-12-31'
        assert coverage.timezone == 'UTC'

    def test_no_coverage(self):
        assert parse_coverages(_resource(''), [DateEntry('created', '2024-01-01')]) == []

    def test_open_start_coverage_on_empty_geo_location(self):
        """
        A geoLocation without usable coordinates still carries a coverage date that only has an end
        :return:
        """
        resource = _resource("""
            <dates><date dateType="Coverage">/2020-12-31</date></dates>
            <geoLocations><geoLocation><geoLocationPolygon/></geoLocation></geoLocations>""")
        coverages = parse_coverages(resource, parse_dates(resource))
        assert len(coverages) == 1
        coverage = coverages[0]
        assert coverage.coverage_id == 'coverage-1'
        assert coverage.lat_min == coverage.lon_min == coverage.description == ''
        assert coverage.start_date == ''
        assert coverage.end_date == '2020-12-31'

    def test_empty_geo_location_without_coverage_date(self):
        resource = _resource('<geoLocations><geoLocation><geoLocationPolygon/></geoLocation></geoLocations>')
        assert parse_coverages(resource, [DateEntry('created', '2024-01-01')]) == []

    def test_point_coordinates(self):
        resource = _resource("""
            <geoLocations>
              <geoLocation>
                <geoLocationPoint>
                  <pointLongitude>13.4</pointLongitude>
                  <pointLatitude>52.1</pointLatitude>
                </geoLocationPoint>
              </geoLocation>
            </geoLocations>""")
        coverage = parse_coverages(resource, [])[0]
        assert coverage.lat_min == '52.100000'
        assert coverage.lon_min == '13.400000'
        assert coverage.lat_max == ''
        assert coverage.lon_max == ''

    def test_box_wins_over_point(self):
        resource = _resource("""
            <geoLocations>
              <geoLocation>
                <geoLocationPlace>Potsdam</geoLocationPlace>
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
              <geoLocation>
                <geoLocationBox>
                  <westBoundLongitude>13.0</westBoundLongitude>
                  <eastBoundLongitude>13.5</eastBoundLongitude>
                </geoLocationBox>
              </geoLocation>
              <geoLocation>
                <geoLocationPlace>Berlin</geoLocationPlace>
              </geoLocation>
            </geoLocations>""")
        coverages = [c.as_json() for c in parse_coverages(resource, [])]
        assert len(coverages) == 2
        assert coverages[0]['id'] == 'coverage-1'
        assert coverages[0]['description'] == 'Potsdam'
        assert (coverages[0]['latMin'], coverages[0]['latMax']) == ('52.000000', '52.500000')
        assert (coverages[0]['lonMin'], coverages[0]['lonMax']) == ('13.000000', '13.500000')
        assert coverages[1]['id'] == 'coverage-2'
        assert coverages[1]['description'] == 'Berlin'
        assert coverages[1]['latMin'] == ''

    def test_funding_reference_completeness(self):
        resource = _resource("""
            <fundingReferences>
              <fundingReference>
                <funderName>Deutsche Forschungsgemeinschaft</funderName>
                <funderIdentifier funderIdentifierType="Crossref Funder ID">https://doi.org/10.13039/501100001659</funderIdentifier>
                <awardNumber awardURI="https://gepris.dfg.de/gepris/projekt/390685689">EXC 2046</awardNumber>
                <awardTitle>MATH+</awardTitle>
              </fundingReference>
              <fundingReference>
                <funderIdentifier>https://doi.org/10.13039/501100000780</funderIdentifier>
              </fundingReference>
              <fundingReference>
                <funderName>  </funderName>
              </fundingReference>
              <fundingReference>
                <funderName>European Commission</funderName>
              </fundingReference>
            </fundingReferences>""")
        references = [r.as_json() for r in parse_funding_references(resource)]
        assert len(references) == 2
        assert all(r['funderName'] for r in references)
        assert references[0] == {
            'funderName': 'Deutsche Forschungsgemeinschaft',
            'funderIdentifier': 'https://doi.org/10.13039/501100001659',
            'funderIdentifierType': 'Crossref Funder ID',
            'awardNumber': 'EXC 2046',
            'awardUri': 'https://gepris.dfg.de/gepris/projekt/390685689',
            'awardTitle': 'MATH+',
        }
        assert references[1] == {
            'funderName': 'European Commission',
            'funderIdentifier': None,
            'funderIdentifierType': None,
            'awardNumber': None,
            'awardUri': None,
            'awardTitle': None,
        }

    def test_doi_and_licenses(self):
        resource = _resource("""
            <identifier identifierType="DOI">10.5880/GFZ.1.2.2024.001</identifier>
            <rightsList>
              <rights rightsIdentifier="CC-BY-4.0">CC BY 4.0</rights>
              <rights>No identifier</rights>
            </rightsList>""")
        assert parse_doi(resource) == '10.5880/GFZ.1.2.2024.001'
        assert parse_licenses(resource) == ['CC-BY-4.0']
        assert parse_doi(_resource('')) is None
