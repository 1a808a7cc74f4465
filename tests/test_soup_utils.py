import os
import unittest

from datacite2json.utils.soup_utils import MalformedXmlError, parse_datacite_xml, find_resource_element, \
    collect_parsed

TEST_DATACITE_INPUT_DATA = os.path.join(os.path.dirname(__file__), 'datacite')


class TestSoupUtils(unittest.TestCase):

    def test_namespace_prefixes_dropped(self):
        root = parse_datacite_xml(
            b'<dc:resource xmlns:dc="http://datacite.org/schema/kernel-4">'
            b'<dc:titles><dc:title dc:titleType="Other"> A title </dc:title></dc:titles>'
            b'</dc:resource>'
        )
        assert root.tag == 'resource'
        titles = root.find_path('titles', 'title')
        assert len(titles) == 1
        assert titles[0].get('titleType') == 'Other'
        assert titles[0].string_value() == 'A title'

    def test_repeated_and_single_children(self):
        root = parse_datacite_xml(b'<a><b>1</b><c/><b>2</b></a>')
        assert [b.string_value() for b in root.find_all('b')] == ['1', '2']
        assert len(root.find_all('c')) == 1
        assert root.find('c').string_value() is None
        assert root.find('missing') is None
        assert root.find_path('missing', 'b') == []

    def test_iter_includes_descendants(self):
        root = parse_datacite_xml(b'<a><b><c>x</c></b><c>y</c></a>')
        assert [c.string_value() for c in root.iter('c')] == ['x', 'y']
        assert [el.tag for el in root.iter()] == ['a', 'b', 'c', 'c']

    def test_str_input(self):
        root = parse_datacite_xml('<resource><version>2.0</version></resource>')
        assert root.find('version').string_value() == '2.0'

    def test_malformed(self):
        with self.assertRaises(MalformedXmlError):
            parse_datacite_xml(b'<resource><title>unclosed</resource>')
        with self.assertRaises(MalformedXmlError):
            parse_datacite_xml(b'')
        with self.assertRaises(MalformedXmlError):
            parse_datacite_xml(b'not xml at all')
        with open(os.path.join(TEST_DATACITE_INPUT_DATA, 'malformed.xml'), 'rb') as f:
            with self.assertRaises(ValueError):
                parse_datacite_xml(f.read())

    def test_find_resource_element(self):
        with open(os.path.join(TEST_DATACITE_INPUT_DATA, 'oai_wrapped.xml'), 'rb') as f:
            root = parse_datacite_xml(f.read())
        assert root.tag == 'OAI-PMH'
        resource = find_resource_element(root)
        assert resource.tag == 'resource'
        assert resource.find('publicationYear').string_value() == '2023'

        bare = parse_datacite_xml(b'<other><version>1</version></other>')
        assert find_resource_element(bare) is bare

    def test_collect_parsed(self):
        parsed = collect_parsed(lambda x: x * 2 if x % 2 else None, [1, 2, 3, 4])
        assert parsed == [2, 6]
