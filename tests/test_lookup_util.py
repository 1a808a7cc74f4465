import os
import json
import shutil
import tempfile
import threading
import time
import unittest
from unittest import mock

import requests

from datacite2json.utils.lookup_util import RorAffiliationLookup, MslLaboratoryLookup, ResourceTypeLookup

TEST_DATACITE_INPUT_DATA = os.path.join(os.path.dirname(__file__), 'datacite')
TEST_MSL_LABORATORIES = os.path.join(TEST_DATACITE_INPUT_DATA, 'msl-laboratories.json')


class SlowRorAffiliationLookup(RorAffiliationLookup):
    """Counts source reads and indexes slowly, so concurrent callers overlap the load"""

    def __init__(self, entries):
        super().__init__(path=None)
        self.entries = entries
        self.reads = 0

    def read_entries(self):
        self.reads += 1
        time.sleep(0.05)
        return self.entries

    def index_entry(self, entry):
        time.sleep(0.01)
        return super().index_entry(entry)


class TestLookupUtil(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_bundled_ror_affiliations(self):
        lookup = RorAffiliationLookup()
        assert not lookup.loaded
        assert lookup.label_for('04Z8JG394') == 'GFZ Helmholtz Centre for Geosciences'
        assert lookup.label_for('https://ror.org/03bnmw459/') == 'University of Potsdam'
        assert lookup.loaded
        assert lookup.label_for('https://ror.org/00abc1234') is None
        assert lookup.label_for(None) is None

    def test_missing_file_is_empty(self):
        lookup = RorAffiliationLookup(path=os.path.join(self.temp_dir, 'missing.json'))
        with self.assertLogs('datacite2json.utils.lookup_util', level='WARNING'):
            assert lookup.label_for('04z8jg394') is None
        assert lookup.loaded
        assert len(lookup) == 0

    def test_broken_file_is_empty(self):
        broken_file = os.path.join(self.temp_dir, 'broken.json')
        with open(broken_file, 'w') as f:
            f.write('[{"prefLabel": ')
        lookup = RorAffiliationLookup(path=broken_file)
        with self.assertLogs('datacite2json.utils.lookup_util', level='WARNING'):
            assert len(lookup) == 0

    def test_unusable_entries_skipped(self):
        ror_file = os.path.join(self.temp_dir, 'ror.json')
        with open(ror_file, 'w') as f:
            json.dump([
                {'prefLabel': 'GFZ', 'rorId': '04z8jg394'},
                {'prefLabel': '', 'rorId': '03bnmw459'},
                {'prefLabel': 'No id'},
                'not an object',
            ], f)
        lookup = RorAffiliationLookup(path=ror_file)
        assert len(lookup) == 1
        assert lookup.label_for('https://ror.org/04z8jg394') == 'GFZ'

    def test_loads_once(self):
        lookup = RorAffiliationLookup()
        with mock.patch.object(RorAffiliationLookup, 'read_entries', return_value=[]) as read_entries:
            lookup.label_for('04z8jg394')
            lookup.label_for('03bnmw459')
        assert read_entries.call_count == 1

    def test_msl_from_file(self):
        lookup = MslLaboratoryLookup(url=None, path=TEST_MSL_LABORATORIES)
        assert lookup.get('9ba34c109b827b177aab36e0266b1643') == {
            'name': 'High Pressure Rock Deformation Laboratory',
            'affiliation_name': 'Utrecht University',
            'affiliation_ror': 'https://ror.org/04pp8hn57',
        }
        assert lookup.get('unknown') is None

    def test_msl_from_url(self):
        response = mock.Mock()
        response.json.return_value = [{'identifier': 'lab1', 'name': 'Lab 1'}]
        with mock.patch('datacite2json.utils.lookup_util.requests.get', return_value=response) as get:
            lookup = MslLaboratoryLookup(url='https://example.org/labs.json', path=None, timeout=5)
            assert lookup.get('lab1') == {'name': 'Lab 1', 'affiliation_name': '', 'affiliation_ror': ''}
        get.assert_called_once_with('https://example.org/labs.json', timeout=5)
        response.raise_for_status.assert_called_once_with()

    def test_msl_http_failure_is_empty(self):
        with mock.patch(
                'datacite2json.utils.lookup_util.requests.get',
                side_effect=requests.ConnectionError('offline')
        ):
            lookup = MslLaboratoryLookup(url='https://example.org/labs.json', path=None)
            with self.assertLogs('datacite2json.utils.lookup_util', level='WARNING'):
                assert lookup.get('lab1') is None
        assert lookup.loaded

    def test_resource_types(self):
        lookup = ResourceTypeLookup()
        assert lookup.get('Dataset') == '10'
        assert lookup.get('dataset') == '10'
        assert lookup.get(' SOFTWARE ') == '26'
        assert lookup.get('Data Set') is None
        assert lookup.get(None) is None

    def test_concurrent_first_access_loads_once(self):
        """
        Callers racing the first load all see the complete table, and the source is read once
        :return:
        """
        lookup = SlowRorAffiliationLookup([
            {'prefLabel': 'GFZ Helmholtz Centre for Geosciences', 'rorId': '04z8jg394'},
            {'prefLabel': 'Helmholtz Association of German Research Centres', 'rorId': '0281dp749'},
            {'prefLabel': 'University of Potsdam', 'rorId': '03bnmw459'},
        ])
        results = []
        results_lock = threading.Lock()
        start = threading.Barrier(5)

        def _lookup():
            start.wait()
            label = lookup.label_for('03bnmw459')
            with results_lock:
                results.append(label)

        threads = [threading.Thread(target=_lookup) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == ['University of Potsdam'] * 5
        assert lookup.reads == 1
        assert len(lookup) == 3
