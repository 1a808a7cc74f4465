import io
import os
import unittest

from datacite2json.flask.app import app

TEST_DATACITE_INPUT_DATA = os.path.join(os.path.dirname(__file__), 'datacite')


class TestFlaskApp(unittest.TestCase):

    def setUp(self):
        app.config['TESTING'] = True
        self.client = app.test_client()

    def _upload(self, fname: str, content: bytes):
        return self.client.post(
            '/',
            data={'file': (io.BytesIO(content), fname)},
            content_type='multipart/form-data'
        )

    def test_upload_xml(self):
        with open(os.path.join(TEST_DATACITE_INPUT_DATA, 'oai_wrapped.xml'), 'rb') as f:
            response = self._upload('oai_wrapped.xml', f.read())
        assert response.status_code == 200
        results = response.get_json()
        assert results['doi'] == '10.1594/WRAPPED.1'
        assert 'header' in results

    def test_upload_malformed(self):
        with open(os.path.join(TEST_DATACITE_INPUT_DATA, 'malformed.xml'), 'rb') as f:
            response = self._upload('malformed.xml', f.read())
        assert response.status_code == 400
        assert 'Error' in response.get_json()

    def test_upload_wrong_extension(self):
        response = self._upload('paper.pdf', b'%PDF-1.4')
        assert response.status_code == 400

    def test_upload_missing_file(self):
        response = self.client.post('/', data={}, content_type='multipart/form-data')
        assert response.status_code == 400

    def test_home(self):
        response = self.client.get('/')
        assert response.status_code == 200
        assert response.get_json()['service'] == 'datacite2json 0.1'
