"""
Flask app for the datacite2json utility
"""
from flask import Flask, request, jsonify

from datacite2json.config import ALLOWED_EXTENSIONS, DATACITE2JSON_NAME_STRING, DATACITE2JSON_VERSION_STRING
from datacite2json.utils.soup_utils import MalformedXmlError
from datacite2json.xml2json.datacite_to_json import DataCiteIngestor
from datacite2json.xml2json.process_datacite import process_datacite_stream

app = Flask(__name__)

# shared so the vocabularies are loaded once per process
ingestor = DataCiteIngestor()


def allowed_file(filename: str) -> bool:
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


@app.route('/')
def home():
    return jsonify({
        "service": f'{DATACITE2JSON_NAME_STRING} {DATACITE2JSON_VERSION_STRING}',
        "usage": "POST a DataCite XML file as form field 'file'"
    })


@app.route('/', methods=['POST'])
def upload_file():
    uploaded_file = request.files.get('file')
    if uploaded_file is None or uploaded_file.filename == '':
        return jsonify({"Error": "No file uploaded!"}), 400

    filename = uploaded_file.filename
    if not allowed_file(filename):
        return jsonify({"Error": "Unknown file type!"}), 400

    xml_content = uploaded_file.stream.read()
    try:
        results = process_datacite_stream(filename, xml_content, ingestor)
    except MalformedXmlError as e:
        return jsonify({"Error": str(e)}), 400
    return jsonify(results)


if __name__ == '__main__':
    app.run(port=8080, host='0.0.0.0')
