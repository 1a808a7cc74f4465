import os
import json
import argparse
import logging
import time
from typing import Dict, List, Optional

from tqdm import tqdm

from datacite2json.xml2json.datacite_to_json import DataCiteIngestor, convert_datacite_xml_to_json


logger = logging.getLogger(__name__)

BASE_OUTPUT_DIR = 'output'


def process_datacite_stream(
        fname: str,
        stream: bytes,
        ingestor: Optional[DataCiteIngestor] = None
) -> Dict:
    """
    Process a DataCite XML file stream
    :param fname:
    :param stream:
    :param ingestor:
    :return: release JSON of the record
    """
    record = convert_datacite_xml_to_json(stream, ingestor)
    logger.debug("Processed stream %s", fname)
    return record.release_json()


def process_datacite_file(
        xml_file: str,
        output_dir: str = BASE_OUTPUT_DIR,
        ingestor: Optional[DataCiteIngestor] = None
) -> Optional[str]:
    """
    Process a DataCite XML file and write its JSON representation
    :param xml_file:
    :param output_dir:
    :param ingestor:
    :return: path of the written JSON file
    """
    os.makedirs(output_dir, exist_ok=True)

    # record id is the name of the file
    record_id = os.path.splitext(os.path.basename(xml_file))[0]
    output_file = os.path.join(output_dir, f'{record_id}.json')

    if not os.path.exists(xml_file):
        raise FileNotFoundError(f"{xml_file} doesn't exist")
    if os.path.exists(output_file):
        print(f'{output_file} already exists!')

    with open(xml_file, 'rb') as f:
        record = convert_datacite_xml_to_json(f.read(), ingestor)

    with open(output_file, 'w') as outf:
        json.dump(record.release_json(), outf, indent=4, sort_keys=False)

    return output_file


def process_datacite_dir(
        input_dir: str,
        output_dir: str = BASE_OUTPUT_DIR,
        ingestor: Optional[DataCiteIngestor] = None
) -> List[str]:
    """
    Process every .xml file in a directory, sharing one ingestor
    :param input_dir:
    :param output_dir:
    :param ingestor:
    :return: paths of the written JSON files
    """
    if ingestor is None:
        ingestor = DataCiteIngestor()
    xml_files = sorted(fname for fname in os.listdir(input_dir) if fname.lower().endswith('.xml'))
    output_files = []
    for fname in tqdm(xml_files):
        output_files.append(process_datacite_file(os.path.join(input_dir, fname), output_dir, ingestor))
    return output_files


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Run datacite2json")
    parser.add_argument("-i", "--input", default=None, help="path to the input DataCite XML file or directory")
    parser.add_argument("-o", "--output", default='output', help="path to the output dir for putting json files")

    args = parser.parse_args()

    input_path = args.input
    output_path = args.output

    logging.basicConfig(level=logging.INFO)

    start_time = time.time()

    os.makedirs(output_path, exist_ok=True)

    if os.path.isdir(input_path):
        process_datacite_dir(input_path, output_path)
    else:
        process_datacite_file(input_path, output_path)

    runtime = round(time.time() - start_time, 3)
    print("runtime: %s seconds " % (runtime))
    print('done.')
