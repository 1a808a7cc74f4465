#!/usr/bin/python
import setuptools

requirements = [l.strip() for l in open('requirements.txt').readlines() if l.strip()]

setuptools.setup(
    name='datacite2json',
    version='0.1',
    packages=setuptools.find_packages(include=['datacite2json', 'datacite2json.*']),
    package_data={'datacite2json': ['resources/*.json']},
    install_requires=requirements,
    extras_require={'test': ['pytest']},
    tests_require=['pytest'],
    zip_safe=False,
    test_suite='py.test',
    entry_points='',
)
