#!/usr/bin/env python
# vim: set sw=4 et:

from setuptools import setup, find_packages

__version__ = '0.1.0'


setup(
    name='warcpipe',
    version=__version__,
    license='Apache 2.0',
    packages=find_packages(exclude=['test']),
    description='Streaming WARC record reader and writer, with per-record gzip and bzip2',
    long_description=open('README.rst').read(),
    provides=[
        'warcpipe',
        ],
    install_requires=[
        ],
    zip_safe=True,
    test_suite='',
    extras_require={
        'testing': [
            'pytest',
            'pytest-cov',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Topic :: System :: Archiving',
    ]
)
