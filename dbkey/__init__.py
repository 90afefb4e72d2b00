#!python


__project__ = "dbkey"
__version__ = "2.0.0"
__license__ = "Apache"
__description__ = "Streaming ingestion and normalization of MS/MS spectral libraries"
__author__ = "DBKey developers"
__keywords__ = [
    "bioinformatics",
    "proteomics",
    "spectral library",
]
__python_version__ = ">=3.10"
__classifiers__ = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "License :: OSI Approved :: Apache Software License",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]
