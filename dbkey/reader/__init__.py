"""Streaming readers for textual spectral library formats and format dispatch."""

import logging
import os
from pathlib import Path

from dbkey.constants.keys import SourceFormats
from dbkey.exceptions import UnsupportedFormatError
from dbkey.modifications import ModificationDatabase
from dbkey.reader.base import SpectrumReader
from dbkey.reader.msp import MspReader
from dbkey.reader.sptxt import SptxtReader, strip_inline_mods

logger = logging.getLogger()

READERS: dict[str, type[SpectrumReader]] = {
    SourceFormats.MSP: MspReader,
    SourceFormats.SPTXT: SptxtReader,
}

SUFFIX_FORMATS = {
    ".msp": SourceFormats.MSP,
    ".sptxt": SourceFormats.SPTXT,
    ".blib": SourceFormats.BLIB,
}


def infer_format(path: str | os.PathLike) -> str:
    """Infer the library format from the file ending.

    Raises
    ------
    UnsupportedFormatError
        If the file ending is unknown.
    """
    suffix = Path(path).suffix.lower()
    if suffix not in SUFFIX_FORMATS:
        raise UnsupportedFormatError(f"unknown file ending '{suffix}' of {path}")
    return SUFFIX_FORMATS[suffix]


def get_reader_class(fmt: str) -> type[SpectrumReader]:
    """Return the reader class for a format tag like ``msp`` or ``sptxt``.

    Raises
    ------
    UnsupportedFormatError
        If the format is unknown or not implemented (``blib``).
    """
    fmt = fmt.lower()
    if fmt not in READERS:
        raise UnsupportedFormatError(f"format '{fmt}' is not supported")
    return READERS[fmt]


def open_library(
    path: str | os.PathLike,
    modification_database: ModificationDatabase,
    fmt: str | None = None,
) -> SpectrumReader:
    """Open a library file and return a reader for it.

    The format is inferred from the file ending unless `fmt` is given.
    The reader owns the opened file, use it as a context manager or call ``reader.close()``.
    """
    if fmt is None:
        fmt = infer_format(path)
    reader_class = get_reader_class(fmt)

    logger.info(f"Loading {fmt} library from {path}")
    stream = open(path, "rb")
    return reader_class(stream, modification_database, source_file=str(path))


__all__ = [
    "MspReader",
    "SpectrumReader",
    "SptxtReader",
    "get_reader_class",
    "infer_format",
    "open_library",
    "strip_inline_mods",
]
