"""Streaming reader base class shared by the line oriented library formats.

Every format is read by the same two state machine:

HEADER
    ``Key: value`` lines describing the spectrum. The line declaring the number of peaks
    switches to PEAKS.
PEAKS
    Exactly the declared number of peak lines. After the last one the record is complete
    and the next call starts again in HEADER with a fresh record.

A record that is cut short by the end of the stream is still returned once.
Structural errors stop the stream, there is no resynchronisation.
"""

import io
import logging
import re
import typing
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from dbkey.constants.keys import HeaderKeys, PrecursorMzModes
from dbkey.exceptions import ParseError
from dbkey.modifications import ModificationDatabase
from dbkey.spectrum import (
    Modification,
    Peak,
    Spectrum,
    parse_ion_annotation,
)

logger = logging.getLogger()

INTEGER_PATTERN = re.compile(r"[+-]?\d+")


class ReaderState(Enum):
    HEADER = "header"
    PEAKS = "peaks"


@dataclass
class RecordAccumulator:
    """State of the record currently being read."""

    spectrum: Spectrum
    state: ReaderState = ReaderState.HEADER
    num_peaks: int = 0
    peaks_read: int = 0
    lines_consumed: int = 0

    @property
    def complete(self) -> bool:
        return self.state is ReaderState.PEAKS and self.peaks_read >= self.num_peaks


def normalize_key(key: str) -> str:
    """Normalize a header key so that ``Num peaks``, ``NumPeaks`` and ``NUM_PEAKS`` compare equal."""
    return key.replace(" ", "").replace("_", "").lower()


def parse_int(value: str) -> int:
    """Parse a plain decimal integer. Unlike `int`, rejects underscores and surrounding text."""
    value = value.strip()
    if not INTEGER_PATTERN.fullmatch(value):
        raise ValueError(f"invalid literal for an integer: '{value}'")
    return int(value)


def parse_optional_float(value: str) -> float | None:
    """Best-effort float conversion, None if `value` is not a number."""
    try:
        return float(value)
    except ValueError:
        return None


def split_name(name: str) -> tuple[str, int]:
    """Split a ``SEQUENCE/CHARGE`` name into the sequence literal and the charge."""
    literal, sep, charge_str = name.rpartition("/")
    if not sep:
        raise ValueError(f"invalid name format '{name}', expected 'SEQUENCE/CHARGE'")

    try:
        charge = parse_int(charge_str)
    except ValueError:
        raise ValueError(f"invalid charge in name '{name}'") from None

    return literal, charge


def iter_comment_tokens(comment: str) -> Iterator[tuple[str, str]]:
    """Yield ``(key, value)`` for every whitespace separated ``key=value`` token. Other tokens are skipped."""
    for token in comment.split():
        key, sep, value = token.partition("=")
        if sep:
            yield key, value


def strip_annotation_suffix(annotation: str) -> str:
    """Remove a trailing ``/...`` ppm or charge suffix, e.g. ``y3/0.5ppm`` -> ``y3``."""
    idx = annotation.find("/")
    if idx > 0:
        return annotation[:idx]
    return annotation


def open_text_stream(stream: typing.Any) -> typing.Iterable[str]:
    """Wrap binary streams for text decoding.

    Bytes that are not valid UTF-8 are replaced by U+FFFD, so free text fields never stop a library.
    Text streams and other line iterables are used as is.
    """
    if isinstance(stream, io.RawIOBase | io.BufferedIOBase):
        return io.TextIOWrapper(stream, encoding="utf-8", errors="replace")
    return stream


class SpectrumReader:
    """Base class for streaming library readers.

    Usage::

        reader = MspReader(stream, modification_database)
        while reader.advance():
            spectrum = reader.current
        if reader.error is not None:
            raise reader.error

    or equivalently ``for spectrum in reader: ...`` which raises the stored error at the end.

    A reader is not safe for concurrent use. The modification database is only read.
    """

    SOURCE_FORMAT = ""
    DEFAULT_FRAGMENTATION_MODE = ""
    DEFAULT_MASS_ANALYZER = ""
    DEFAULT_PRECURSOR_MZ_MODE = PrecursorMzModes.READ

    def __init__(
        self,
        stream: typing.Any,
        modification_database: ModificationDatabase,
        source_file: str = "",
    ) -> None:
        """
        Parameters
        ----------
        stream : file-like or Iterable[str]
            Binary or text stream positioned at the start of a library, or any iterable of lines.

        modification_database : ModificationDatabase
            Resolves modification names found in the library.

        source_file : str, optional
            Stored as provenance on every spectrum.
        """
        self._stream = open_text_stream(stream)
        self._lines = iter(self._stream)
        self.modification_database = modification_database
        self.source_file = source_file

        self.line_number = 0
        self._current: Spectrum | None = None
        self._error: Exception | None = None
        self._exhausted = False

    @property
    def current(self) -> Spectrum | None:
        """Spectrum produced by the last successful `advance` call."""
        return self._current

    @property
    def error(self) -> Exception | None:
        """Fatal error that stopped the stream, None on clean exhaustion."""
        return self._error

    def advance(self) -> bool:
        """Read the next spectrum.

        Returns
        -------
        bool
            True if a spectrum is available as `current`, False on exhaustion or after a fatal error.
        """
        self._current = None
        if self._exhausted:
            return False

        try:
            spectrum = self._read_spectrum()
        except (ParseError, OSError, UnicodeDecodeError) as e:
            logger.error(f"Reading {self.SOURCE_FORMAT} library stopped: {e}")
            self._error = e
            self._exhausted = True
            return False

        if spectrum is None:
            self._exhausted = True
            return False

        self._current = spectrum
        return True

    def close(self) -> None:
        """Close the underlying stream if it can be closed."""
        if hasattr(self._stream, "close"):
            self._stream.close()

    def __enter__(self) -> "SpectrumReader":
        return self

    def __exit__(self, *args: typing.Any) -> None:
        self.close()

    def __iter__(self) -> Iterator[Spectrum]:
        while self.advance():
            yield self.current

        if self._error is not None:
            raise self._error

    def _new_record(self) -> RecordAccumulator:
        return RecordAccumulator(
            Spectrum(source_format=self.SOURCE_FORMAT, source_file=self.source_file)
        )

    def _read_spectrum(self) -> Spectrum | None:
        record = self._new_record()

        for raw_line in self._lines:
            self.line_number += 1
            line = raw_line.strip()

            if not line or self._is_comment(line):
                continue

            record.lines_consumed += 1
            try:
                if record.state is ReaderState.HEADER:
                    self._parse_header_line(record, line)
                else:
                    record.spectrum.peaks.append(self._parse_peak_line(line))
                    record.peaks_read += 1
            except ValueError as e:
                raise ParseError(str(e), self.line_number) from e

            if record.complete:
                return record.spectrum

        if record.lines_consumed > 0:
            logger.warning(
                f"Incomplete record '{record.spectrum.name}' at end of input: "
                f"{record.peaks_read} of {record.num_peaks} declared peaks"
            )
            return record.spectrum

        return None

    def _is_comment(self, line: str) -> bool:
        return False

    def _parse_header_line(self, record: RecordAccumulator, line: str) -> None:
        key, sep, value = line.partition(":")
        if not sep:
            return

        key = normalize_key(key)
        value = value.strip()

        if key == HeaderKeys.NUM_PEAKS:
            try:
                num_peaks = parse_int(value)
            except ValueError:
                raise ValueError(f"invalid num peaks '{value}'") from None
            if num_peaks < 0:
                raise ValueError(f"invalid num peaks '{value}'")
            record.num_peaks = num_peaks
            record.state = ReaderState.PEAKS

        elif key == HeaderKeys.NAME:
            self._parse_name(record.spectrum, value)

        elif key == HeaderKeys.COMMENT:
            self._parse_comment(record.spectrum, value)

        else:
            self._parse_header_field(record.spectrum, key, value)

    def _parse_name(self, spectrum: Spectrum, name: str) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    def _parse_comment(self, spectrum: Spectrum, comment: str) -> None:
        raise NotImplementedError("Subclasses must implement this method")

    def _parse_header_field(self, spectrum: Spectrum, key: str, value: str) -> None:
        """Handle format specific header keys. Unknown keys are ignored."""

    def _annotation_from_field(self, field_value: str) -> str:
        return strip_annotation_suffix(field_value)

    def _parse_peak_line(self, line: str) -> Peak:
        """Parse ``mz intensity [annotation ...]``."""
        fields = line.split()
        if len(fields) < 2:
            raise ValueError("invalid peak format, expected at least 2 fields")

        try:
            mz = float(fields[0])
        except ValueError:
            raise ValueError(f"invalid m/z value '{fields[0]}'") from None

        try:
            intensity = float(fields[1])
        except ValueError:
            raise ValueError(f"invalid intensity value '{fields[1]}'") from None

        peak = Peak(mz=mz, intensity=intensity)

        if len(fields) >= 3:
            peak.annotation = self._annotation_from_field(fields[2])
            ion = parse_ion_annotation(peak.annotation)
            if ion is not None:
                peak.charge = ion.charge

        return peak

    def _add_named_modification(
        self, spectrum: Spectrum, name: str, position: int
    ) -> bool:
        """Resolve `name` and attach it at `position`.

        A modification already present at `position` only gets its name replaced, no duplicate is added.
        Unknown names are skipped.

        Returns
        -------
        bool
            False if the name is unknown to the modification database.
        """
        mass, found = self.modification_database.get_mass(name)
        if not found:
            logger.debug(f"Skipping unknown modification '{name}' in {spectrum.name}")
            return False

        existing = spectrum.find_modification(position)
        if existing is not None:
            existing.name = name
        else:
            spectrum.modifications.append(
                Modification(mass=mass, position=position, name=name)
            )
        return True
