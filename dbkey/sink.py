"""Conversion of validated spectra into flat output records and the sink interface receiving them."""

import logging
from dataclasses import dataclass

import numpy as np

from dbkey.chemistry import neutral_mass
from dbkey.spectrum import Spectrum

logger = logging.getLogger()

# peak arrays are stored as little-endian 64 bit floats
BLOB_DTYPE = "<f8"


def encode_float64_blob(values: list[float] | np.ndarray) -> bytes:
    """Encode values as a little-endian float64 byte string."""
    return np.asarray(values, dtype=BLOB_DTYPE).tobytes()


def decode_float64_blob(blob: bytes) -> np.ndarray:
    """Decode a byte string created by `encode_float64_blob`."""
    return np.frombuffer(blob, dtype=BLOB_DTYPE)


@dataclass
class SinkRecord:
    """One output row per spectrum.

    The neutral mass is computed from sequence and modifications only, a configured mass offset
    is recorded in `mass_offset` and in `tag` but not added.
    """

    name: str
    sequence: str
    charge: int
    precursor_mz: float
    neutral_mass: float
    fragmentation_mode: str
    mass_analyzer: str
    retention_time: float | None
    collision_energy: float | None
    modification_string: str
    mz_blob: bytes
    intensity_blob: bytes
    compound_class: str = ""
    mass_offset: float = 0.0
    instrument: str = ""
    tag: str = ""
    source_format: str = ""

    @classmethod
    def from_spectrum(cls, spectrum: Spectrum) -> "SinkRecord":
        """Create the record of a validated spectrum. Peaks are expected to be sorted by m/z."""
        modification_string = spectrum.modification_string()

        tag = f"mods:{modification_string}"
        if spectrum.mass_offset != 0:
            tag = f"{tag} massOffset:{spectrum.mass_offset:.6f}"

        return cls(
            name=spectrum.name,
            sequence=spectrum.sequence,
            charge=spectrum.charge,
            precursor_mz=spectrum.precursor_mz,
            neutral_mass=neutral_mass(spectrum.sequence, spectrum.modifications),
            fragmentation_mode=spectrum.fragmentation_mode,
            mass_analyzer=spectrum.mass_analyzer,
            retention_time=spectrum.retention_time,
            collision_energy=spectrum.collision_energy,
            modification_string=modification_string,
            mz_blob=encode_float64_blob([peak.mz for peak in spectrum.peaks]),
            intensity_blob=encode_float64_blob(
                [peak.intensity for peak in spectrum.peaks]
            ),
            compound_class=spectrum.compound_class,
            mass_offset=spectrum.mass_offset,
            instrument=spectrum.instrument,
            tag=tag,
            source_format=spectrum.source_format,
        )

    @property
    def num_peaks(self) -> int:
        return len(self.mz_blob) // np.dtype(BLOB_DTYPE).itemsize


class SpectrumSink:
    """Receiver of converted records. Implementations persist records, e.g. into a database."""

    def write(self, record: SinkRecord) -> None:
        """Persist a single record. Any exception aborts the conversion."""
        raise NotImplementedError("Subclasses must implement this method")

    def finalize(self) -> None:
        """Called once after the last record was written."""


class MemorySink(SpectrumSink):
    """Keep all records in memory."""

    def __init__(self) -> None:
        self.records: list[SinkRecord] = []
        self.finalized = False

    def __len__(self) -> int:
        return len(self.records)

    def write(self, record: SinkRecord) -> None:
        self.records.append(record)

    def finalize(self) -> None:
        logger.info(f"Collected {len(self.records)} records in memory")
        self.finalized = True
