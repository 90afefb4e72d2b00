"""Intermediate representation shared by all library readers.

A `Spectrum` is built by exactly one reader call, mutated in place by the converter
(overrides, defaults, peak filtering) and finally read by the validator and the sink.
"""

import re
from dataclasses import dataclass, field
from typing import NamedTuple

# position sentinel for modifications attached to the peptide N-terminus
N_TERMINAL = -1


@dataclass
class Peak:
    """A single fragment observation.

    Parameters
    ----------
    mz : float
        Fragment m/z.

    intensity : float
        Fragment intensity.

    annotation : str
        Ion label with any trailing ``/...`` suffix removed, e.g. ``y3`` or ``b2^2``. Empty if unannotated.

    charge : int
        Fragment charge taken from the annotation, 0 if unknown.
    """

    mz: float
    intensity: float
    annotation: str = ""
    charge: int = 0


@dataclass
class Modification:
    """A mass shift attached to a residue (0-based index) or to the N-terminus (`N_TERMINAL`)."""

    mass: float
    position: int
    name: str = ""


@dataclass
class Spectrum:
    sequence: str = ""
    charge: int = 0
    precursor_mz: float = 0.0
    peaks: list[Peak] = field(default_factory=list)
    fragmentation_mode: str = ""
    mass_analyzer: str = ""

    retention_time: float | None = None
    collision_energy: float | None = None
    modifications: list[Modification] = field(default_factory=list)
    instrument: str = ""

    # late bound overrides keyed by sequence
    mass_offset: float = 0.0
    compound_class: str = ""

    source_file: str = ""
    source_format: str = ""

    @property
    def name(self) -> str:
        """Spectrum name in the format ``SEQUENCE/CHARGE``."""
        return f"{self.sequence}/{self.charge}"

    def peaks_sorted(self) -> bool:
        """Check if peaks are sorted by m/z in ascending order."""
        return not any(
            self.peaks[i].mz < self.peaks[i - 1].mz for i in range(1, len(self.peaks))
        )

    def sort_peaks(self) -> None:
        """Sort peaks by m/z in ascending order. The sort is stable."""
        self.peaks.sort(key=lambda peak: peak.mz)

    def total_modification_mass(self) -> float:
        return sum(mod.mass for mod in self.modifications)

    def modification_string(self) -> str:
        """Encode modifications as ``mass@position`` pairs joined by ``;``, e.g. ``57.021464@3;15.994915@7``."""
        return ";".join(f"{mod.mass:.6f}@{mod.position}" for mod in self.modifications)

    def find_modification(self, position: int) -> Modification | None:
        """Return the first modification at `position`, or None."""
        for mod in self.modifications:
            if mod.position == position:
                return mod
        return None


class IonAnnotation(NamedTuple):
    ion_type: str
    position: int
    charge: int


# ion type letter, series number and optional charge, e.g. y3, b2^2, y10^3
# only the prefix has to match, so y3-17^2 parses as a singly charged y3
ION_ANNOTATION_PATTERN = re.compile(r"^([a-z])(\d+)(?:\^(\d+))?")


def parse_ion_annotation(annotation: str) -> IonAnnotation | None:
    """Parse annotations like ``y3``, ``b2^2``, ``y10^3``. Returns None if the annotation does not match."""
    match = ION_ANNOTATION_PATTERN.match(annotation)
    if match is None:
        return None

    ion_type, position, charge = match.groups()
    return IonAnnotation(ion_type, int(position), int(charge) if charge else 1)
