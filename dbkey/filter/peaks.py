"""Peak filters and fragment adjustments, each implemented as a `ProcessingStep`."""

import logging

import numpy as np

from dbkey.filter.base import ProcessingStep
from dbkey.spectrum import Spectrum, parse_ion_annotation

logger = logging.getLogger()


class NonPositiveIntensityFilter(ProcessingStep):
    def __init__(self) -> None:
        """Drop peaks with zero or negative intensity."""
        super().__init__()

    def forward(self, spectrum: Spectrum) -> Spectrum:
        spectrum.peaks = [peak for peak in spectrum.peaks if peak.intensity > 0]
        return spectrum


class IonTypeFilter(ProcessingStep):
    def __init__(self, ion_types: list[str]) -> None:
        """Keep only peaks whose annotation starts with one of the given prefixes.

        The match is case-sensitive, ``y`` matches ``y3`` and ``y10^2``.
        Unannotated peaks are always removed.

        Parameters
        ----------
        ion_types : list[str]
            Allowed annotation prefixes.
        """
        super().__init__()
        self.ion_types = tuple(ion_types)

    def forward(self, spectrum: Spectrum) -> Spectrum:
        spectrum.peaks = [
            peak
            for peak in spectrum.peaks
            if peak.annotation and peak.annotation.startswith(self.ion_types)
        ]
        return spectrum


class IntensityCutoffFilter(ProcessingStep):
    def __init__(self, cutoff: float) -> None:
        """Remove peaks below a percentage of the base peak intensity.

        Parameters
        ----------
        cutoff : float
            Percentage of the most intense peak, peaks exactly at the threshold are kept.
        """
        super().__init__()
        self.cutoff = cutoff

    def forward(self, spectrum: Spectrum) -> Spectrum:
        if len(spectrum.peaks) == 0:
            return spectrum

        intensities = np.array([peak.intensity for peak in spectrum.peaks])
        threshold = self.cutoff / 100 * intensities.max()

        spectrum.peaks = [
            peak
            for peak, keep in zip(spectrum.peaks, intensities >= threshold, strict=True)
            if keep
        ]
        return spectrum


class TopNFilter(ProcessingStep):
    def __init__(self, top_n: int) -> None:
        """Keep the `top_n` most intense peaks.

        Peaks of equal intensity keep their current relative order, so for ties at the
        boundary the peak listed first wins.
        The result is ordered by descending intensity, `PeakSorter` restores the m/z order.
        """
        super().__init__()
        self.top_n = top_n

    def forward(self, spectrum: Spectrum) -> Spectrum:
        if len(spectrum.peaks) <= self.top_n:
            return spectrum

        intensities = np.array([peak.intensity for peak in spectrum.peaks])
        order = np.argsort(-intensities, kind="stable")[: self.top_n]
        spectrum.peaks = [spectrum.peaks[i] for i in order]
        return spectrum


class FragmentMassAdjustment(ProcessingStep):
    def __init__(self, old_mass: float, new_mass: float) -> None:
        """Shift fragment m/z values to account for a replaced modification.

        Used when a library was built with one label (e.g. TMT, 229.1629) and searched with another
        (e.g. TMTPro, 304.2071). Every annotated fragment that contains a residue carrying a
        modification of `old_mass` is moved by ``(new_mass - old_mass) / charge``.

        ``b`` ions count residues from the N-terminus, all other ion types are treated as
        C-terminal ions counted from the sequence end.
        Modification masses are compared at 6 decimals. Unannotated peaks are left untouched.

        Parameters
        ----------
        old_mass : float
            Mass of the modification present in the library.

        new_mass : float
            Mass of the replacing modification.
        """
        super().__init__()
        self.old_mass = old_mass
        self.new_mass = new_mass
        self._old_mass_key = f"{old_mass:.6f}"

    def forward(self, spectrum: Spectrum) -> Spectrum:
        positions = [
            mod.position
            for mod in spectrum.modifications
            if f"{mod.mass:.6f}" == self._old_mass_key
        ]
        if not positions:
            return spectrum

        delta = self.new_mass - self.old_mass
        sequence_length = len(spectrum.sequence)

        for peak in spectrum.peaks:
            ion = parse_ion_annotation(peak.annotation)
            if ion is None:
                continue

            for position in positions:
                if ion.ion_type == "b":
                    contains_mod = ion.position >= position
                else:
                    contains_mod = ion.position >= sequence_length - position - 1

                if contains_mod:
                    peak.mz += delta / ion.charge

        return spectrum


class PeakSorter(ProcessingStep):
    def __init__(self) -> None:
        """Sort peaks by ascending m/z."""
        super().__init__()

    def forward(self, spectrum: Spectrum) -> Spectrum:
        spectrum.sort_peaks()
        return spectrum
