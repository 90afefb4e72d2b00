"""Structural and numeric checks a spectrum has to pass before it is handed to a sink.

Validation is side-effect free and reports every violated rule, not just the first one.
"""

import numpy as np

from dbkey.exceptions import SpectrumValidationError
from dbkey.spectrum import Spectrum


class Rule:
    """Validation rule base class"""

    def __init__(self, name: str, message: str = ""):
        """Base class for all rules

        Parameters
        ----------
        name: str
            Name of the spectrum attribute the rule inspects

        message: str
            Violation message reported if the rule fails

        """
        self.name = name
        self.message = message

    def __call__(self, spectrum: Spectrum) -> list[str]:
        raise NotImplementedError("Subclasses must implement this method")


class Required(Rule):
    """Attribute must be non-empty (strings, lists)."""

    def __call__(self, spectrum: Spectrum) -> list[str]:
        if not getattr(spectrum, self.name):
            return [self.message]
        return []


class Positive(Rule):
    """Numeric attribute must be strictly positive. NaN fails."""

    def __call__(self, spectrum: Spectrum) -> list[str]:
        if not getattr(spectrum, self.name) > 0:
            return [self.message]
        return []


class PeakValues(Rule):
    def __init__(self):
        """Every peak needs a finite, positive m/z and a finite, non-negative intensity."""
        super().__init__("peaks")

    def __call__(self, spectrum: Spectrum) -> list[str]:
        if len(spectrum.peaks) == 0:
            return []

        mzs = np.array([peak.mz for peak in spectrum.peaks], dtype=np.float64)
        intensities = np.array(
            [peak.intensity for peak in spectrum.peaks], dtype=np.float64
        )

        violations = []
        for i in range(len(mzs)):
            if not np.isfinite(mzs[i]):
                violations.append(f"peak {i} has invalid m/z")
            elif mzs[i] <= 0:
                violations.append(f"peak {i} m/z must be positive")

            if not np.isfinite(intensities[i]):
                violations.append(f"peak {i} has invalid intensity")
            elif intensities[i] < 0:
                violations.append(f"peak {i} intensity must be non-negative")

        return violations


class PeaksSorted(Rule):
    def __init__(self):
        super().__init__("peaks", "peaks must be sorted by m/z")

    def __call__(self, spectrum: Spectrum) -> list[str]:
        if not spectrum.peaks_sorted():
            return [self.message]
        return []


class Schema:
    def __init__(self, name: str, rules: list[Rule]):
        """Schema for validating spectra

        Parameters
        ----------
        name: str
            Name of the schema

        rules: list
            List of Rule objects, evaluated in order

        """
        self.name = name
        self.rules = rules
        for rule in self.rules:
            if not isinstance(rule, Rule):
                raise ValueError("Schema must contain only Rule objects")

    def violations(self, spectrum: Spectrum) -> list[str]:
        """Collect the messages of all violated rules."""
        found = []
        for rule in self.rules:
            found.extend(rule(spectrum))
        return found

    def validate(self, spectrum: Spectrum) -> None:
        """Validates the spectrum.

        Raises
        ------
        SpectrumValidationError
            Listing every violation if at least one rule fails.

        """
        found = self.violations(spectrum)
        if found:
            raise SpectrumValidationError(found, spectrum.name)


spectrum_schema = Schema(
    "spectrum",
    [
        Required("sequence", "sequence is required"),
        Positive("charge", "charge must be positive"),
        Positive("precursor_mz", "precursor m/z must be positive"),
        Required("peaks", "at least one peak is required"),
        Required("fragmentation_mode", "fragmentation mode is required"),
        Required("mass_analyzer", "mass analyzer is required"),
        PeakValues(),
        PeaksSorted(),
    ],
)


def find_violations(spectrum: Spectrum) -> list[str]:
    """Return all violated rules of `spectrum`, empty if valid."""
    return spectrum_schema.violations(spectrum)


def validate_spectrum(spectrum: Spectrum) -> None:
    """Raise `SpectrumValidationError` listing all violations if `spectrum` is invalid."""
    spectrum_schema.validate(spectrum)
