"""Assembly of the configured peak filters into a fixed order pipeline."""

import logging
from dataclasses import dataclass, field

from dbkey.config import Config
from dbkey.constants.keys import ConfigKeys
from dbkey.exceptions import ConfigError
from dbkey.filter.base import ProcessingPipeline, ProcessingStep
from dbkey.filter.peaks import (
    FragmentMassAdjustment,
    IntensityCutoffFilter,
    IonTypeFilter,
    PeakSorter,
    TopNFilter,
)
from dbkey.spectrum import Spectrum

logger = logging.getLogger()


def _peak_count(value: int | float | None) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not float(value).is_integer():
        raise ConfigError(
            ConfigKeys.TOP_N,
            value,
            detail_msg=f"top_n must be a whole number of peaks, got {value}",
        )
    return int(value)


@dataclass
class FilterConfig:
    """Peak filter settings.

    Enabled steps always run in the order ion type filter, intensity cutoff, top N,
    fragment mass adjustment, followed by an unconditional re-sort by m/z.

    Parameters
    ----------
    top_n : int
        Keep the N most intense peaks, 0 disables.

    intensity_cutoff : float
        Drop peaks below this percentage of the base peak, 0 disables.

    ion_types : list[str]
        Annotation prefixes to keep, empty disables.

    old_mod_mass, new_mod_mass : float
        Fragment mass adjustment, enabled only if both are non-zero.
    """

    top_n: int = 0
    intensity_cutoff: float = 0.0
    ion_types: list[str] = field(default_factory=list)
    old_mod_mass: float = 0.0
    new_mod_mass: float = 0.0

    @classmethod
    def from_config(cls, config: Config) -> "FilterConfig":
        """Create the filter settings from the ``filter`` section of a config."""
        filter_config = config[ConfigKeys.FILTER]
        return cls(
            top_n=_peak_count(filter_config[ConfigKeys.TOP_N]),
            intensity_cutoff=float(filter_config[ConfigKeys.INTENSITY_CUTOFF] or 0.0),
            ion_types=list(filter_config[ConfigKeys.ION_TYPES] or []),
            old_mod_mass=float(filter_config[ConfigKeys.OLD_MOD_MASS] or 0.0),
            new_mod_mass=float(filter_config[ConfigKeys.NEW_MOD_MASS] or 0.0),
        )

    def build_pipeline(self) -> ProcessingPipeline:
        steps: list[ProcessingStep] = []

        if self.ion_types:
            steps.append(IonTypeFilter(self.ion_types))

        if self.intensity_cutoff > 0:
            steps.append(IntensityCutoffFilter(self.intensity_cutoff))

        if self.top_n > 0:
            steps.append(TopNFilter(self.top_n))

        if self.old_mod_mass != 0 and self.new_mod_mass != 0:
            steps.append(FragmentMassAdjustment(self.old_mod_mass, self.new_mod_mass))

        steps.append(PeakSorter())

        logger.debug(
            f"Peak pipeline: {', '.join(step.__class__.__name__ for step in steps)}"
        )
        return ProcessingPipeline(steps)

    def apply(self, spectrum: Spectrum) -> Spectrum:
        """Run all enabled steps on `spectrum` in place and return it."""
        return self.build_pipeline()(spectrum)
