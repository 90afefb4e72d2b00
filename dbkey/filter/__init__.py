from dbkey.filter.base import ProcessingPipeline, ProcessingStep
from dbkey.filter.config import FilterConfig
from dbkey.filter.peaks import (
    FragmentMassAdjustment,
    IntensityCutoffFilter,
    IonTypeFilter,
    NonPositiveIntensityFilter,
    PeakSorter,
    TopNFilter,
)

__all__ = [
    "FilterConfig",
    "FragmentMassAdjustment",
    "IntensityCutoffFilter",
    "IonTypeFilter",
    "NonPositiveIntensityFilter",
    "PeakSorter",
    "ProcessingPipeline",
    "ProcessingStep",
    "TopNFilter",
]
