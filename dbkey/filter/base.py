"""Base classes for the per-spectrum peak transformations."""

import logging
import typing

from dbkey.spectrum import Spectrum

logger = logging.getLogger()


class ProcessingStep:
    def __init__(self) -> None:
        """Base class for spectrum processing steps. Each implementation must implement the `forward` method.
        Processing steps modify the spectrum in place, return it and can be chained together in a ProcessingPipeline.
        """

    def __call__(self, spectrum: Spectrum) -> Spectrum:
        """Run the processing step on the spectrum."""
        logger.debug(f"Running {self.__class__.__name__}")
        if self.validate(spectrum):
            return self.forward(spectrum)
        logger.critical(f"Input {spectrum} failed validation for {self.__class__.__name__}")
        raise ValueError(
            f"Input {spectrum} failed validation for {self.__class__.__name__}"
        )

    def validate(self, spectrum: typing.Any) -> bool:
        """Validate the input object."""
        return isinstance(spectrum, Spectrum)

    def forward(self, spectrum: Spectrum) -> Spectrum:
        """Run the processing step on the spectrum."""
        raise NotImplementedError("Subclasses must implement this method")


class ProcessingPipeline:
    def __init__(self, steps: list[ProcessingStep]) -> None:
        """Processing pipeline for filtering and adjusting the peaks of a spectrum.

        The pipeline is a list of ProcessingStep objects. Each step is called in order
        and the output of the previous step is passed to the next step.

        Example::

            pipeline = ProcessingPipeline([
                IonTypeFilter(["b", "y"]),
                TopNFilter(12),
                PeakSorter(),
            ])

            spectrum = pipeline(spectrum)

        """
        self.steps = steps

    def __call__(self, spectrum: Spectrum) -> Spectrum:
        """Run the pipeline on the spectrum."""
        for step in self.steps:
            spectrum = step(spectrum)
        return spectrum
