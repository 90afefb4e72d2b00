"""Driver turning a stream of parsed spectra into validated sink records."""

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from dbkey import reporting
from dbkey.chemistry import peptide_mz
from dbkey.config import Config, load_config
from dbkey.constants.keys import ConfigKeys, PrecursorMzModes
from dbkey.exceptions import ConfigError, SinkError, SpectrumValidationError
from dbkey.filter.config import FilterConfig
from dbkey.filter.peaks import NonPositiveIntensityFilter
from dbkey.lookup import load_compound_classes, load_mass_offsets
from dbkey.modifications import default_modification_database
from dbkey.reader import SpectrumReader, open_library
from dbkey.sink import SinkRecord, SpectrumSink
from dbkey.spectrum import Spectrum
from dbkey.validation import validate_spectrum

# the progress method is added in reporting.py at module load time
if TYPE_CHECKING:

    class _ExtendedLogger(logging.Logger):
        def progress(self, message: str, *args: Any, **kws: Any) -> None: ...

    logger: _ExtendedLogger = logging.getLogger()  # type: ignore[assignment]
else:
    logger = logging.getLogger()

# fragmentation mode value meaning "keep what the file says"
READ_FROM_FILE = "read"


@dataclass
class ConversionStats:
    processed: int = 0
    skipped: int = 0


class LibraryConverter:
    def __init__(
        self,
        filter_config: FilterConfig | None = None,
        mass_offsets: dict[str, float] | None = None,
        compound_classes: dict[str, str] | None = None,
        fragmentation_mode: str | None = None,
        mass_analyzer: str | None = None,
        collision_energy: float | None = None,
        precursor_mz_mode: str | None = None,
        progress_interval: int = 1000,
    ) -> None:
        """Convert spectra from a reader into sink records.

        Each spectrum is processed in this order:

        1. per-sequence overrides (mass offset, compound class)
        2. fragmentation mode and mass analyzer, configured value or format default
        3. collision energy override
        4. precursor m/z calculation
        5. removal of peaks with zero or negative intensity
        6. peak filters, see `FilterConfig`
        7. validation, invalid spectra are logged and skipped
        8. write to the sink

        Parameters
        ----------
        filter_config : FilterConfig, optional
            Peak filter settings, no filtering if None.

        mass_offsets : dict[str, float], optional
            Mass offset by exact sequence. Added to computed precursor m/z values as ``offset / charge``.

        compound_classes : dict[str, str], optional
            Compound class by exact sequence.

        fragmentation_mode : str, optional
            Overrides the file value. None or ``read`` keep it, empty values get the format default.

        mass_analyzer : str, optional
            Overrides the file value. None keeps it, empty values get the format default.

        collision_energy : float, optional
            Overrides the file value if > 0.

        precursor_mz_mode : str, optional
            ``calculate`` always recomputes the precursor m/z, ``read`` only if it is missing.
            None uses the default of the reader.

        progress_interval : int, default 1000
            Number of written records between two progress messages, 0 disables them.
        """
        if precursor_mz_mode not in (None, *PrecursorMzModes.get_values()):
            raise ConfigError(
                ConfigKeys.PRECURSOR_MZ,
                precursor_mz_mode,
                detail_msg=f"precursor_mz must be one of {PrecursorMzModes.get_values()}",
            )

        self.filter_config = filter_config if filter_config is not None else FilterConfig()
        self.mass_offsets = mass_offsets if mass_offsets is not None else {}
        self.compound_classes = compound_classes if compound_classes is not None else {}
        self.fragmentation_mode = fragmentation_mode
        self.mass_analyzer = mass_analyzer
        self.collision_energy = collision_energy
        self.precursor_mz_mode = precursor_mz_mode
        self.progress_interval = progress_interval

        self._remove_non_positive = NonPositiveIntensityFilter()
        self._pipeline = self.filter_config.build_pipeline()

    @classmethod
    def from_config(
        cls,
        config: Config,
        mass_offsets: dict[str, float] | None = None,
        compound_classes: dict[str, str] | None = None,
    ) -> "LibraryConverter":
        """Create a converter from the ``spectrum``, ``filter`` and ``reporting`` sections of a config."""
        spectrum_config = config[ConfigKeys.SPECTRUM]
        return cls(
            filter_config=FilterConfig.from_config(config),
            mass_offsets=mass_offsets,
            compound_classes=compound_classes,
            fragmentation_mode=spectrum_config[ConfigKeys.FRAGMENTATION_MODE],
            mass_analyzer=spectrum_config[ConfigKeys.MASS_ANALYZER],
            collision_energy=spectrum_config[ConfigKeys.COLLISION_ENERGY],
            precursor_mz_mode=spectrum_config[ConfigKeys.PRECURSOR_MZ],
            progress_interval=config[ConfigKeys.REPORTING][
                ConfigKeys.PROGRESS_INTERVAL
            ],
        )

    def prepare(self, spectrum: Spectrum, reader: SpectrumReader) -> Spectrum:
        """Apply overrides, defaults, precursor calculation and peak filters to `spectrum` in place."""
        if spectrum.sequence in self.mass_offsets:
            spectrum.mass_offset = self.mass_offsets[spectrum.sequence]

        if spectrum.sequence in self.compound_classes:
            spectrum.compound_class = self.compound_classes[spectrum.sequence]

        if self.fragmentation_mode and self.fragmentation_mode != READ_FROM_FILE:
            spectrum.fragmentation_mode = self.fragmentation_mode
        elif not spectrum.fragmentation_mode:
            spectrum.fragmentation_mode = reader.DEFAULT_FRAGMENTATION_MODE

        if self.mass_analyzer:
            spectrum.mass_analyzer = self.mass_analyzer
        elif not spectrum.mass_analyzer:
            spectrum.mass_analyzer = reader.DEFAULT_MASS_ANALYZER

        if self.collision_energy is not None and self.collision_energy > 0:
            spectrum.collision_energy = float(self.collision_energy)

        self._set_precursor_mz(spectrum, reader)

        self._remove_non_positive(spectrum)
        return self._pipeline(spectrum)

    def _set_precursor_mz(self, spectrum: Spectrum, reader: SpectrumReader) -> None:
        mode = self.precursor_mz_mode or reader.DEFAULT_PRECURSOR_MZ_MODE

        if mode == PrecursorMzModes.READ and spectrum.precursor_mz != 0:
            return

        if not spectrum.sequence or spectrum.charge <= 0:
            return

        precursor_mz = peptide_mz(
            spectrum.sequence, spectrum.charge, spectrum.modifications
        )
        if spectrum.mass_offset != 0:
            precursor_mz += spectrum.mass_offset / spectrum.charge
        spectrum.precursor_mz = precursor_mz

    def run(self, reader: SpectrumReader, sink: SpectrumSink) -> ConversionStats:
        """Convert every spectrum of `reader` and write the valid ones to `sink`.

        Returns
        -------
        ConversionStats
            Number of written and skipped spectra.

        Raises
        ------
        SinkError
            If the sink fails to write a record, the conversion stops immediately.

        ParseError
            If the reader stopped on a malformed record. Records read before were written.
        """
        stats = ConversionStats()

        while reader.advance():
            spectrum = self.prepare(reader.current, reader)

            try:
                validate_spectrum(spectrum)
            except SpectrumValidationError as e:
                logger.warning(f"Invalid spectrum {spectrum.name}: {e.detail_msg}")
                stats.skipped += 1
                continue

            try:
                sink.write(SinkRecord.from_spectrum(spectrum))
            except Exception as e:
                raise SinkError(spectrum.name, str(e)) from e

            stats.processed += 1
            if self.progress_interval and stats.processed % self.progress_interval == 0:
                logger.progress(f"Processed {stats.processed} spectra...")

        if reader.error is not None:
            raise reader.error

        sink.finalize()

        logger.progress(f"Conversion complete, processed {stats.processed} spectra")
        if stats.skipped > 0:
            logger.progress(f"Skipped {stats.skipped} spectra (validation errors)")

        return stats


def convert_library(
    path: str | os.PathLike,
    sink: SpectrumSink,
    config: Config | None = None,
) -> ConversionStats:
    """Convert a library file into records of `sink`.

    Side tables named in the ``input`` section of the config are loaded first.

    Parameters
    ----------
    path : str | os.PathLike
        Library file, ``.msp`` or ``.sptxt`` unless ``input.format`` is set.

    sink : SpectrumSink
        Receives one record per valid spectrum.

    config : Config, optional
        Defaults to `load_config()`.
    """
    if config is None:
        config = load_config()

    reporting.print_environment()

    input_config = config[ConfigKeys.INPUT]

    modification_database = default_modification_database()
    if input_config[ConfigKeys.MODIFICATION_TABLE] is not None:
        modification_database.load_from_csv(input_config[ConfigKeys.MODIFICATION_TABLE])

    mass_offsets = None
    if input_config[ConfigKeys.MASS_OFFSET_TABLE] is not None:
        mass_offsets = load_mass_offsets(input_config[ConfigKeys.MASS_OFFSET_TABLE])

    compound_classes = None
    if input_config[ConfigKeys.COMPOUND_CLASS_TABLE] is not None:
        compound_classes = load_compound_classes(
            input_config[ConfigKeys.COMPOUND_CLASS_TABLE]
        )

    converter = LibraryConverter.from_config(config, mass_offsets, compound_classes)

    with open_library(
        path, modification_database, fmt=input_config[ConfigKeys.FORMAT]
    ) as reader:
        return converter.run(reader, sink)
