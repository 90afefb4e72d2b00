"""Reader for NIST / Prosit style MSP libraries.

Example record::

    Name: EIESAGDITFNR/2
    MW: 1365.6579
    Comment: Parent=683.8362 Collision_energy=35 Mods=1/-1,E,TMTPro ModString=EIESAGDITFNR//TMTPro@E-1/2 iRT=61.01
    Num peaks: 2
    175.1190	1000.0	"y1/0.2ppm"
    262.1510	320.5	"y2"

All metadata except name and peak count is carried in the ``Comment`` field.
"""

import logging

from dbkey.constants.keys import CommentKeys, PrecursorMzModes, SourceFormats
from dbkey.modifications import AMINO_ACID_LETTERS, parse_mods_field
from dbkey.reader.base import (
    SpectrumReader,
    iter_comment_tokens,
    parse_int,
    parse_optional_float,
    split_name,
    strip_annotation_suffix,
)
from dbkey.spectrum import Spectrum

logger = logging.getLogger()


def parse_mod_string_field(value: str) -> list[tuple[str, int]]:
    """Parse the ``ModString`` comment token ``SEQUENCE//Name@Pos;Name@Pos/Charge``.

    Positions may carry a leading residue letter (``E-1`` is the N-terminus) and are used as written.
    Entries that do not have the ``name@position`` shape are skipped.

    Returns
    -------
    list[tuple[str, int]]
        ``(name, position)`` per entry.
    """
    _, sep, mod_part = value.partition("//")
    if not sep:
        return []

    # drop the trailing charge
    mod_part = mod_part.split("/")[0]

    parsed = []
    for entry in mod_part.split(";"):
        entry = entry.strip()
        if not entry:
            continue

        at_parts = entry.split("@")
        if len(at_parts) != 2:
            continue

        name, position_str = at_parts
        try:
            position = parse_int(position_str.lstrip(AMINO_ACID_LETTERS))
        except ValueError:
            continue

        parsed.append((name, position))

    return parsed


class MspReader(SpectrumReader):
    """Streaming reader for MSP libraries.

    Precursor m/z is recomputed from sequence and modifications by default, the ``Parent``
    value from the comment is only kept if the converter is configured to read it.
    """

    SOURCE_FORMAT = SourceFormats.MSP
    DEFAULT_FRAGMENTATION_MODE = "HCD"
    DEFAULT_MASS_ANALYZER = "FT"
    DEFAULT_PRECURSOR_MZ_MODE = PrecursorMzModes.CALCULATE

    def _parse_name(self, spectrum: Spectrum, name: str) -> None:
        spectrum.sequence, spectrum.charge = split_name(name)

    def _annotation_from_field(self, field_value: str) -> str:
        return strip_annotation_suffix(field_value.strip('"'))

    def _parse_comment(self, spectrum: Spectrum, comment: str) -> None:
        for key, value in iter_comment_tokens(comment):
            if key == CommentKeys.PARENT:
                precursor_mz = parse_optional_float(value)
                if precursor_mz is not None:
                    spectrum.precursor_mz = precursor_mz

            elif key in (CommentKeys.COLLISION_ENERGY_MSP, CommentKeys.COLLISION_ENERGY):
                collision_energy = parse_optional_float(value)
                if collision_energy is not None:
                    spectrum.collision_energy = collision_energy

            elif key in (CommentKeys.IRT, CommentKeys.RETENTION_TIME):
                retention_time = parse_optional_float(value)
                if retention_time is not None:
                    spectrum.retention_time = retention_time

            elif key == CommentKeys.FRAGMENTATION:
                spectrum.fragmentation_mode = value

            elif key == CommentKeys.MODS:
                # best effort: a malformed list leaves the record without these modifications
                try:
                    mods = parse_mods_field(value)
                except ValueError as e:
                    logger.debug(f"Ignoring malformed Mods '{value}': {e}")
                    continue
                for position, _, name in mods:
                    self._add_named_modification(spectrum, name, position)

            elif key == CommentKeys.MOD_STRING:
                for name, position in parse_mod_string_field(value):
                    self._add_named_modification(spectrum, name, position)
