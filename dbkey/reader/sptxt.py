"""Reader for SpectraST ``.sptxt`` libraries.

Example record::

    ### SpectraST library header lines are skipped
    Name: n[305]AAAAC[160]LVGELLR/3
    LibID: 0
    MW: 1684.9181
    PrecursorMZ: 562.6436
    Comment: Mods=2/-1,A,TMTPro/4,C,Carbamidomethyl Parent=562.644 RetentionTime=1834.5,1801.2,1870.1
    NumPeaks: 2
    175.1190	1000.0	y1/0.00	1/1	0.0
    262.1510	320.5	y2/0.01	1/1	0.0

Modifications are encoded inline in the name, the ``Mods`` comment token only refines their names.
"""

import logging
import re

from dbkey.constants.keys import (
    CommentKeys,
    HeaderKeys,
    PrecursorMzModes,
    SourceFormats,
)
from dbkey.modifications import parse_mods_field
from dbkey.reader.base import (
    SpectrumReader,
    iter_comment_tokens,
    parse_optional_float,
    split_name,
)
from dbkey.spectrum import N_TERMINAL, Modification, Spectrum

logger = logging.getLogger()

# optional residue letter followed by a bracketed mass, e.g. n[305], C[160], M[147.0354]
INLINE_MODIFICATION_PATTERN = re.compile(r"([A-Za-z]?)\[([+-]?\d+(?:\.\d+)?)\]")

N_TERMINAL_SENTINEL = "n"
C_TERMINAL_SENTINEL = "c"


def strip_inline_mods(raw: str) -> tuple[str, list[Modification]]:
    """Remove bracketed inline modifications from a sequence literal.

    ``n[mass]`` is attached to the N-terminus, ``c[mass]`` to the C-terminus at the current residue
    count, any other ``X[mass]`` to residue ``X``. A bracket without a residue letter is always
    N-terminal, also in the middle of a sequence: in ``C[160][16]K`` the 16 sits at the N-terminus,
    not on the C.
    Positions are 0-based indices into the returned sequence.

    Parameters
    ----------
    raw : str
        Sequence literal, e.g. ``n[305]AC[160]DE``.

    Returns
    -------
    tuple[str, list[Modification]]
        Plain sequence and modifications in order of appearance, named by their rounded mass.

    Examples
    --------
    >>> strip_inline_mods("n[305]AC[160]DE")
    ('ACDE', [Modification(mass=305.0, position=-1, name='305'), Modification(mass=160.0, position=1, name='160')])
    """
    residues = []
    modifications = []

    last_end = 0
    for match in INLINE_MODIFICATION_PATTERN.finditer(raw):
        residues.extend(raw[last_end : match.start()])
        last_end = match.end()

        residue, mass_str = match.groups()
        mass = float(mass_str)

        if residue in ("", N_TERMINAL_SENTINEL):
            position = N_TERMINAL
        elif residue == C_TERMINAL_SENTINEL:
            position = len(residues)
        else:
            position = len(residues)
            residues.append(residue)

        modifications.append(
            Modification(mass=mass, position=position, name=f"{mass:.0f}")
        )

    residues.extend(raw[last_end:])
    return "".join(residues), modifications


class SptxtReader(SpectrumReader):
    """Streaming reader for SpectraST libraries.

    The precursor m/z is taken from the file and only computed if missing.
    """

    SOURCE_FORMAT = SourceFormats.SPTXT
    DEFAULT_FRAGMENTATION_MODE = "CID"
    DEFAULT_MASS_ANALYZER = "IT"
    DEFAULT_PRECURSOR_MZ_MODE = PrecursorMzModes.READ

    def _is_comment(self, line: str) -> bool:
        return line.startswith("###")

    def _parse_name(self, spectrum: Spectrum, name: str) -> None:
        literal, spectrum.charge = split_name(name)
        spectrum.sequence, spectrum.modifications = strip_inline_mods(literal)

    def _parse_header_field(self, spectrum: Spectrum, key: str, value: str) -> None:
        if key == HeaderKeys.PRECURSOR_MZ:
            precursor_mz = parse_optional_float(value)
            if precursor_mz is not None:
                spectrum.precursor_mz = precursor_mz

    def _parse_comment(self, spectrum: Spectrum, comment: str) -> None:
        for key, value in iter_comment_tokens(comment):
            if key == CommentKeys.PARENT:
                precursor_mz = parse_optional_float(value)
                if precursor_mz is not None:
                    spectrum.precursor_mz = precursor_mz

            elif key == CommentKeys.COLLISION_ENERGY:
                collision_energy = parse_optional_float(value)
                if collision_energy is not None:
                    spectrum.collision_energy = collision_energy

            elif key == CommentKeys.RETENTION_TIME:
                # min,max,median style lists, the first value is used
                retention_time = parse_optional_float(value.split(",")[0])
                if retention_time is not None:
                    spectrum.retention_time = retention_time

            elif key == CommentKeys.FRAGMENTATION:
                spectrum.fragmentation_mode = value

            elif key == CommentKeys.MODS:
                # best effort, names are refined by position and a malformed list is ignored
                try:
                    mods = parse_mods_field(value)
                except ValueError as e:
                    logger.debug(f"Ignoring malformed Mods '{value}': {e}")
                    continue
                for position, _, name in mods:
                    self._add_named_modification(spectrum, name, position)
