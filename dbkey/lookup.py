"""Per-sequence override tables applied by the converter before filtering."""

import logging
import typing

from dbkey.tables import parse_float, read_two_column_table

logger = logging.getLogger()


def load_mass_offsets(source: typing.Any) -> dict[str, float]:
    """Load a ``Sequence,massOffset`` table.

    Parameters
    ----------
    source : str | os.PathLike | file-like
        Path or open stream of the csv table, the first line is a header.

    Returns
    -------
    dict[str, float]
        Mass offset by exact sequence. Later rows overwrite earlier ones.

    Raises
    ------
    ParseError
        On a row with fewer than two fields or a non-numeric offset.
    """
    mass_offsets = {}
    for line_number, sequence, offset_str in read_two_column_table(source):
        mass_offsets[sequence] = parse_float(offset_str, line_number, "mass offset")

    logger.info(f"Loaded {len(mass_offsets)} mass offset mappings")
    return mass_offsets


def load_compound_classes(source: typing.Any) -> dict[str, str]:
    """Load a ``Sequence,CompoundClass`` table, see `load_mass_offsets`."""
    compound_classes = {}
    for _, sequence, compound_class in read_two_column_table(source):
        compound_classes[sequence] = compound_class

    logger.info(f"Loaded {len(compound_classes)} compound class mappings")
    return compound_classes
