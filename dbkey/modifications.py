"""Modification name to mass shift resolution.

A `ModificationDatabase` is constructed explicitly and handed to every reader that needs it.
All writes (`add`, `load_from_csv`) are expected to happen before parsing starts,
afterwards the database is only read and can be shared between readers.
"""

import logging
import typing

from dbkey.spectrum import N_TERMINAL, Modification
from dbkey.tables import parse_float, read_two_column_table

logger = logging.getLogger()

AMINO_ACID_LETTERS = "ACDEFGHIKLMNPQRSTVWY"

# common unimod modifications, name -> monoisotopic mass shift
DEFAULT_MODIFICATIONS = {
    "Acetyl": 42.010565,
    "Amidated": -0.984016,
    "Biotin": 226.077598,
    "Carbamidomethyl": 57.021464,
    "Carbamyl": 43.005814,
    "Carboxymethyl": 58.005479,
    "Deamidated": 0.984016,
    "Met->Hse": -29.992806,
    "Met->Hsl": -48.003371,
    "NIPCAM": 99.068414,
    "Phospho": 79.966331,
    "Dehydrated": -18.010565,
    "Propionamide": 71.037114,
    "Pyro-carbamidomethyl": 39.994915,
    "Glu->pyro-Glu": -18.010565,
    "Gln->pyro-Glu": -17.026549,
    "Cation:Na": 21.981943,
    "Methyl": 14.01565,
    "Oxidation": 15.994915,
    "Dimethyl": 28.0313,
    "Trimethyl": 42.04695,
    "Methylthio": 45.987721,
    "Sulfo": 79.956815,
    "Hex": 162.052824,
    "Lipoyl": 188.032956,
    "HexNAc": 203.079373,
    "Farnesyl": 204.187801,
    "Myristoyl": 210.198366,
    "PyridoxalPhosphate": 229.014009,
    "Palmitoyl": 238.229666,
    "GeranylGeranyl": 272.250401,
    "Phosphopantetheine": 340.085794,
    "FAD": 783.141486,
    "Guanidinyl": 42.021798,
    "HNE": 156.11503,
    "Glucuronyl": 176.032088,
    "Glutathione": 305.068156,
    "Propionyl": 56.026215,
    "TMT": 229.162932,
    "TMTPro": 304.207146,
    "TMT6plex": 229.162932,
    "TMT10plex": 229.162932,
    "TMT11plex": 229.162932,
    "TMT16plex": 304.207146,
    "iTRAQ4plex": 144.102063,
    "iTRAQ8plex": 304.205360,
}


class ModificationDatabase:
    def __init__(self, modifications: dict[str, float] | None = None) -> None:
        """In-memory table resolving modification names to mass shifts.

        Parameters
        ----------
        modifications : dict[str, float], optional
            Initial name to mass mapping. The mapping is copied.
        """
        self._modifications = dict(modifications) if modifications else {}

    def __len__(self) -> int:
        return len(self._modifications)

    def __contains__(self, name: str) -> bool:
        return name in self._modifications

    def get_mass(self, name: str) -> tuple[float, bool]:
        """Return the mass shift of `name` and whether the name is known. Unknown names yield ``(0.0, False)``."""
        if name in self._modifications:
            return self._modifications[name], True
        return 0.0, False

    def add(self, name: str, mass: float) -> None:
        """Add or overwrite a modification."""
        self._modifications[name] = mass

    def load_from_csv(self, source: typing.Any) -> int:
        """Add or overwrite modifications from a csv table with the columns ``name,mass[,...]``.

        The first line is a header and is skipped.

        Parameters
        ----------
        source : str | os.PathLike | file-like
            Path or open stream of the table.

        Returns
        -------
        int
            Number of rows loaded.

        Raises
        ------
        ParseError
            On a row with fewer than two fields or a non-numeric mass, naming the line number.
        """
        n_loaded = 0
        for line_number, name, mass_str in read_two_column_table(source):
            self.add(name, parse_float(mass_str, line_number, "mass"))
            n_loaded += 1

        logger.info(f"Loaded {n_loaded} modifications from table")
        return n_loaded

    def parse_mod_string(self, mod_string: str, sequence: str) -> list[Modification]:
        """Parse a modification list like ``57.021464@2;15.994915@8`` or ``Carbamidomethyl@C2;Oxidation@M8``.

        Each entry is either a numeric mass or a name known to the database, followed by a position.
        Positions may start with a residue letter, positive positions are 1-based and
        converted to 0-based, ``-1`` marks the N-terminus.

        Raises
        ------
        ValueError
            On a malformed entry, an unknown name or an invalid position.
        """
        modifications = []
        if not mod_string:
            return modifications

        for part in mod_string.split(";"):
            part = part.strip()
            if not part:
                continue

            at_parts = part.split("@")
            if len(at_parts) != 2:
                raise ValueError(
                    f"invalid modification format '{part}', expected 'name@position' or 'mass@position'"
                )

            name_or_mass = at_parts[0].strip()
            try:
                mass = float(name_or_mass)
            except ValueError:
                mass, found = self.get_mass(name_or_mass)
                if not found:
                    raise ValueError(
                        f"unknown modification '{name_or_mass}'"
                    ) from None

            position = parse_position(at_parts[1], sequence)
            modifications.append(
                Modification(mass=mass, position=position, name=name_or_mass)
            )

        return modifications


def parse_position(position_str: str, sequence: str = "") -> int:
    """Parse a 1-based position with optional leading residue letter into a 0-based index.

    Examples: ``2`` -> 1, ``C2`` -> 1, ``R-1`` -> `N_TERMINAL`, ``0`` -> 0.
    """
    position_str = position_str.strip()

    if position_str.endswith("-1"):
        return N_TERMINAL

    position = int(position_str.lstrip(AMINO_ACID_LETTERS))

    if position > 0:
        position -= 1

    return position


def parse_mods_field(value: str) -> list[tuple[int, str, str]]:
    """Parse a positional modification list ``count/pos,residue,name/pos,residue,name...``.

    Positions are used as written: 0-based residue indices, ``-1`` for the N-terminus.

    Returns
    -------
    list[tuple[int, str, str]]
        ``(position, residue, name)`` per declared modification.

    Raises
    ------
    ValueError
        If the count or a position is not an integer, the count is negative,
        or a group does not have three fields.
    """
    count_str, *groups = value.split("/")
    count = int(count_str)
    if count < 0:
        raise ValueError(f"invalid modification count '{count_str}'")

    parsed = []
    for group in groups[:count]:
        fields = group.split(",")
        if len(fields) < 3:
            raise ValueError(f"invalid modification group '{group}'")
        parsed.append((int(fields[0]), fields[1], fields[2]))

    return parsed


def default_modification_database() -> ModificationDatabase:
    """Create a new `ModificationDatabase` pre-populated with common unimod modifications."""
    return ModificationDatabase(DEFAULT_MODIFICATIONS)
