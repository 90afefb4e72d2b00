"""Monoisotopic peptide mass and m/z calculation.

Masses are computed from the elemental composition (C, H, N, O, S) of each residue plus one water.
Residue letters without a known composition contribute nothing.
"""

from collections.abc import Iterable

import numpy as np

from dbkey.spectrum import Modification

# monoisotopic atomic masses
MASS_H = 1.0078250321
MASS_C = 12.0000000000
MASS_N = 14.0030740052
MASS_O = 15.9949146221
MASS_S = 31.9720706900

PROTON_MASS = 1.00727646688

# element order of all composition vectors
ELEMENTS = ("C", "H", "N", "O", "S")
ELEMENT_MASSES = np.array([MASS_C, MASS_H, MASS_N, MASS_O, MASS_S], dtype=np.float64)

WATER_COMPOSITION = np.array([0, 2, 0, 1, 0], dtype=np.int64)

AMINO_ACID_COMPOSITION = {
    "A": np.array([3, 5, 1, 1, 0], dtype=np.int64),
    "R": np.array([6, 12, 4, 1, 0], dtype=np.int64),
    "N": np.array([4, 6, 2, 2, 0], dtype=np.int64),
    "D": np.array([4, 5, 1, 3, 0], dtype=np.int64),
    "C": np.array([3, 5, 1, 1, 1], dtype=np.int64),
    "E": np.array([5, 7, 1, 3, 0], dtype=np.int64),
    "Q": np.array([5, 8, 2, 2, 0], dtype=np.int64),
    "G": np.array([2, 3, 1, 1, 0], dtype=np.int64),
    "H": np.array([6, 7, 3, 1, 0], dtype=np.int64),
    "I": np.array([6, 11, 1, 1, 0], dtype=np.int64),
    "L": np.array([6, 11, 1, 1, 0], dtype=np.int64),
    "K": np.array([6, 12, 2, 1, 0], dtype=np.int64),
    "M": np.array([5, 9, 1, 1, 1], dtype=np.int64),
    "F": np.array([9, 9, 1, 1, 0], dtype=np.int64),
    "P": np.array([5, 7, 1, 1, 0], dtype=np.int64),
    "S": np.array([3, 5, 1, 2, 0], dtype=np.int64),
    "T": np.array([4, 7, 1, 2, 0], dtype=np.int64),
    "W": np.array([11, 10, 2, 1, 0], dtype=np.int64),
    "Y": np.array([9, 9, 1, 2, 0], dtype=np.int64),
    "V": np.array([5, 9, 1, 1, 0], dtype=np.int64),
}


def peptide_composition(sequence: str) -> np.ndarray:
    """Elemental composition of a peptide including the terminal water, in `ELEMENTS` order."""
    composition = WATER_COMPOSITION.copy()
    for residue in sequence:
        residue_composition = AMINO_ACID_COMPOSITION.get(residue)
        if residue_composition is not None:
            composition += residue_composition
    return composition


def neutral_mass(
    sequence: str, modifications: Iterable[Modification] | None = None
) -> float:
    """Neutral monoisotopic mass of a modified peptide.

    Parameters
    ----------
    sequence : str
        Unmodified residue letters.

    modifications : Iterable[Modification], optional
        Modifications whose mass shifts are added to the unmodified mass.

    Returns
    -------
    float
        Neutral monoisotopic mass in Da.
    """
    mass = float(np.dot(peptide_composition(sequence), ELEMENT_MASSES))

    for mod in modifications or ():
        mass += mod.mass

    return mass


def peptide_mz(
    sequence: str, charge: int, modifications: Iterable[Modification] | None = None
) -> float:
    """m/z of a modified peptide with `charge` protons. `charge` must be at least 1."""
    mass = neutral_mass(sequence, modifications)
    return (mass + charge * PROTON_MASS) / charge
