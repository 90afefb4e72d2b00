import os
import tempfile
from io import BytesIO, StringIO

import pytest

from dbkey.modifications import default_modification_database
from dbkey.spectrum import Modification, Peak, Spectrum

MSP_LIBRARY = """Name: PEPTIDE/2
MW: 799.3600
Comment: Parent=400.5 Collision_energy=30 iRT=35.2
Num peaks: 3
100.0	1000.0	"y1"
200.0	500.0	"b2/0.3ppm"
300.0	0.0	"y2"

Name: AACDEK/3
Comment: Parent=230.1 Mods=1/2,C,Carbamidomethyl ModString=AACDEK//Carbamidomethyl@C2/3
Num peaks: 2
150.0	10.0	"b1"
250.0	20.0	"y1^2/1.2ppm"
"""

SPTXT_LIBRARY = """### SpectraST library
### ===
Name: n[305]AC[160]DE/2
LibID: 0
MW: 928.3
PrecursorMZ: 0
Comment: Mods=2/-1,A,TMTPro/1,C,Carbamidomethyl RetentionTime=1834.5,1801.2,1870.1 CollisionEnergy=25
NumPeaks: 2
147.1128	1000.0	y1/0.00	1/1	0.0
300.0	400.0	b2/0.01	1/1	0.0

Name: PEPTIDE/2
LibID: 1
PrecursorMZ: 400.7
Comment: Parent=400.6
NumPeaks: 1
100.0	1000.0	y1/0.00
"""


def random_tempfolder():
    """Create a randomly named temp folder in the system temp folder

    Returns
    -------
    path : str
        Path to the created temp folder

    """
    tempdir = tempfile.gettempdir()
    # 6 alphanumeric characters
    random_foldername = "dbkey_" + str(
        "".join([chr(ord("a") + i % 26) for i in os.urandom(6)])
    )
    path = os.path.join(tempdir, random_foldername)
    os.makedirs(path, exist_ok=True)
    return path


def text_stream(text: str) -> StringIO:
    return StringIO(text)


def binary_stream(text: str) -> BytesIO:
    return BytesIO(text.encode("utf-8"))


def mock_spectrum(
    sequence: str = "PEPTIDE",
    charge: int = 2,
    peaks: list[tuple[float, float, str]] | None = None,
    modifications: list[Modification] | None = None,
) -> Spectrum:
    """Create a valid spectrum for filter, validation and sink tests.

    Parameters
    ----------
    peaks : list[tuple[float, float, str]], optional
        ``(mz, intensity, annotation)`` per peak.
    """
    if peaks is None:
        peaks = [(100.0, 10.0, "y1"), (200.0, 40.0, "b2"), (300.0, 20.0, "y2")]

    return Spectrum(
        sequence=sequence,
        charge=charge,
        precursor_mz=400.0,
        peaks=[
            Peak(mz=mz, intensity=intensity, annotation=annotation)
            for mz, intensity, annotation in peaks
        ],
        fragmentation_mode="HCD",
        mass_analyzer="FT",
        modifications=modifications if modifications is not None else [],
    )


@pytest.fixture
def modification_database():
    return default_modification_database()


@pytest.fixture
def msp_text():
    return MSP_LIBRARY


@pytest.fixture
def sptxt_text():
    return SPTXT_LIBRARY
