import pytest
from conftest import mock_spectrum

from dbkey.spectrum import (
    N_TERMINAL,
    IonAnnotation,
    Modification,
    parse_ion_annotation,
)


def test_spectrum_name():
    assert mock_spectrum(sequence="AAA", charge=3).name == "AAA/3"


def test_sort_peaks():
    # given
    spectrum = mock_spectrum(
        peaks=[(300.0, 1.0, "y2"), (100.0, 2.0, "y1"), (200.0, 3.0, "b2")]
    )
    assert not spectrum.peaks_sorted()

    # when
    spectrum.sort_peaks()

    # then
    assert [peak.mz for peak in spectrum.peaks] == [100.0, 200.0, 300.0]
    assert spectrum.peaks_sorted()


def test_sort_peaks_is_stable():
    # given
    spectrum = mock_spectrum(
        peaks=[(200.0, 1.0, "first"), (100.0, 2.0, "y1"), (200.0, 3.0, "second")]
    )

    # when
    spectrum.sort_peaks()

    # then
    assert [peak.annotation for peak in spectrum.peaks] == ["y1", "first", "second"]


def test_equal_mz_counts_as_sorted():
    assert mock_spectrum(peaks=[(100.0, 1.0, ""), (100.0, 2.0, "")]).peaks_sorted()


def test_modification_string():
    # given
    spectrum = mock_spectrum(
        modifications=[
            Modification(mass=57.021464, position=3),
            Modification(mass=229.162932, position=N_TERMINAL),
        ]
    )

    # then
    assert spectrum.modification_string() == "57.021464@3;229.162932@-1"
    assert spectrum.total_modification_mass() == pytest.approx(286.184396)


def test_modification_string_empty():
    assert mock_spectrum().modification_string() == ""


def test_find_modification():
    # given
    oxidation = Modification(mass=15.994915, position=4, name="Oxidation")
    spectrum = mock_spectrum(modifications=[oxidation])

    # then
    assert spectrum.find_modification(4) is oxidation
    assert spectrum.find_modification(N_TERMINAL) is None


@pytest.mark.parametrize(
    "annotation, expected",
    [
        ("y3", IonAnnotation("y", 3, 1)),
        ("b2^2", IonAnnotation("b", 2, 2)),
        ("y10^3", IonAnnotation("y", 10, 3)),
        ("y3-17^2", IonAnnotation("y", 3, 1)),
        ("?", None),
        ("", None),
        ("Y3", None),
        ("p", None),
    ],
)
def test_parse_ion_annotation(annotation, expected):
    assert parse_ion_annotation(annotation) == expected
