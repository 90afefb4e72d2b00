import pytest
from conftest import text_stream

from dbkey.exceptions import ParseError
from dbkey.reader.sptxt import SptxtReader, strip_inline_mods
from dbkey.spectrum import N_TERMINAL


def read_all(text, modification_database):
    reader = SptxtReader(text_stream(text), modification_database)
    return list(reader), reader


def mod_tuples(modifications):
    return [(mod.mass, mod.position, mod.name) for mod in modifications]


def test_strip_inline_mods():
    # when
    sequence, modifications = strip_inline_mods("n[305]AC[160]DE")

    # then
    assert sequence == "ACDE"
    assert mod_tuples(modifications) == [
        (305.0, N_TERMINAL, "305"),
        (160.0, 1, "160"),
    ]


@pytest.mark.parametrize(
    "raw, expected_sequence, expected_mods",
    [
        ("PEPTIDE", "PEPTIDE", []),
        ("", "", []),
        ("[43]PEPTIDE", "PEPTIDE", [(43.0, N_TERMINAL)]),
        ("C[160]PEPTIDE", "CPEPTIDE", [(160.0, 0)]),
        ("PEPTIDEK[136]", "PEPTIDEK", [(136.0, 7)]),
        ("AC[160]C[160]K", "ACCK", [(160.0, 1), (160.0, 2)]),
        (
            "n[305]AAAAQDEITGDGTTTVVC[160]LVGELLR",
            "AAAAQDEITGDGTTTVVCLVGELLR",
            [(305.0, N_TERMINAL), (160.0, 17)],
        ),
        ("M[147.0354]K", "MK", [(147.0354, 0)]),
        ("PEPTIDEc[17]", "PEPTIDE", [(17.0, 7)]),
        ("AS[-18]K", "ASK", [(-18.0, 1)]),
        ("C[160][16]K", "CK", [(160.0, 0), (16.0, N_TERMINAL)]),
    ],
)
def test_strip_inline_mods_positions(raw, expected_sequence, expected_mods):
    # when
    sequence, modifications = strip_inline_mods(raw)

    # then
    assert sequence == expected_sequence
    assert [(mod.mass, mod.position) for mod in modifications] == expected_mods


def test_strip_inline_mods_positions_point_to_residue():
    # given
    raw = "n[230]GS[167]PEM[147]TK[358]"

    # when
    sequence, modifications = strip_inline_mods(raw)

    # then
    assert sequence == "GSPEMTK"
    residues = [
        sequence[mod.position] for mod in modifications if mod.position != N_TERMINAL
    ]
    assert residues == ["S", "M", "K"]


def test_read_library(sptxt_text, modification_database):
    # when
    spectra, reader = read_all(sptxt_text, modification_database)

    # then
    assert reader.error is None
    assert [spectrum.name for spectrum in spectra] == ["ACDE/2", "PEPTIDE/2"]

    first = spectra[0]
    assert first.precursor_mz == 0.0
    assert first.retention_time == 1834.5
    assert first.collision_energy == 25.0
    assert [peak.annotation for peak in first.peaks] == ["y1", "b2"]
    assert first.source_format == "sptxt"


def test_comment_mods_rename_inline_mods(sptxt_text, modification_database):
    # when
    spectra, _ = read_all(sptxt_text, modification_database)

    # then
    assert mod_tuples(spectra[0].modifications) == [
        (305.0, N_TERMINAL, "TMTPro"),
        (160.0, 1, "Carbamidomethyl"),
    ]


def test_comment_mods_add_missing_positions(modification_database):
    # given
    text = "Name: PEPTMIDE/2\nComment: Mods=1/4,M,Oxidation\nNumPeaks: 1\n100 1\n"

    # when
    spectra, _ = read_all(text, modification_database)

    # then
    assert len(spectra[0].modifications) == 1
    assert spectra[0].modifications[0].position == 4
    assert spectra[0].modifications[0].mass == pytest.approx(15.994915)


def test_comment_parent_overrides_header(sptxt_text, modification_database):
    # when
    spectra, _ = read_all(sptxt_text, modification_database)

    # then
    assert spectra[1].precursor_mz == 400.6


def test_comment_lines_are_skipped(modification_database):
    # given
    text = "### header\nName: AAA/1\n### inside\nNumPeaks: 1\n### peaks\n100 1\n"

    # when
    spectra, reader = read_all(text, modification_database)

    # then
    assert reader.error is None
    assert len(spectra[0].peaks) == 1


def test_invalid_charge_names_line(modification_database):
    # given
    reader = SptxtReader(
        text_stream("### comment\nName: n[305]AAA/\nNumPeaks: 0\n"),
        modification_database,
    )

    # when
    assert not reader.advance()

    # then
    assert isinstance(reader.error, ParseError)
    assert reader.error.line_number == 2


def test_unparseable_precursor_mz_is_ignored(modification_database):
    spectra, reader = read_all(
        "Name: AAA/1\nPrecursorMZ: n/a\nNumPeaks: 1\n100 1\n", modification_database
    )

    assert reader.error is None
    assert spectra[0].precursor_mz == 0.0
