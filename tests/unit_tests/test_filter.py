import copy

import pytest
from conftest import mock_spectrum

from dbkey.config import Config
from dbkey.exceptions import ConfigError
from dbkey.filter import (
    FilterConfig,
    FragmentMassAdjustment,
    IntensityCutoffFilter,
    IonTypeFilter,
    NonPositiveIntensityFilter,
    PeakSorter,
    ProcessingPipeline,
    TopNFilter,
)
from dbkey.spectrum import N_TERMINAL, Modification

FILTER_SECTION = {
    "top_n": 0,
    "intensity_cutoff": 0.0,
    "ion_types": [],
    "old_mod_mass": 0.0,
    "new_mod_mass": 0.0,
}

PEAKS = [
    (100.0, 10.0, "y1"),
    (150.0, 50.0, "b2^2"),
    (200.0, 40.0, "b2"),
    (250.0, 5.0, ""),
    (300.0, 100.0, "y2"),
    (350.0, 25.0, "y10^2"),
    (400.0, 1.0, "?"),
]


def annotations(spectrum):
    return [peak.annotation for peak in spectrum.peaks]


def mzs(spectrum):
    return [peak.mz for peak in spectrum.peaks]


def test_ion_type_filter():
    # given
    spectrum = mock_spectrum(peaks=PEAKS)

    # when
    IonTypeFilter(["y"])(spectrum)

    # then
    assert annotations(spectrum) == ["y1", "y2", "y10^2"]


def test_ion_type_filter_is_case_sensitive():
    # given
    spectrum = mock_spectrum(peaks=[(100.0, 1.0, "Y1"), (200.0, 1.0, "y1")])

    # when
    IonTypeFilter(["y"])(spectrum)

    # then
    assert annotations(spectrum) == ["y1"]


def test_intensity_cutoff_keeps_threshold():
    # given
    spectrum = mock_spectrum(peaks=PEAKS)

    # when
    IntensityCutoffFilter(25.0)(spectrum)

    # then
    assert [peak.intensity for peak in spectrum.peaks] == [50.0, 40.0, 100.0, 25.0]


def test_intensity_cutoff_empty():
    # given
    spectrum = mock_spectrum(peaks=[])

    # when
    IntensityCutoffFilter(50.0)(spectrum)

    # then
    assert spectrum.peaks == []


def test_top_n():
    # given
    spectrum = mock_spectrum(peaks=PEAKS)

    # when
    TopNFilter(3)(spectrum)

    # then
    assert [peak.intensity for peak in spectrum.peaks] == [100.0, 50.0, 40.0]


def test_top_n_ties_keep_input_order():
    # given
    spectrum = mock_spectrum(
        peaks=[(100.0, 5.0, "a"), (200.0, 9.0, "b"), (300.0, 5.0, "c")]
    )

    # when
    TopNFilter(2)(spectrum)

    # then
    assert annotations(spectrum) == ["b", "a"]


@pytest.mark.parametrize("top_n", [7, 8, 100])
def test_top_n_larger_than_peak_count_is_noop(top_n):
    # given
    spectrum = mock_spectrum(peaks=PEAKS)
    expected = copy.deepcopy(spectrum.peaks)

    # when
    TopNFilter(top_n)(spectrum)

    # then
    assert spectrum.peaks == expected


def test_non_positive_intensity_filter():
    # given
    spectrum = mock_spectrum(
        peaks=[(100.0, 0.0, "y1"), (200.0, -1.0, "y2"), (300.0, 1e-9, "y3")]
    )

    # when
    NonPositiveIntensityFilter()(spectrum)

    # then
    assert annotations(spectrum) == ["y3"]


def test_fragment_mass_adjustment_b_ion():
    # given
    old_mass, new_mass = 229.16, 304.21
    spectrum = mock_spectrum(
        sequence="KPEPTIDE",
        peaks=[(300.0, 1.0, "b2")],
        modifications=[Modification(mass=229.16, position=0)],
    )

    # when
    FragmentMassAdjustment(old_mass, new_mass)(spectrum)

    # then
    assert spectrum.peaks[0].mz == pytest.approx(300.0 + (304.21 - 229.16))


def test_fragment_mass_adjustment_rules():
    # given
    spectrum = mock_spectrum(
        sequence="PEPTIDEK",
        peaks=[
            (100.0, 1.0, "b1"),
            (200.0, 1.0, "b2^2"),
            (300.0, 1.0, "y1"),
            (400.0, 1.0, "y2^2"),
            (500.0, 1.0, "p"),
            (600.0, 1.0, ""),
        ],
        modifications=[
            Modification(mass=229.162932, position=1),
            Modification(mass=57.021464, position=7),
        ],
    )
    delta = 304.207146 - 229.162932

    # when
    FragmentMassAdjustment(229.162932, 304.207146)(spectrum)

    # then b ions from position 1 on are shifted, y ions need position >= 8 - 1 - 1
    assert mzs(spectrum) == pytest.approx(
        [100.0 + delta, 200.0 + delta / 2, 300.0, 400.0, 500.0, 600.0]
    )


def test_fragment_mass_adjustment_c_terminal_ion():
    # given
    spectrum = mock_spectrum(
        sequence="PEPTIDEK",
        peaks=[(300.0, 1.0, "y1"), (400.0, 1.0, "y2")],
        modifications=[Modification(mass=229.162932, position=7)],
    )

    # when
    FragmentMassAdjustment(229.162932, 304.207146)(spectrum)

    # then
    delta = 304.207146 - 229.162932
    assert mzs(spectrum) == pytest.approx([300.0 + delta, 400.0 + delta])


def test_fragment_mass_adjustment_compares_six_decimals():
    # given
    spectrum = mock_spectrum(
        sequence="KAAA",
        peaks=[(300.0, 1.0, "b2")],
        modifications=[Modification(mass=229.1629321, position=N_TERMINAL)],
    )

    # when
    FragmentMassAdjustment(229.162932, 304.207146)(spectrum)

    # then
    assert spectrum.peaks[0].mz == pytest.approx(300.0 + 304.207146 - 229.162932)


def test_fragment_mass_adjustment_other_mass_untouched():
    # given
    spectrum = mock_spectrum(
        peaks=[(300.0, 1.0, "b2")],
        modifications=[Modification(mass=229.17, position=0)],
    )

    # when
    FragmentMassAdjustment(229.16, 304.21)(spectrum)

    # then
    assert spectrum.peaks[0].mz == 300.0


def test_peak_sorter():
    # given
    spectrum = mock_spectrum(peaks=list(reversed(PEAKS)))

    # when
    PeakSorter()(spectrum)

    # then
    assert mzs(spectrum) == sorted(mz for mz, _, _ in PEAKS)


def test_step_rejects_non_spectrum():
    with pytest.raises(ValueError):
        PeakSorter()("not a spectrum")


def test_pipeline_runs_steps_in_order():
    # given
    spectrum = mock_spectrum(peaks=PEAKS)
    pipeline = ProcessingPipeline([TopNFilter(2), IonTypeFilter(["b"])])

    # when
    pipeline(spectrum)

    # then top 2 are y2 and b2^2, only the b ion survives
    assert annotations(spectrum) == ["b2^2"]


def test_filter_config_order():
    # given
    filter_config = FilterConfig(
        top_n=2, intensity_cutoff=10.0, ion_types=["y"], old_mod_mass=1.0, new_mod_mass=2.0
    )

    # when
    pipeline = filter_config.build_pipeline()

    # then
    assert [step.__class__ for step in pipeline.steps] == [
        IonTypeFilter,
        IntensityCutoffFilter,
        TopNFilter,
        FragmentMassAdjustment,
        PeakSorter,
    ]


@pytest.mark.parametrize(
    "filter_config",
    [
        FilterConfig(),
        FilterConfig(old_mod_mass=229.16),
        FilterConfig(new_mod_mass=304.21),
    ],
)
def test_disabled_filters_only_sort(filter_config):
    assert [step.__class__ for step in filter_config.build_pipeline().steps] == [
        PeakSorter
    ]


def test_apply_sorts_peaks():
    # given
    spectrum = mock_spectrum(peaks=list(reversed(PEAKS)))

    # when
    FilterConfig(top_n=3).apply(spectrum)

    # then
    assert [peak.intensity for peak in spectrum.peaks] == [50.0, 40.0, 100.0]
    assert spectrum.peaks_sorted()


def test_apply_is_idempotent():
    # given
    filter_config = FilterConfig(top_n=4, intensity_cutoff=20.0, ion_types=["y", "b"])
    spectrum = mock_spectrum(peaks=PEAKS)
    filter_config.apply(spectrum)
    once = copy.deepcopy(spectrum.peaks)

    # when
    filter_config.apply(spectrum)

    # then
    assert spectrum.peaks == once


def test_filter_config_from_config():
    # given
    config = Config(
        {
            "filter": {
                "top_n": 5,
                "intensity_cutoff": 1,
                "ion_types": ["b", "y"],
                "old_mod_mass": 0.0,
                "new_mod_mass": 0.0,
            }
        }
    )

    # when
    filter_config = FilterConfig.from_config(config)

    # then
    assert filter_config == FilterConfig(top_n=5, intensity_cutoff=1.0, ion_types=["b", "y"])


def test_filter_config_top_n_whole_float_is_accepted():
    # given
    config = Config({"filter": {**FILTER_SECTION, "top_n": 4.0}})

    # when
    filter_config = FilterConfig.from_config(config)

    # then
    assert filter_config.top_n == 4


@pytest.mark.parametrize("top_n", [2.5, True])
def test_filter_config_top_n_must_be_whole_number(top_n):
    # given
    config = Config({"filter": {**FILTER_SECTION, "top_n": top_n}})

    # when
    with pytest.raises(ConfigError) as exc_info:
        FilterConfig.from_config(config)

    # then
    assert "top_n" in exc_info.value.detail_msg
