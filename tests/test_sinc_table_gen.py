import numpy as np
import pytest

from resampler_filter.params import ConfigurationError, FilterParameters
from resampler_filter.sinc_table_gen import (
    build_filter_tables,
    build_kaiser_sinc_table,
    build_kaiser_window,
    kaiser_window,
    load_filter_tables,
    offset_to_storage_index,
    save_filter_tables,
)


def test_tables_shape_and_dtype(reference_params, reference_tables):
    table, diffs = reference_tables
    assert table.shape == (reference_params.filter_size,)
    assert diffs.shape == (reference_params.filter_size,)
    assert table.dtype == np.float32
    assert diffs.dtype == np.float32


def test_peak_is_exactly_one(reference_tables, toy_params):
    assert reference_tables[0][0] == 1.0
    table, _ = build_filter_tables(toy_params)
    assert table[0] == 1.0


def test_last_difference_is_exactly_zero(reference_tables, toy_params):
    assert reference_tables[1][-1] == 0.0
    _, diffs = build_filter_tables(toy_params)
    assert diffs[-1] == 0.0


def test_differences_match_table(reference_tables):
    table, diffs = reference_tables
    np.testing.assert_array_equal(diffs[:-1], table[1:] - table[:-1])


def test_magnitude_bounded_and_decaying(reference_params, reference_tables):
    table, _ = reference_tables
    spzc = reference_params.samples_per_zero_crossing
    assert np.max(np.abs(table)) <= 1.0

    lobe_peaks = [np.max(np.abs(table[k * spzc:(k + 1) * spzc]))
                  for k in range(reference_params.zero_crossings)]
    assert all(a > b for a, b in zip(lobe_peaks, lobe_peaks[1:]))
    assert abs(table[-1]) < 1e-3


def test_storage_index_mapping():
    lenm1 = 10
    # offset 0 is the window peak, the most negative offset the tail
    assert offset_to_storage_index(0) == 1
    assert offset_to_storage_index(1 - lenm1) == lenm1
    offsets = np.arange(1, lenm1 + 1) - lenm1
    np.testing.assert_array_equal(offset_to_storage_index(offsets), lenm1 + 1 - np.arange(1, lenm1 + 1))


def test_kaiser_window_is_symmetric():
    lenm1 = 2560
    offsets = np.arange(-lenm1, lenm1 + 1)
    window = kaiser_window(offsets, lenm1, 7.85726)
    np.testing.assert_allclose(window, window[::-1], rtol=0, atol=1e-15)
    assert window[lenm1] == pytest.approx(1.0)


def test_window_table_is_half_window(reference_params):
    params = reference_params
    window = build_kaiser_window(params.filter_size, params.beta)
    lenm1 = params.filter_size - 1
    assert window[0] == 1.0
    assert window[1] == np.float32(1.0)
    # slot k holds the window at offset 1 - k
    k = np.arange(1, params.filter_size)
    expected = kaiser_window(1 - k, lenm1, params.beta).astype(np.float32)
    np.testing.assert_array_equal(window[1:], expected)
    assert np.all(np.diff(window[1:]) <= 0)


def test_sinc_zero_crossings(reference_params, reference_tables):
    table, _ = reference_tables
    spzc = reference_params.samples_per_zero_crossing
    crossings = table[spzc::spzc]
    assert len(crossings) == reference_params.zero_crossings
    np.testing.assert_allclose(crossings, 0.0, atol=1e-6)


def test_toy_table_size(toy_params):
    table, diffs = build_filter_tables(toy_params)
    assert len(table) == len(diffs) == 11


def test_deterministic(reference_params, reference_tables):
    table, diffs = build_filter_tables(reference_params)
    assert table.tobytes() == reference_tables[0].tobytes()
    assert diffs.tobytes() == reference_tables[1].tobytes()


def test_zero_beta_is_plain_sinc():
    table, _ = build_kaiser_sinc_table(9, 0.0, 4)
    x = np.arange(1, 9) / 4 * np.pi
    np.testing.assert_allclose(table[1:], np.sin(x) / x, atol=1e-7)


@pytest.mark.parametrize("size,beta,spzc", [
    (10, 7.0, 4),
    (1, 7.0, 4),
    (9, -1.0, 4),
    (9, 7.0, 0),
])
def test_invalid_table_arguments(size, beta, spzc):
    with pytest.raises(ConfigurationError):
        build_kaiser_sinc_table(size, beta, spzc)


def test_linear_interpolation_stays_between_taps(reference_tables):
    table, diffs = reference_tables
    for index in (0, 100, 1024, len(table) - 2):
        for frac in (0.0, 0.25, 0.5, 0.999):
            value = table[index] + frac * diffs[index]
            lo, hi = sorted((table[index], table[index + 1]))
            assert lo - 1e-7 <= value <= hi + 1e-7


def test_npz_round_trip(tmp_path, toy_params):
    table, diffs = build_filter_tables(toy_params)
    path = save_filter_tables(table, diffs, toy_params, str(tmp_path / "toy"))
    assert path.exists()

    loaded_table, loaded_diffs, loaded_params = load_filter_tables(path)
    np.testing.assert_array_equal(loaded_table, table)
    np.testing.assert_array_equal(loaded_diffs, diffs)
    assert loaded_params == toy_params


def test_other_parameters_build(caplog):
    params = FilterParameters(zero_crossings=8, bits_per_sample=12, stopband_attenuation_db=96.0)
    with caplog.at_level("INFO"):
        table, diffs = build_filter_tables(params)
    assert len(table) == 8 * 128 + 1
    assert table[0] == 1.0 and diffs[-1] == 0.0
    assert "Table size: 1025" in caplog.text
