import numpy as np
import pytest

from resampler_filter.sinc_table_gen import build_filter_tables
from resampler_filter.verification import (
    measure_stopband,
    mirror_kernel,
    plot_filter_response,
    verify_filter_tables,
)


def test_mirror_kernel_is_symmetric(reference_tables):
    table, _ = reference_tables
    kernel = mirror_kernel(table)
    assert len(kernel) == 2 * len(table) - 1
    assert kernel[len(table) - 1] == 1.0
    np.testing.assert_array_equal(kernel, kernel[::-1])


def test_reference_tables_pass(reference_params, reference_tables):
    results = verify_filter_tables(*reference_tables, reference_params)
    assert results['all_pass']
    assert results['diff_error'] == 0.0
    assert results['measured_stopband_db'] > 60.0
    assert results['theoretical_stopband_db'] == pytest.approx(reference_params.stopband_attenuation_db)


def test_stopband_skipped_when_beyond_nyquist(toy_params):
    table, diffs = build_filter_tables(toy_params)
    assert measure_stopband(table, toy_params) is None
    results = verify_filter_tables(table, diffs, toy_params)
    assert 'stopband_pass' not in results


def test_corrupted_tables_fail(reference_params, reference_tables):
    table, diffs = (t.copy() for t in reference_tables)
    table[0] = np.float32(0.5)
    diffs[-1] = np.float32(0.1)
    results = verify_filter_tables(table, diffs, reference_params)
    assert not results['peak_pass']
    assert not results['sentinel_pass']
    assert not results['diff_pass']
    assert not results['all_pass']


def test_plot_returns_figure(toy_params):
    import matplotlib.pyplot as plt

    table, _ = build_filter_tables(toy_params)
    fig = plot_filter_response(table, toy_params, show=False)
    assert len(fig.axes) == 2
    plt.close(fig)
