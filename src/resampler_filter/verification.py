#!/usr/bin/env python3
"""
Verification tools for the generated resampler tables.
"""

import logging
from typing import Dict, Any, Optional

import numpy as np
from scipy import signal, special
import matplotlib.pyplot as plt

from .bessel import bessel_i0
from .params import FilterParameters, kaiser_beta_to_attenuation


def mirror_kernel(table: np.ndarray) -> np.ndarray:
    """Full symmetric kernel (length ``2*len(table) - 1``) from the half table."""
    table = np.asarray(table, dtype=np.float64)
    return np.concatenate((table[:0:-1], table))


def measure_stopband(table: np.ndarray, params: FilterParameters,
                     worN: int = 65536) -> Optional[float]:
    """
    Worst stopband level of the full kernel relative to its DC gain, in dB
    below DC. The stopband starts at twice the sinc cutoff. Returns None if
    that lies beyond Nyquist.
    """
    cutoff = 1.0 / params.samples_per_zero_crossing
    w, h = signal.freqz(mirror_kernel(table), worN=worN)
    f_n = w / np.pi
    stopband_mask = f_n >= 2.0 * cutoff
    if not stopband_mask.any():
        return None
    mag_db = 20 * np.log10(np.abs(h) / np.abs(h[0]) + 1e-300)
    return float(-np.max(mag_db[stopband_mask]))


def verify_filter_tables(
    table: np.ndarray,
    diffs: np.ndarray,
    params: FilterParameters,
    log: Optional[logging.Logger] = None
) -> Dict[str, Any]:
    """Run the verification suite. ``results['all_pass']`` summarizes it."""
    if log is None:
        log = logging.getLogger(__name__)

    log.info("Running verification suite...")
    results: Dict[str, Any] = {}
    all_pass = True

    # Test 1: Peak
    peak_pass = table[0] == 1.0
    log.info("Test 1 - Peak: %s (table[0] = %.9f)", "PASS" if peak_pass else "FAIL", table[0])
    results['peak_pass'] = bool(peak_pass)
    all_pass &= peak_pass

    # Test 2: Interpolation sentinel
    sentinel_pass = diffs[-1] == 0.0
    log.info("Test 2 - Last difference: %s (%.9f)",
             "PASS" if sentinel_pass else "FAIL", diffs[-1])
    results['sentinel_pass'] = bool(sentinel_pass)
    all_pass &= sentinel_pass

    # Test 3: Differences match the table
    expected = table[1:].astype(np.float32) - table[:-1].astype(np.float32)
    diff_error = float(np.max(np.abs(diffs[:-1] - expected))) if len(expected) else 0.0
    diff_pass = diff_error <= np.finfo(np.float32).eps
    log.info("Test 3 - Difference table: %s (max error: %.2e)",
             "PASS" if diff_pass else "FAIL", diff_error)
    results['diff_error'] = diff_error
    results['diff_pass'] = bool(diff_pass)
    all_pass &= diff_pass

    # Test 4: Magnitude bound and tail decay
    spzc = params.samples_per_zero_crossing
    peak_abs = float(np.max(np.abs(table)))
    head = float(np.max(np.abs(table[:spzc])))
    tail = float(np.max(np.abs(table[-spzc:])))
    bound_pass = peak_abs <= 1.0
    decay_pass = abs(table[-1]) < abs(table[0]) and (params.zero_crossings == 1 or tail < head)
    log.info("Test 4 - Magnitude: %s (max |h| = %.9f, head %.3e, tail %.3e)",
             "PASS" if bound_pass and decay_pass else "FAIL", peak_abs, head, tail)
    results['bound_pass'] = bool(bound_pass)
    results['decay_pass'] = bool(decay_pass)
    all_pass &= bound_pass and decay_pass

    # Test 5: Series I0 against scipy over the window's argument range
    args = np.linspace(0.0, params.beta, 64)
    ours = bessel_i0(args)
    bessel_error = float(np.max(np.abs(ours - special.i0(args)) / special.i0(args)))
    bessel_pass = bessel_error < 1e-12
    log.info("Test 5 - I0 series: %s (max rel. error vs scipy: %.2e)",
             "PASS" if bessel_pass else "FAIL", bessel_error)
    results['bessel_error'] = bessel_error
    results['bessel_pass'] = bool(bessel_pass)
    all_pass &= bessel_pass

    # Test 6: Stopband of the full kernel
    stopband = measure_stopband(table, params)
    theoretical = kaiser_beta_to_attenuation(params.beta)
    results['theoretical_stopband_db'] = theoretical
    if stopband is None:
        log.info("Test 6 - Stopband: skipped (stopband lies beyond Nyquist)")
    else:
        stopband_pass = stopband >= theoretical * 0.8
        log.info("Test 6 - Stopband: %s (actual: %.1f dB, theory: %.1f dB, need: %.1f dB)",
                 "PASS" if stopband_pass else "FAIL", stopband, theoretical, theoretical * 0.8)
        results['measured_stopband_db'] = stopband
        results['stopband_pass'] = bool(stopband_pass)
        all_pass &= stopband_pass

    if all_pass:
        log.info("All verification tests PASSED")
    else:
        log.error("Some verification tests FAILED - review filter parameters")

    results['all_pass'] = bool(all_pass)
    return results


def plot_filter_response(table: np.ndarray, params: FilterParameters, show: bool = True):
    """Plot the kernel and the magnitude response of the full kernel."""
    kernel = mirror_kernel(table)
    w, h = signal.freqz(kernel, worN=65536)
    mag_db = 20 * np.log10(np.abs(h) / np.abs(h[0]) + 1e-300)
    cutoff = 1.0 / params.samples_per_zero_crossing

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8))

    taps = (np.arange(len(kernel)) - (len(table) - 1)) / params.samples_per_zero_crossing
    ax1.plot(taps, kernel)
    ax1.set_xlabel('Position (zero crossings)')
    ax1.set_ylabel('Amplitude')
    ax1.set_title('Kaiser-windowed sinc kernel')
    ax1.grid(True, alpha=0.3)

    ax2.plot(w / np.pi, mag_db)
    ax2.axhline(-params.stopband_attenuation_db, color='r', linestyle='--',
                label=f'Target: -{params.stopband_attenuation_db} dB')
    ax2.axvline(cutoff, color='g', linestyle='--', label='Sinc cutoff')
    ax2.set_xlim(0, min(1.0, 8 * cutoff))
    ax2.set_xlabel('Normalized Frequency')
    ax2.set_ylabel('Magnitude (dB)')
    ax2.set_title('Frequency Response')
    ax2.grid(True, alpha=0.3)
    ax2.legend()
    ax2.set_ylim(-200, 5)

    plt.tight_layout()
    if show:
        plt.show()
    return fig
