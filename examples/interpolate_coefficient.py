#!/usr/bin/env python3
"""
Example: look up interpolated coefficients the way a runtime resampler does.

A tap at fractional position p = index + frac reads

    ResamplerFilter[index] + frac * ResamplerFilterDifference[index]

and each output sample combines 2 * zero_crossings such coefficients.
"""

import logging

import numpy as np

from resampler_filter import FilterParameters, build_filter_tables


def interpolated_coefficients(table, diffs, params, frac):
    """Coefficients for one output sample at sub-sample offset ``frac``."""
    spzc = params.samples_per_zero_crossing
    positions = np.concatenate((
        (np.arange(params.zero_crossings) + frac) * spzc,        # left wing
        (np.arange(params.zero_crossings) + 1.0 - frac) * spzc,  # right wing
    ))
    index = positions.astype(np.int64)
    return table[index] + (positions - index) * diffs[index]


def main():
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    params = FilterParameters()
    table, diffs = build_filter_tables(params)

    print(f"Table size: {params.filter_size} ({params.samples_per_zero_crossing} per zero crossing)")
    for frac in (0.0, 0.25, 0.5):
        coeffs = interpolated_coefficients(table, diffs, params, frac)
        print(f"frac={frac:.2f}: {len(coeffs)} taps, sum={coeffs.sum():.6f}")


if __name__ == '__main__':
    main()
