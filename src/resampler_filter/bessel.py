#!/usr/bin/env python3
"""
Zero-order modified Bessel function of the first kind
=====================================================

I0 is the normalizer of the Kaiser window. It is evaluated here by its
power series rather than through ``scipy.special.i0`` so the generated
tables depend only on this arithmetic:

    I0(x) = sum_{i>=0} ((x/2)^(2i) / (i!)^2)

Each term is computed directly from ``pow`` and a running factorial. This is
accurate for the arguments a Kaiser window of up to ~120 dB produces but
overflows for large ``x``.
"""

import logging
from typing import Optional, Union

import numpy as np

# A term below this ends the series before it is added.
SERIES_THRESHOLD = 1.0e-21

ArrayLike = Union[float, np.ndarray]


def bessel_i0(x: ArrayLike, log: Optional[logging.Logger] = None) -> ArrayLike:
    """
    Evaluate I0(x) by its power series.

    Parameters
    ----------
    x : float or np.ndarray
        Argument(s). Arrays are evaluated element-wise, each element
        stopping at its own first term below ``SERIES_THRESHOLD``.
    log : Logger, optional
        Logger for overflow warnings

    Returns
    -------
    float or np.ndarray
        I0(x), a float for scalar input
    """
    if log is None:
        log = logging.getLogger(__name__)

    scalar = np.ndim(x) == 0
    xdiv2 = np.atleast_1d(np.asarray(x, dtype=np.float64)) / 2.0

    i0 = np.ones_like(xdiv2)
    active = np.ones(xdiv2.shape, dtype=bool)
    f = 1.0
    i = 1

    with np.errstate(over='ignore', invalid='ignore'):
        while active.any():
            term = np.power(xdiv2, i * 2) / np.power(f, 2)
            active &= ~(term < SERIES_THRESHOLD)
            i0[active] += term[active]
            # an overflowed sum can never fall below the threshold
            active &= np.isfinite(i0)
            i += 1
            f *= float(i)

    if not np.all(np.isfinite(i0)):
        log.warning("I0 series overflowed for %d argument(s), max |x| = %.3g",
                    np.count_nonzero(~np.isfinite(i0)), np.max(np.abs(xdiv2)) * 2.0)

    if scalar:
        return float(i0[0])
    return i0
