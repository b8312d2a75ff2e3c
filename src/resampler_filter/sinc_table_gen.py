#!/usr/bin/env python3
"""
Resampler Filter Table Generator - Kaiser-Windowed Sinc
=======================================================

Builds the two static tables a bandlimited-interpolation resampler consumes:

- ``ResamplerFilter``: one half of a Kaiser-windowed sinc kernel, index 0
  holding the peak (exactly 1.0) and the last index the tail.
- ``ResamplerFilterDifference``: ``table[i+1] - table[i]`` for every entry,
  with the final slot pinned to 0.0, so the runtime can linearly
  interpolate between taps with a single multiply-add.

Window and sinc math run in float64; values are narrowed to float32 where
they are stored, and the differences are taken between the stored float32
values.

CLI examples
------------
# Reference table (5 zero crossings, 16 bits, 80 dB) to stdout:
gen-resampler-filter > SDL_audio_resampler_filter.h

# Different tap count, with verification and an npz archive:
gen-resampler-filter --zero-crossings 8 --attenuation 96 \\
    --output filter.h --npz filter --verify
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Tuple, Dict, Any

import numpy as np

from .bessel import bessel_i0
from .emitter import render_header, write_header
from .params import ConfigurationError, FilterParameters


def offset_to_storage_index(offset):
    """
    Map a center-relative window offset to its table slot.

    The window is evaluated at ``offset = i - lenm1`` for ``i`` in
    ``[1, lenm1]`` and written to ``table[filter_size - i]``, which is
    ``1 - offset``: offset 0 (the window peak) lands in slot 1 and the most
    negative offset in the last slot. Slot 0 is never written by the window;
    it holds the kernel peak.
    """
    return 1 - offset


def kaiser_window(offsets, lenm1: int, beta: float) -> np.ndarray:
    """
    Kaiser window at center-relative offsets, in float64.

    Parameters
    ----------
    offsets : array_like of int
        Offsets from the window center, within ``[-lenm1, lenm1]``
    lenm1 : int
        Table length minus one
    beta : float
        Kaiser shape parameter
    """
    lenm1div2 = lenm1 // 2
    pos = (np.asarray(offsets) / 2.0) / lenm1div2
    return bessel_i0(beta * np.sqrt(1.0 - pos ** 2)) / bessel_i0(beta)


def _check_table_shape(filter_size: int, beta: float) -> None:
    if filter_size < 3 or filter_size % 2 == 0:
        raise ConfigurationError(f"filter_size must be odd and >= 3, got {filter_size}")
    if beta < 0:
        raise ConfigurationError(f"Kaiser beta must be >= 0, got {beta}")


def build_kaiser_window(filter_size: int, beta: float) -> np.ndarray:
    """Return the window-only half table as stored (float32), before the sinc."""
    _check_table_shape(filter_size, beta)

    lenm1 = filter_size - 1
    offsets = np.arange(1, filter_size) - lenm1

    table = np.empty(filter_size, dtype=np.float32)
    table[0] = 1.0
    table[offset_to_storage_index(offsets)] = kaiser_window(offsets, lenm1, beta).astype(np.float32)
    return table


def build_kaiser_sinc_table(
    filter_size: int,
    beta: float,
    samples_per_zero_crossing: int
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Kaiser window with the cardinal sine applied, plus the difference table.

    Parameters
    ----------
    filter_size : int
        Table length, odd and >= 3
    beta : float
        Kaiser shape parameter, >= 0
    samples_per_zero_crossing : int
        Table entries between two sinc zero crossings

    Returns
    -------
    table : np.ndarray
        float32, shape (filter_size,)
    diffs : np.ndarray
        float32, shape (filter_size,), last entry exactly 0.0
    """
    if samples_per_zero_crossing < 1:
        raise ConfigurationError(
            f"samples_per_zero_crossing must be >= 1, got {samples_per_zero_crossing}")

    table = build_kaiser_window(filter_size, beta)
    lenm1 = filter_size - 1

    # x is never 0 here; table[0] is sinc(0) * window peak = 1.0
    x = (np.arange(1, filter_size, dtype=np.float64) / samples_per_zero_crossing) * np.pi
    table[1:] = (table[1:].astype(np.float64) * (np.sin(x) / x)).astype(np.float32)

    diffs = np.empty(filter_size, dtype=np.float32)
    diffs[:lenm1] = table[1:] - table[:-1]
    diffs[lenm1] = 0.0

    return table, diffs


def build_filter_tables(
    params: FilterParameters,
    log: Optional[logging.Logger] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Build ``(table, diffs)`` for a parameter set."""
    if log is None:
        log = logging.getLogger(__name__)

    t0 = time.perf_counter()

    log.info("Generating resampler filter tables:")
    log.info("  Zero crossings: %d", params.zero_crossings)
    log.info("  Bits per sample: %d", params.bits_per_sample)
    log.info("  Samples per zero crossing: %d", params.samples_per_zero_crossing)
    log.info("  Table size: %d", params.filter_size)
    log.info("  Stopband: %.1f dB (β=%.6f)", params.stopband_attenuation_db, params.beta)

    table, diffs = build_kaiser_sinc_table(
        params.filter_size, params.beta, params.samples_per_zero_crossing
    )

    log.info("Tables generated in %.3f seconds", time.perf_counter() - t0)
    return table, diffs


def save_filter_tables(
    table: np.ndarray,
    diffs: np.ndarray,
    params: FilterParameters,
    basename: str,
    log: Optional[logging.Logger] = None
) -> Path:
    """Save both tables with parameter metadata to ``<basename>.npz``."""
    if log is None:
        log = logging.getLogger(__name__)

    npz_path = Path(f"{basename}.npz")
    metadata: Dict[str, Any] = params.to_dict()
    metadata['samples_per_zero_crossing'] = params.samples_per_zero_crossing
    metadata['filter_size'] = params.filter_size
    metadata['kaiser_beta'] = params.beta
    metadata['command_line'] = ' '.join(sys.argv)
    metadata['numpy_version'] = np.__version__

    np.savez(npz_path,
             table=table.astype(np.float32),
             diffs=diffs.astype(np.float32),
             metadata=metadata)

    log.info("Saved tables and metadata to %s", npz_path)
    return npz_path


def load_filter_tables(npz_path) -> Tuple[np.ndarray, np.ndarray, FilterParameters]:
    """Load tables saved by :func:`save_filter_tables`."""
    with np.load(npz_path, allow_pickle=True) as data:
        metadata = data['metadata'].item()
        params = FilterParameters(
            zero_crossings=int(metadata['zero_crossings']),
            bits_per_sample=int(metadata['bits_per_sample']),
            stopband_attenuation_db=float(metadata['stopband_attenuation_db']),
        )
        return data['table'], data['diffs'], params


def main(argv=None) -> int:
    defaults = FilterParameters()
    parser = argparse.ArgumentParser(
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description="Generate the Kaiser-windowed sinc tables of a bandlimited "
                    "audio resampler as C static data."
    )

    g = parser.add_argument_group("Filter")
    g.add_argument('--zero-crossings', '-z', type=int, default=defaults.zero_crossings,
                   help='Sinc zero crossings on each side of the kernel center')
    g.add_argument('--bits-per-sample', '-b', type=int, default=defaults.bits_per_sample,
                   help='Sets the table resolution: 2^(bits/2 + 1) entries per zero crossing')
    g.add_argument('--attenuation', '-a', type=float, default=defaults.stopband_attenuation_db,
                   help='Target stopband attenuation in dB (must be > 50)')

    g = parser.add_argument_group("Output")
    g.add_argument('--output', '-o', type=Path,
                   help='Write the header here instead of stdout')
    g.add_argument('--banner', type=Path,
                   help='Text file (e.g. a license) emitted as a leading comment')
    g.add_argument('--npz', metavar='BASENAME',
                   help='Also save both tables and metadata to BASENAME.npz')

    g = parser.add_argument_group("Verification")
    g.add_argument('--verify', '-v', action='store_true',
                   help='Run the verification suite and fail on any FAIL')
    g.add_argument('--plot', action='store_true',
                   help='Show the magnitude response of the full kernel')

    g = parser.add_argument_group("Misc")
    g.add_argument('--debug', '-d', action='store_true',
                   help='Enable DEBUG-level logging')
    g.add_argument('--log-file', type=str,
                   help='Also write log output to this file')

    args = parser.parse_args(argv)

    log_handlers = [logging.StreamHandler(sys.stderr)]
    if args.log_file:
        log_format = "%(asctime)s - %(levelname)s - %(message)s"
        log_handlers.append(logging.FileHandler(args.log_file, mode='w'))
    else:
        log_format = "%(levelname)s: %(message)s"

    logging.basicConfig(
        handlers=log_handlers,
        level=logging.DEBUG if args.debug else logging.INFO,
        format=log_format
    )
    log = logging.getLogger('resampler_filter')

    try:
        params = FilterParameters(
            zero_crossings=args.zero_crossings,
            bits_per_sample=args.bits_per_sample,
            stopband_attenuation_db=args.attenuation,
        )
    except ConfigurationError as e:
        parser.error(str(e))

    table, diffs = build_filter_tables(params, log)

    if args.verify or args.plot:
        from .verification import verify_filter_tables, plot_filter_response

        if args.verify and not verify_filter_tables(table, diffs, params, log)['all_pass']:
            log.error("Verification FAILED!")
            return 1
        if args.plot:
            plot_filter_response(table, params)

    banner = args.banner.read_text(encoding="utf-8") if args.banner else None
    write_header(render_header(params, table, diffs, banner=banner), args.output)
    if args.output:
        log.info("Wrote %s", args.output)

    if args.npz:
        save_filter_tables(table, diffs, params, args.npz, log)

    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as e:
        logging.error("Fatal: %s", e)
        logging.debug("Traceback:", exc_info=True)
        sys.exit(1)
