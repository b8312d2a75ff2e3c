#!/usr/bin/env python3
"""
Render the filter tables as C static data.

The header carries the two input constants as literals and the derived sizes
as macros, so the consuming code recomputes ``RESAMPLER_FILTER_SIZE`` rather
than trusting a hardcoded length.
"""

import sys
from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np

from .params import FilterParameters

VALUES_PER_ROW = 5
INDENT = "    "
DEFAULT_GENERATOR = "resampler_filter.sinc_table_gen"

PREAMBLE = (
    "#define RESAMPLER_ZERO_CROSSINGS {zero_crossings}\n"
    "#define RESAMPLER_BITS_PER_SAMPLE {bits_per_sample}\n"
    "#define RESAMPLER_SAMPLES_PER_ZERO_CROSSING (1 << ((RESAMPLER_BITS_PER_SAMPLE / 2) + 1))\n"
    "#define RESAMPLER_FILTER_SIZE ((RESAMPLER_SAMPLES_PER_ZERO_CROSSING * RESAMPLER_ZERO_CROSSINGS) + 1)\n"
)

TRAILER = "/* vi: set ts=4 sw=4 expandtab: */\n"


class TableFormatError(ValueError):
    """Raised when tables do not satisfy the layout the runtime relies on."""


def format_float(value) -> str:
    # float32 -> double is exact, so this matches printf("%.9ff")
    return f"{float(value):.9f}f"


def format_float_array(values: Iterable) -> str:
    """Comma-separated float literals, ``VALUES_PER_ROW`` per indented row."""
    literals = [format_float(v) for v in values]
    rows = [", ".join(literals[i:i + VALUES_PER_ROW])
            for i in range(0, len(literals), VALUES_PER_ROW)]
    return INDENT + (",\n" + INDENT).join(rows)


def render_array(name: str, values: Iterable) -> str:
    return (
        f"static const float {name}[RESAMPLER_FILTER_SIZE] = {{\n"
        f"{format_float_array(values)}\n"
        "};\n"
    )


def format_banner(text: str) -> str:
    """Wrap free text (usually a license) in a C block comment."""
    body = "\n".join(("  " + line).rstrip() for line in text.strip("\n").splitlines())
    return f"/*\n{body}\n*/\n"


def check_tables(params: FilterParameters, table: np.ndarray, diffs: np.ndarray) -> None:
    size = params.filter_size
    if len(table) != size or len(diffs) != size:
        raise TableFormatError(
            f"Tables must both have {size} entries, got {len(table)} and {len(diffs)}")
    if diffs[-1] != 0.0:
        raise TableFormatError(f"Last difference must be exactly 0.0, got {diffs[-1]!r}")


def render_header(
    params: FilterParameters,
    table: np.ndarray,
    diffs: np.ndarray,
    generator: str = DEFAULT_GENERATOR,
    banner: Optional[str] = None
) -> str:
    """
    Render both tables as a C header.

    Parameters
    ----------
    params : FilterParameters
        Parameters the tables were built from
    table, diffs : np.ndarray
        Filter and difference tables, ``params.filter_size`` entries each
    generator : str
        Named in the "do not edit" comment
    banner : str, optional
        Text emitted first as a block comment

    Returns
    -------
    str
        The header text
    """
    check_tables(params, table, diffs)

    parts = []
    if banner:
        parts.append(format_banner(banner) + "\n")
    parts.append(f"/* DO NOT EDIT, THIS FILE WAS GENERATED BY {generator} */\n\n")
    parts.append(PREAMBLE.format(zero_crossings=params.zero_crossings,
                                 bits_per_sample=params.bits_per_sample) + "\n")
    parts.append(render_array("ResamplerFilter", table) + "\n")
    parts.append(render_array("ResamplerFilterDifference", diffs) + "\n")
    parts.append(TRAILER)
    return "".join(parts)


def write_header(text: str, path: Optional[Union[str, Path]] = None) -> None:
    """Write the header to ``path``, or stdout when no path is given."""
    if path is None:
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        Path(path).write_text(text, encoding="utf-8")
