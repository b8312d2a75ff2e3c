"""
resampler_filter - Kaiser-windowed sinc tables for bandlimited resampling.
"""

from .bessel import bessel_i0
from .params import FilterParameters, ConfigurationError, kaiser_beta
from .sinc_table_gen import build_filter_tables, build_kaiser_sinc_table
from .emitter import render_header, TableFormatError

__version__ = "0.1.0"
__all__ = [
    "bessel_i0",
    "FilterParameters",
    "ConfigurationError",
    "kaiser_beta",
    "build_filter_tables",
    "build_kaiser_sinc_table",
    "render_header",
    "TableFormatError",
]
